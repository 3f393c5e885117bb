"""Custom exceptions used throughout the usbioboard package."""

from typing import Any, Optional


class IoBoardError(Exception):
    """Base exception for all I/O board errors.

    All package-specific exceptions inherit from this class so callers can
    catch every board failure with a single except clause.
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error (bus, device, pin...)
        """

        super().__init__(message)
        self.details = details or {}


class ConfigurationError(IoBoardError):
    """Raised when a board cannot be started because of its configuration.

    This includes:
    - Invalid port letter or disallowed pin
    - Pull-up requested on a port without pull-up support
    - Device not found or failing to open
    - Any register write failing during initialization
    - Malformed configuration files
    """

    def __init__(
        self,
        config_key: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize configuration error.

        Args:
            config_key: The configuration key that caused the error
            message: Description of what's wrong. If omitted, config_key is
                treated as the message and the key defaults to "configuration".
            details: Additional context
        """
        if message is None:
            message = config_key or "Invalid configuration"
            config_key = "configuration"
        if config_key is None:
            config_key = "configuration"

        full_message = f"Configuration error for '{config_key}': {message}"
        super().__init__(message=full_message, details=details)
        self.config_key = config_key


class DeviceNotFoundError(ConfigurationError):
    """Raised when no attached board matches the bus/device selector."""

    def __init__(self, bus: int, device: int):
        super().__init__(
            "device",
            f"ioboard device not found (bus={bus}, device={device})",
            details={"bus": bus, "device": device},
        )
        self.bus = bus
        self.device = device


class TransportError(IoBoardError):
    """Raised when a raw transport operation fails.

    Examples:
    - The device could not be opened
    - A write or read was rejected by the operating system
    """


class TransportTimeoutError(TransportError):
    """Raised when no response arrives within the transport timeout."""

    def __init__(self, timeout: float, details: Optional[dict[str, Any]] = None):
        super().__init__(f"no response within {timeout * 1000:.0f} ms", details=details)
        self.timeout = timeout


class ProtocolError(TransportError):
    """Raised when a response frame cannot be parsed.

    Examples:
    - Response shorter than the two bytes carrying opcode and result
    """
