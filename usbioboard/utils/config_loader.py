"""Helpers for loading and validating exporter configuration.

Parsing is strict: unknown keys, missing required keys and values of the
wrong type are rejected with a ConfigurationError naming the key path.
Port and pin legality is not checked here; the board initializer owns it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml  # type: ignore[import-untyped]

from usbioboard.core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "/etc/lls-exporter/lls.yml"
DEFAULT_LISTEN = ":8080"
DEFAULT_PREFIX = "ioboard"
DEFAULT_READ_DELAY_MS = 1000


@dataclass(frozen=True)
class PinConfig:
    name: str
    port: str
    pin: int
    help: str = ""
    pull_up: bool = False
    revert: bool = False
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BoardConfig:
    bus: int = 0
    device: int = 0
    prefix: str = DEFAULT_PREFIX
    read_delay_ms: int = DEFAULT_READ_DELAY_MS
    pins: tuple[PinConfig, ...] = ()

    @property
    def read_delay(self) -> float:
        """Poll interval in seconds."""
        return self.read_delay_ms / 1000.0


@dataclass(frozen=True)
class ExporterConfig:
    listen: str = DEFAULT_LISTEN
    devices: tuple[BoardConfig, ...] = ()

    @property
    def listen_address(self) -> tuple[str, int]:
        return parse_listen_address(self.listen)


_PIN_KEYS = {"name", "help", "port", "pin", "pull_up", "revert", "labels"}
_BOARD_KEYS = {"bus", "device", "prefix", "read_delay_ms", "pins"}
_ROOT_KEYS = {"listen", "devices"}


def _check_keys(raw: Any, allowed: set[str], path: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ConfigurationError(path or "configuration", "expected a mapping")
    unknown = sorted(str(k) for k in raw if k not in allowed)
    if unknown:
        prefix = f"{path}." if path else ""
        raise ConfigurationError(f"{prefix}{unknown[0]}", "unknown field")
    return raw


def _require(raw: dict[str, Any], key: str, path: str) -> Any:
    if key not in raw or raw[key] is None:
        raise ConfigurationError(f"{path}.{key}", "required field is missing")
    return raw[key]


def _as_int(value: Any, key: str) -> int:
    # bool is an int subclass; YAML "yes" must not become pin 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(key, f"expected an integer, got {value!r}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(key, f"expected a boolean, got {value!r}")
    return value


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(key, f"expected a string, got {value!r}")
    return value


def _as_labels(value: Any, key: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(key, "expected a mapping of label names to values")
    labels: dict[str, str] = {}
    for name, label_value in value.items():
        labels[_as_str(name, key)] = str(label_value)
    return labels


def _build_pin_cfg(raw: Any, path: str) -> PinConfig:
    raw = _check_keys(raw, _PIN_KEYS, path)
    return PinConfig(
        name=_as_str(_require(raw, "name", path), f"{path}.name"),
        port=str(_require(raw, "port", path)),
        pin=_as_int(_require(raw, "pin", path), f"{path}.pin"),
        help=_as_str(raw.get("help") or "", f"{path}.help"),
        pull_up=_as_bool(raw.get("pull_up", False), f"{path}.pull_up"),
        revert=_as_bool(raw.get("revert", False), f"{path}.revert"),
        labels=_as_labels(raw.get("labels"), f"{path}.labels"),
    )


def _build_board_cfg(raw: Any, path: str) -> BoardConfig:
    raw = _check_keys(raw, _BOARD_KEYS, path)
    pins_raw = raw.get("pins") or []
    if not isinstance(pins_raw, list):
        raise ConfigurationError(f"{path}.pins", "expected a list")

    read_delay_ms = _as_int(raw.get("read_delay_ms", DEFAULT_READ_DELAY_MS), f"{path}.read_delay_ms")
    if read_delay_ms <= 0:
        raise ConfigurationError(f"{path}.read_delay_ms", "must be positive")

    return BoardConfig(
        bus=_as_int(raw.get("bus", 0), f"{path}.bus"),
        device=_as_int(raw.get("device", 0), f"{path}.device"),
        prefix=_as_str(raw.get("prefix", DEFAULT_PREFIX), f"{path}.prefix"),
        read_delay_ms=read_delay_ms,
        pins=tuple(_build_pin_cfg(p, f"{path}.pins[{i}]") for i, p in enumerate(pins_raw)),
    )


def _parse_exporter_cfg_from_dict(raw: Any) -> ExporterConfig:
    if raw is None:
        raw = {}
    raw = _check_keys(raw, _ROOT_KEYS, "")
    devices_raw = raw.get("devices") or []
    if not isinstance(devices_raw, list):
        raise ConfigurationError("devices", "expected a list")

    cfg = ExporterConfig(
        listen=_as_str(raw.get("listen", DEFAULT_LISTEN), "listen"),
        devices=tuple(_build_board_cfg(d, f"devices[{i}]") for i, d in enumerate(devices_raw)),
    )
    # fail fast on a bad listen address
    parse_listen_address(cfg.listen)
    return cfg


def parse_listen_address(listen: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts. An empty host binds all interfaces."""
    host, sep, port_text = listen.rpartition(":")
    if not sep:
        raise ConfigurationError("listen", f"expected host:port, got {listen!r}")
    try:
        port = int(port_text)
    except ValueError as exc:
        raise ConfigurationError("listen", f"invalid port {port_text!r}") from exc
    if not 0 <= port <= 65535:
        raise ConfigurationError("listen", f"port {port} out of range")
    return host.strip("[]"), port


def _load_yaml_file(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigurationError(f"Failed to read config: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse config: {exc}") from exc

    return raw


def load_config(path: Optional[Union[str, Path]] = None) -> ExporterConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the YAML config. Defaults to DEFAULT_CONFIG_PATH.

    Returns:
        ExporterConfig instance

    Raises:
        ConfigurationError: on read, parse or validation errors
    """

    p = Path(path if path is not None else DEFAULT_CONFIG_PATH)
    raw = _load_yaml_file(p)

    return _parse_exporter_cfg_from_dict(raw)
