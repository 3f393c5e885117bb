"""
Pytest configuration and shared fixtures for the usbioboard test suite.
"""

import sys
import tempfile
from pathlib import Path

import pytest
import yaml
from prometheus_client import CollectorRegistry

# Ensure project root is on PYTHONPATH so 'usbioboard' can be imported
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from usbioboard.core.metrics import GaugeFactory  # noqa: E402
from usbioboard.sim import SimulatedBoard, SimulatedLocator, SimulatedTransport  # noqa: E402


@pytest.fixture
def temp_yaml_file():
    """
    Fixture that provides a temporary YAML file.

    Yields:
        Path: Path to the temporary YAML file
    """
    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".yml",
        delete=False,
    ) as f:
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    if temp_path.exists():
        temp_path.unlink()


DOOR_PIN = {
    "name": "door_open",
    "help": "Door contact",
    "port": "B",
    "pin": 2,
    "pull_up": True,
    "revert": True,
    "labels": {"room": "server"},
}

SMOKE_PIN = {
    "name": "smoke",
    "help": "Smoke detector relay",
    "port": "a",
    "pin": 0,
}

LEAK_PIN = {
    "name": "leak",
    "help": "Water leak sensor",
    "port": "D",
    "pin": 5,
    "revert": False,
    "labels": {"room": "server", "floor": "1"},
}


@pytest.fixture
def valid_exporter_config_dict():
    """
    Fixture providing a complete valid exporter configuration dictionary.
    """
    return {
        "listen": "127.0.0.1:9100",
        "devices": [
            {
                "bus": 1,
                "device": 4,
                "prefix": "rack",
                "read_delay_ms": 250,
                "pins": [DOOR_PIN, SMOKE_PIN, LEAK_PIN],
            },
            {
                "pins": [SMOKE_PIN],
            },
        ],
    }


@pytest.fixture
def minimal_exporter_config_dict():
    """
    Fixture providing a minimal valid configuration dictionary.

    Returns:
        dict: A configuration relying on every default
    """
    return {"devices": [{"pins": [{"name": "in0", "port": "A", "pin": 0}]}]}


@pytest.fixture
def temp_config_yaml_file(temp_yaml_file, valid_exporter_config_dict):
    """
    Fixture that creates a temporary YAML file with valid configuration.

    Yields:
        Path: Path to the temporary YAML file with valid configuration
    """
    with open(temp_yaml_file, "w", encoding="utf-8") as f:
        yaml.dump(valid_exporter_config_dict, f)

    yield temp_yaml_file


@pytest.fixture
def registry():
    """A private collector registry so tests never touch the global one."""
    return CollectorRegistry()


@pytest.fixture
def gauges(registry):
    return GaugeFactory(registry)


@pytest.fixture
def sim_board():
    return SimulatedBoard(bus=1, device=4)


@pytest.fixture
def sim_transport(sim_board):
    transport = SimulatedTransport(sim_board)
    transport.open()
    yield transport
    transport.close()


@pytest.fixture
def sim_locator(sim_board):
    return SimulatedLocator([sim_board])


def pytest_configure(config):
    """
    Hook for initial pytest configuration.

    Used to add custom markers and configuration.
    """
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests",
    )
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
