import argparse
import sys
import threading
import time
from pathlib import Path

# Ensure local repo package is used even if an installed copy is on PYTHONPATH.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from prometheus_client import CollectorRegistry

from usbioboard import BoardExporter, load_config
from usbioboard.core.metrics import GaugeFactory
from usbioboard.core.topology import port_index
from usbioboard.sim import SimulatedBoard, SimulatedLocator


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poll a simulated I/O board and toggle its inputs.")
    parser.add_argument("--config", default="examples/lls.yml", help="Path to YAML config file")
    parser.add_argument("--steps", type=int, default=5, help="Number of toggles to print")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    board_cfg = load_config(args.config).devices[0]
    board = SimulatedBoard(bus=board_cfg.bus or 1, device=board_cfg.device or 1)
    registry = CollectorRegistry()
    exporter = BoardExporter(board_cfg, SimulatedLocator([board]), GaugeFactory(registry))

    thread = threading.Thread(target=exporter.run, daemon=True)
    thread.start()

    delay = board_cfg.read_delay * 2
    for step in range(args.steps):
        for pin in board_cfg.pins:
            board.set_input(port_index(pin.port), pin.pin, step % 2)
        time.sleep(delay)
        values = {
            pin.name: registry.get_sample_value(f"{board_cfg.prefix}_{pin.name}", pin.labels)
            for pin in board_cfg.pins
        }
        print(f"input={step % 2}", values)

    exporter.stop()


if __name__ == "__main__":
    main()
