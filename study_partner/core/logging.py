"""Logging setup and FlightLogger circular-buffer handler for forensics."""

import logging
import sys
from collections import deque
from datetime import datetime, timezone
from pathlib import Path

from study_partner.core.config import get_config

FLIGHT_LOG_CAPACITY = 10_000
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_flight_logger: "FlightLogger | None" = None


class FlightLogger(logging.Handler):
    """
    Circular buffer handler: keeps the last `capacity` log records (all levels) in memory.
    dump(label) writes the buffer to {forensics_dir}/{label}_{timestamp}.log.
    """

    def __init__(
        self,
        capacity: int = FLIGHT_LOG_CAPACITY,
        forensics_dir: str | Path | None = None,
    ) -> None:
        super().__init__(level=logging.DEBUG)
        self._buffer: deque[logging.LogRecord] = deque(maxlen=capacity)
        self._forensics_dir = Path(
            forensics_dir if forensics_dir is not None else Path.cwd() / "logs" / "forensics"
        )

    def emit(self, record: logging.LogRecord) -> None:
        self._buffer.append(record)

    def dump(self, label: str) -> str:
        """Write buffer to forensics dir; return path to the written file."""
        self._forensics_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        filepath = self._forensics_dir / f"{label}_{timestamp}.log"
        formatter = self.formatter or logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
        with open(filepath, "w") as f:
            for record in list(self._buffer):
                f.write(formatter.format(record) + "\n")
        return str(filepath)

    def __len__(self) -> int:
        return len(self._buffer)


def get_flight_logger() -> FlightLogger | None:
    """Return the FlightLogger installed by setup_logging(), if any."""
    return _flight_logger


def setup_logging(level: str | None = None) -> None:
    """
    Configure application logging.

    The root logger is set to DEBUG so every record reaches the FlightLogger buffer;
    the console handler only shows records at `level` (default: config log_level) or above.
    Calling again replaces the handlers instead of duplicating them.
    """
    global _flight_logger
    cfg = get_config()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in root.handlers[:]:
        root.removeHandler(h)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel((level or cfg.log_level).upper())
    console.setFormatter(formatter)
    root.addHandler(console)

    flight = FlightLogger(capacity=FLIGHT_LOG_CAPACITY, forensics_dir=cfg.forensics_dir)
    flight.setFormatter(formatter)
    root.addHandler(flight)
    _flight_logger = flight
