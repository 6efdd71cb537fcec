"""Entry point for the M² POS Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from m2pos.config import DB_PATH, LOG_LEVEL, LOG_PATH
from m2pos.persistence import KeyValueStore, PosStorage
from m2pos.pos_app import PosApp
from m2pos.pos_state import PosState


def configure_logging(log_path: str = LOG_PATH, level: str = LOG_LEVEL) -> None:
    """Send log records to a file; the terminal belongs to the app."""
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=path,
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def main() -> None:
    """Run the Textual application."""
    configure_logging()
    storage = PosStorage(KeyValueStore(DB_PATH))
    PosApp(PosState.load(storage)).run()


if __name__ == "__main__":
    main()
