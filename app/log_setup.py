"""Process-wide logging configuration shared by the server and the CLI."""
import logging

from app import config

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging, adding a file handler when LOG_FILE is set."""
    handlers = [logging.StreamHandler()]
    if config.LOG_FILE:
        handlers.append(logging.FileHandler(config.LOG_FILE, encoding="utf-8"))

    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
    )
