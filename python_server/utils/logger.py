import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from datetime import datetime

ROOT_LOGGER_NAME = "extforge"
DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs")
LOG_FILE_NAME = "extforge_server.log"


def key_value_formatter(record):
    """Formats log record as key-value pairs for easy parsing."""
    timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
    # Quotes inside the message would break naive key=value parsers
    message = record.getMessage().replace('"', "'")
    log_entry = f"timestamp={timestamp} level={record.levelname} logger={record.name} message=\"{message}\""

    if record.exc_info and record.exc_info[0] is not None:
        log_entry += f" exception=\"{record.exc_info[0].__name__}: {record.exc_info[1]}\""

    return log_entry


class KeyValueFormatter(logging.Formatter):
    def format(self, record):
        return key_value_formatter(record)


def setup_logging(log_dir: str = None, level: str = "INFO") -> logging.Logger:
    """
    Attach handlers to the package root logger. Safe to call more than once;
    handlers from a previous call are replaced, so tests can point logs at a
    temporary directory.
    - Structured file log (Key-Value), rotated at 5MB with 5 backups
    - Console output for dev
    """
    log_dir = log_dir or os.environ.get("EXTFORGE_LOG_DIR") or DEFAULT_LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(KeyValueFormatter())
    root.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(
        '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%H:%M:%S'
    ))
    root.addHandler(console_handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Child of the package root logger; handlers live on the root only."""
    if not logging.getLogger(ROOT_LOGGER_NAME).handlers:
        setup_logging()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


# Global logger for general server events
server_logger = get_logger("server")
