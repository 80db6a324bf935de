# distviz/logging_setup.py

import logging
import logging.handlers
import os
import sys

# --- Configuration ---
# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIRECTORY = "./logs"
DEFAULT_LOG_FILENAME = "distviz.log"

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# File rotation settings
LOG_ROTATION_WHEN = "midnight"
LOG_ROTATION_INTERVAL = 1
LOG_ROTATION_BACKUP_COUNT = 7


def setup_logging(level: str = None, log_directory: str = None, log_to_file: bool = True) -> logging.Logger:
    """
    Configures logging for the application.
    Sets up console and rotating file handlers on the root logger.
    Should be called once at the application start; calling it again
    replaces the handlers instead of duplicating them.

    Args:
        level: Log level name; falls back to $LOG_LEVEL, then INFO.
        log_directory: Directory for the log file; falls back to $LOG_DIRECTORY.
        log_to_file: Disable to log to the console only.

    Returns:
        The configured root logger.
    """
    level_str = (level or os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()
    log_level = getattr(logging, level_str, logging.INFO)
    log_directory = log_directory or os.getenv("LOG_DIRECTORY", DEFAULT_LOG_DIRECTORY)
    log_file_path = os.path.join(log_directory, os.getenv("LOG_FILENAME", DEFAULT_LOG_FILENAME))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    file_handler = None
    if log_to_file:
        try:
            os.makedirs(log_directory, exist_ok=True)
            file_handler = logging.handlers.TimedRotatingFileHandler(
                filename=log_file_path,
                when=LOG_ROTATION_WHEN,
                interval=LOG_ROTATION_INTERVAL,
                backupCount=LOG_ROTATION_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
        except OSError as e:
            print(f"Error [Logging Setup]: Failed to create file handler for '{log_file_path}': {e}", file=sys.stderr)
            file_handler = None

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Avoid duplicate handlers when called again (e.g. from tests)
    if root_logger.hasHandlers():
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.addHandler(console_handler)
    if file_handler is not None:
        root_logger.addHandler(file_handler)

    initial_message = f"Logging configured. Level: {level_str}."
    if file_handler is not None:
        initial_message += f" Log file: '{log_file_path}'"
    root_logger.info(initial_message)

    # matplotlib is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    return root_logger
