# logger.py - Centralized logging configuration
import os
import logging
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"


def build_file_handler(log_file, level=logging.INFO):
    """Rotating file handler shared by the named loggers and app.logger"""
    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10240,
        backupCount=10
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(level)
    return file_handler


def setup_logger(name, log_file=None, level=logging.INFO):
    """Set up a logger with file rotation"""
    if not log_file:
        log_file = os.path.join(os.environ.get("LOG_DIR", "logs"), f"{name}.log")

    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if not logger.handlers:
        logger.setLevel(level)
        logger.addHandler(build_file_handler(log_file, level))

        # Console handler for development
        if os.environ.get("FLASK_ENV") != "production":
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG)
            console_handler.setFormatter(logging.Formatter(
                "%(name)s - %(levelname)s - %(message)s"
            ))
            logger.addHandler(console_handler)

    return logger

# Parent of every ledger.* module logger
ledger_logger = setup_logger("ledger")
