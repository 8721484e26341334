import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from logging.handlers import RotatingFileHandler

# Same files the settings read, found from the backend dir rather than the cwd
BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(BACKEND_DIR / "configs/secrets/.env")
load_dotenv(BACKEND_DIR / "configs/.env")

LOG_DIRECTORY = os.getenv("LOG_DIRECTORY", str(BACKEND_DIR / "logs"))
LOG_NAME = os.getenv("LOG_NAME", "wip_planner.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 10**8))
_raw_log_level = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, _raw_log_level, logging.INFO)

# httpx logs every IdP round trip at INFO; the GCS client is chatty at DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "google", "urllib3")

_HANDLER_TAG = "_wip_planner_handler"


def setup_logging(
    log_dir=LOG_DIRECTORY,
    log_level=LOG_LEVEL,
    log_file=LOG_NAME,
    max_bytes=LOG_MAX_BYTES,
    backup_count=5,
):
    """Install the file and console handlers, replacing any this module added before"""
    os.makedirs(log_dir, exist_ok=True)

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        root_logger.removeHandler(handler)
        handler.close()

    log_format = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, log_file), maxBytes=max_bytes, backupCount=backup_count
    )
    console_handler = logging.StreamHandler()

    for handler in (file_handler, console_handler):
        handler.setFormatter(log_format)
        handler.setLevel(log_level)
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)

    root_logger.setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    return root_logger


setup_logging()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
