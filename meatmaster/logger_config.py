import logging
import os
from logging.handlers import RotatingFileHandler

# Logger name
LOG_NAME = os.getenv("APP_LOGGER_NAME", "meatmaster")

# Create logger
logger = logging.getLogger(LOG_NAME)
logger.setLevel(logging.DEBUG)

# Log format with ISO-like timestamp including milliseconds
LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(filename)s - %(funcName)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Formatter
formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

# Console handler
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.DEBUG)
console_handler.setFormatter(formatter)
logger.addHandler(console_handler)

environment = (os.getenv("APP_ENV") or os.getenv("ENV") or "").lower()
is_production = environment in ("prod", "production")
if is_production:
    console_handler.setLevel(logging.INFO)

# Avoid duplicate logs when imported in multiple modules
logger.propagate = False


def setup_file_logging(log_dir: str = "logs") -> None:
    """Attach a rotating file handler (logs/app.log, 5 MB x 3)."""
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return

    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
    file_handler.setFormatter(logging.Formatter(
        "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
    ))
    file_handler.setLevel(logging.INFO)
    logger.addHandler(file_handler)
