import logging
import os

# Logger name
LOG_NAME = os.getenv("HAULBOOK_LOGGER_NAME", "haulbook")

logger = logging.getLogger(LOG_NAME)
logger.setLevel(os.getenv("HAULBOOK_LOG_LEVEL", "WARNING").upper())

# Log format with ISO-like timestamp including milliseconds
LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(filename)s - %(funcName)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

# Console handler writes to stderr so CLI output stays clean
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)

# Guard against duplicate handlers when the module is reloaded
if not logger.handlers:
    logger.addHandler(console_handler)

# Avoid duplicate logs when imported in multiple modules
logger.propagate = False
