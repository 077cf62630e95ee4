# dogsync/utils/logger.py
# Short helpers over the "dogsync" logger, which is also Flask's app.logger,
# so service code and request handlers share the handlers set in create_app().
import os
import logging

LEVELS = {"ERROR": logging.ERROR, "WARN": logging.WARNING, "INFO": logging.INFO,
          "DEBUG": logging.DEBUG, "NONE": logging.CRITICAL + 10}
LOG_FORMAT = "[%(asctime)s][%(levelname)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"

_log = logging.getLogger("dogsync")

def log_level() -> int:
    """Current LOG_LEVEL threshold; create_app() calls this after load_dotenv()."""
    return LEVELS.get(os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO)

def debug(msg): _log.debug(msg)
def info(msg):  _log.info(msg)
def warn(msg):  _log.warning(msg)
def error(msg): _log.error(msg)

def exception(msg):
    """error() plus the active traceback; call from inside an except block."""
    _log.exception(msg)
