# Logging_Config.py
# Description: Configuration for logging
#
# Imports
import logging
import logging.handlers
import sys
from typing import Any, Dict, Optional
#
# 3rd-Party Imports
from loguru import logger as loguru_logger
#
# Local Imports
from lifti_sync.config import get_cli_setting, get_log_file_path
#
########################################################################################################################
#
# Functions:

_LEVEL_MAPPING = {
    "TRACE": logging.DEBUG, "DEBUG": logging.DEBUG, "INFO": logging.INFO,
    "SUCCESS": logging.INFO, "WARNING": logging.WARNING, "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_FORMATTER = logging.Formatter(
    "%(asctime)s [%(levelname)-8s] %(name)s:%(lineno)d - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


def sink_to_standard_logging(message):
    """Loguru sink that re-emits each record through the stdlib logger of the same name."""
    record = message.record
    std_level = _LEVEL_MAPPING.get(record["level"].name, logging.INFO)
    std_logger = logging.getLogger(record["name"])
    if record["exception"]:
        std_logger.log(std_level, record["message"], exc_info=record["exception"])
    else:
        std_logger.log(std_level, record["message"])


def configure_logging(app_config: Optional[Dict[str, Any]] = None, log_to_file: bool = True):
    """
    Sets up all logging handlers, including Loguru integration.

    Loguru messages (application modules) are forwarded into standard logging,
    where the DB layer logs directly. The root logger gets a console handler
    and, unless disabled, a rotating file handler next to the database.
    """
    app_config = app_config or {}
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    loguru_logger.remove()
    loguru_logger.add(sink_to_standard_logging, level="TRACE", format="{message}")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    log_level_str = str(app_config.get("general", {}).get("log_level", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_FORMATTER)
    root_logger.addHandler(console_handler)

    if log_to_file:
        try:
            log_file_path = get_log_file_path()
            max_bytes = int(get_cli_setting("logging", "log_max_bytes", 10485760))
            backup_count = int(get_cli_setting("logging", "log_backup_count", 5))
            file_log_level_str = str(get_cli_setting("logging", "file_log_level", "INFO")).upper()
            file_log_level = getattr(logging, file_log_level_str, logging.INFO)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
            )
            file_handler.setLevel(file_log_level)
            file_handler.setFormatter(_FORMATTER)
            root_logger.addHandler(file_handler)
            if file_log_level < root_logger.level:
                root_logger.setLevel(file_log_level)
            logging.info(f"Logging to file '{log_file_path}' (Level: {logging.getLevelName(file_log_level)}).")
        except OSError as e:
            logging.warning(f"Could not set up file logging: {e}")

    logging.debug(f"Logging setup complete. Root level: {logging.getLevelName(root_logger.level)}")

#
# End of Logging_Config.py
########################################################################################################################
