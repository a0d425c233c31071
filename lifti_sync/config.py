# lifti_sync/config.py
# Description: Configuration management for the lifti_sync application.
#
# Imports
import copy
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional
#
# Third-Party Imports
import toml
from loguru import logger
#
# Local Imports
from lifti_sync.backup_api.exceptions import ConfigurationMissingError
#
#######################################################################################################################
#
# Functions:

# --- Path to the configuration file ---
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "lifti_sync" / "config.toml"
BASE_DATA_DIR = Path.home() / ".local" / "share" / "lifti_sync"

GOOGLE_CLIENT_ID_ENV = "LIFTI_GOOGLE_CLIENT_ID"

CONFIG_TOML_CONTENT = """
# Configuration for lifti_sync
# This file is created with default values on first run.

[general]
log_level = "INFO" # DEBUG, INFO, WARNING, ERROR, CRITICAL

[database]
lifti_db_path = "~/.local/share/lifti_sync/lifti.db"

[logging]
# Log file lives next to the database
log_filename = "lifti_sync.log"
file_log_level = "INFO"
log_max_bytes = 10485760 # 10 MB
log_backup_count = 5

[backup]
# OAuth client id of the Google project; LIFTI_GOOGLE_CLIENT_ID overrides it.
google_client_id = ""
backup_file_name = "lifti-backup.json"
request_timeout = 30.0
drive_files_api = "https://www.googleapis.com/drive/v3/files"
drive_upload_api = "https://www.googleapis.com/upload/drive/v3/files"

[sync]
auto_sync_interval_seconds = 300
"""

try:
    DEFAULT_CONFIG_FROM_TOML: Dict[str, Any] = tomllib.loads(CONFIG_TOML_CONTENT)
except tomllib.TOMLDecodeError as e:
    logger.critical(f"FATAL: Could not parse internal CONFIG_TOML_CONTENT: {e}.")
    DEFAULT_CONFIG_FROM_TOML = {}


# --- Helper for deep merging dictionaries ---
def deep_merge_dicts(base: Dict, update: Dict) -> Dict:
    """Recursively merges update_dict into base_dict."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Primary Configuration Loading Logic ---
_CONFIG_CACHE: Optional[Dict[str, Any]] = None

def load_settings(force_reload: bool = False) -> Dict[str, Any]:
    """
    Loads settings from ~/.config/lifti_sync/config.toml.
    If the file doesn't exist, it's created with default values.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload:
        return _CONFIG_CACHE

    loaded_config = copy.deepcopy(DEFAULT_CONFIG_FROM_TOML)

    if not DEFAULT_CONFIG_PATH.exists():
        logger.info(f"Config file not found at {DEFAULT_CONFIG_PATH}. Creating with default values.")
        try:
            DEFAULT_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
            with open(DEFAULT_CONFIG_PATH, "w", encoding="utf-8") as f:
                f.write(CONFIG_TOML_CONTENT)
        except OSError as e:
            logger.error(f"Could not create default config file {DEFAULT_CONFIG_PATH}: {e}. Using internal defaults.")
    else:
        logger.info(f"Loading config from: {DEFAULT_CONFIG_PATH}")
        try:
            with open(DEFAULT_CONFIG_PATH, "rb") as f:
                user_config_from_file = tomllib.load(f)
            loaded_config = deep_merge_dicts(loaded_config, user_config_from_file)
        except (tomllib.TOMLDecodeError, OSError) as e:
            logger.error(f"Error reading config file {DEFAULT_CONFIG_PATH}: {e}. Using internal defaults.")

    _CONFIG_CACHE = loaded_config
    logger.debug(f"load_settings returning config with top-level keys: {list(loaded_config.keys())}")
    return _CONFIG_CACHE


def get_cli_setting(section: str, key: str, default: Any = None) -> Any:
    """Helper to get a specific setting from the loaded configuration."""
    config = load_settings()
    section_data = config.get(section)
    if isinstance(section_data, dict):
        return section_data.get(key, default)
    return default


def save_setting(section: str, key: str, value: Any):
    """Writes one setting into the user config file and refreshes the cache."""
    user_config: Dict[str, Any] = {}
    if DEFAULT_CONFIG_PATH.exists():
        with open(DEFAULT_CONFIG_PATH, "rb") as f:
            user_config = tomllib.load(f)
    user_config.setdefault(section, {})[key] = value
    DEFAULT_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(DEFAULT_CONFIG_PATH, "w", encoding="utf-8") as f:
        toml.dump(user_config, f)
    logger.info(f"Saved setting [{section}] {key} to {DEFAULT_CONFIG_PATH}")
    load_settings(force_reload=True)


# --- Path and backup getters ---
def get_lifti_db_path() -> Path:
    default_db_path_str = DEFAULT_CONFIG_FROM_TOML.get("database", {}).get(
        "lifti_db_path", str(BASE_DATA_DIR / "lifti.db"))
    db_path_str = get_cli_setting("database", "lifti_db_path", default_db_path_str)
    return Path(db_path_str).expanduser().resolve()


def get_log_file_path() -> Path:
    default_log_filename = DEFAULT_CONFIG_FROM_TOML.get("logging", {}).get("log_filename", "lifti_sync.log")
    log_filename = get_cli_setting("logging", "log_filename", default_log_filename)
    log_file_path = get_lifti_db_path().parent / log_filename
    try:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create log directory {log_file_path.parent}: {e}")
    return log_file_path


def get_google_client_id() -> str:
    return os.environ.get(GOOGLE_CLIENT_ID_ENV) or get_cli_setting("backup", "google_client_id", "") or ""


def require_google_client_id() -> str:
    client_id = get_google_client_id()
    if not client_id:
        raise ConfigurationMissingError(
            f"Google backup is unavailable. Missing {GOOGLE_CLIENT_ID_ENV} or [backup] google_client_id.")
    return client_id


def get_auto_sync_interval() -> float:
    return float(get_cli_setting("sync", "auto_sync_interval_seconds", 300))

#
# End of lifti_sync/config.py
#######################################################################################################################
