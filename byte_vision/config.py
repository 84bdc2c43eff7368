# byte_vision/config.py
# Description: Configuration management for the byte-vision application.
#
# Imports
import copy
import os
import sys
if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib
from pathlib import Path
from typing import Any, Dict, Optional
#
# Third-Party Imports
from loguru import logger
#
#######################################################################################################################
#
# Functions:

# --- Path to the configuration file ---
CONFIG_PATH_ENV_VAR = "BYTE_VISION_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "byte_vision" / "config.toml"
BASE_DATA_DIR = Path.home() / ".local" / "share" / "byte_vision"

CONFIG_TOML_CONTENT = """
# Configuration for the byte-vision TUI
# Located at: ~/.config/byte_vision/config.toml (override with BYTE_VISION_CONFIG)

[logging]
log_level = "INFO"              # DEBUG, INFO, WARNING, ERROR, CRITICAL
log_filename = "byte_vision.log"
console = false                 # Also log to stderr (the TUI owns the terminal, so off by default)
rotation = "10 MB"
retention = "7 days"

[work_items]
# JSON history of completed inference runs, shown in the Work Items tab
history_file = "~/.local/share/byte_vision/work_items.json"

[saved_settings]
# Named engine configurations saved from the settings tabs
settings_file = "~/.local/share/byte_vision/saved_settings.toml"

# Folders end with a trailing slash: file names are appended to them as-is.
[app_paths]
LLamaCliPath = "/usr/local/bin/llama-cli"
LLamaEmbedCliPath = "/usr/local/bin/llama-embedding"
AppLogPath = "~/.local/share/byte_vision/logs/"
AppLogFileName = "byte_vision.log"
ModelPath = "~/.local/share/byte_vision/models/"
ModelFileName = ""
ModelFullPathVal = ""
EmbedModelFileName = ""
EmbedModelFullPathVal = ""
ModelLogPath = "~/.local/share/byte_vision/logs/models/"
PromptCachePath = "~/.local/share/byte_vision/prompt_cache/"
PromptTemplatePath = "~/.local/share/byte_vision/prompt_templates/"
DocumentPath = "~/.local/share/byte_vision/documents/"
ReportDataPath = "~/.local/share/byte_vision/reports/"

[llama_cli]
Description = "Default llama-cli settings"
ModelCmd = "-m"
PromptCmd = "-p"
ChatTemplateCmd = "--chat-template"
ConversationCmd = "-cnv"
ConversationCmdEnabled = false
MultilineInputCmd = "-mli"
MultilineInputCmdEnabled = false
CtxSizeCmd = "-c"
CtxSizeVal = "4096"
RopeScaleCmd = "--rope-scale"
PromptCacheCmd = "--prompt-cache"
PromptFileCmd = "-f"
InteractiveFirstCmd = "-if"
InteractiveFirstCmdEnabled = false
InteractiveModeCmd = "-i"
InteractiveModeCmdEnabled = false
ReversePromptCmd = "-r"
InPrefixCmd = "--in-prefix"
InSuffixCmd = "--in-suffix"
GPULayersCmd = "-ngl"
GPULayersVal = "99"
ThreadsBatchCmd = "-tb"
ThreadsCmd = "-t"
KeepCmd = "--keep"
TopKCmd = "--top-k"
TopKVal = "40"
TopPCmd = "--top-p"
TopPVal = "0.9"
MinPCmd = "--min-p"
MinPVal = "0.05"
MainGPUCmd = "-mg"
RepeatPenaltyCmd = "--repeat-penalty"
RepeatPenaltyVal = "1.1"
RepeatLastPenaltyCmd = "--repeat-last-n"
RepeatLastPenaltyVal = "64"
MemLockCmd = "--mlock"
MemLockCmdEnabled = false
EscapeNewLinesCmd = "-e"
EscapeNewLinesCmdEnabled = false
FlashAttentionCmd = "-fa"
FlashAttentionCmdEnabled = false
TemperatureCmd = "--temp"
TemperatureVal = "0.8"
PredictCmd = "-n"
PredictVal = "-1"
ModelLogFileCmd = "--log-file"
NoDisplayPromptCmd = "--no-display-prompt"
NoDisplayPromptEnabled = true
LogVerboseCmd = "-v"
LogVerboseEnabled = false

[llama_embed]
Description = "Default llama-embedding settings"
EmbedModelPathCmd = "-m"
EmbedCtxSizeCmd = "-c"
EmbedCtxSizeVal = "2048"
EmbedBatchSizeCmd = "-b"
EmbedBatchSizeVal = "2048"
EmbedUbatchSizeCmd = "-ub"
EmbedUbatchSizeVal = "2048"
EmbedSeparatorCmd = "--embd-separator"
EmbedPoolingCmd = "--pooling"
EmbedPoolingVal = "mean"
EmbedOutputFormatCmd = "--embd-output-format"
EmbedOutputFormatVal = "json"
EmbedNormalizeCmd = "--embd-normalize"
EmbedNormalizeVal = "2"
EmbedGPULayersCmd = "-ngl"
EmbedGPULayersVal = "99"
EmbedMainGPUCmd = "-mg"
EmbedThreadsCmd = "-t"
EmbedThreadsBatchCmd = "-tb"
EmbedKeepCmd = "--keep"
EmbedFlashAttentionCmd = "-fa"
EmbedFlashAttentionCmdEnabled = false
EmbedModelLogFileCmd = "--log-file"
"""

try:
    DEFAULT_CONFIG_FROM_TOML: Dict[str, Any] = tomllib.loads(CONFIG_TOML_CONTENT)
except tomllib.TOMLDecodeError as e:
    logger.critical(f"FATAL: Could not parse internal CONFIG_TOML_CONTENT: {e}. Application cannot start correctly.")
    DEFAULT_CONFIG_FROM_TOML = {}


def get_config_path() -> Path:
    """Config file location; ``BYTE_VISION_CONFIG`` wins over the default."""
    override = os.environ.get(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


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


def load_cli_config_and_ensure_existence(force_reload: bool = False) -> Dict[str, Any]:
    """
    Loads settings from the config file (see ``get_config_path``).
    If the file doesn't exist, it's created from CONFIG_TOML_CONTENT.
    The embedded defaults are always the base the file is merged onto.
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload:
        return _CONFIG_CACHE

    config_path = get_config_path()
    loaded_config = copy.deepcopy(DEFAULT_CONFIG_FROM_TOML)

    if not config_path.exists():
        logger.info(f"Config file not found at {config_path}. Creating with default values.")
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(CONFIG_TOML_CONTENT)
            logger.info(f"Created default config file at {config_path}")
            loaded_config["_first_run"] = True
        except OSError as e:
            logger.error(f"Could not create default config file {config_path}: {e}. Using internal defaults.")
    else:
        logger.info(f"Attempting to load config from: {config_path}")
        try:
            with open(config_path, "rb") as f:
                user_config_from_file = tomllib.load(f)
            loaded_config = deep_merge_dicts(loaded_config, user_config_from_file)
            logger.info(f"Successfully loaded and merged config from {config_path}")
        except tomllib.TOMLDecodeError as e:
            logger.error(f"Error decoding TOML config file {config_path}: {e}. Using internal defaults.")
        except OSError as e:
            logger.error(f"Could not read config file {config_path}: {e}. Using internal defaults.")

    _CONFIG_CACHE = loaded_config
    logger.debug(f"load_cli_config_and_ensure_existence returning config with top-level keys: {list(loaded_config.keys())}")
    return _CONFIG_CACHE


# --- Setting Getters ---
def get_cli_setting(section: str, key: str, default: Any = None) -> Any:
    """Helper to get a specific setting from the loaded configuration."""
    config = load_cli_config_and_ensure_existence()
    section_data = config.get(section)
    if isinstance(section_data, dict):
        return section_data.get(key, default)
    return default


def _expand_path_setting(section: str, key: str, default: str) -> Path:
    return Path(str(get_cli_setting(section, key, default))).expanduser()


def get_cli_log_file_path() -> Path:
    default_log_filename = DEFAULT_CONFIG_FROM_TOML.get("logging", {}).get("log_filename", "byte_vision.log")
    log_filename = get_cli_setting("logging", "log_filename", default_log_filename)
    log_folder = _expand_path_setting("app_paths", "AppLogPath", str(BASE_DATA_DIR / "logs"))
    log_file_path = log_folder / log_filename
    try:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create log directory {log_file_path.parent}: {e}")
    return log_file_path


def get_work_items_path() -> Path:
    return _expand_path_setting("work_items", "history_file", str(BASE_DATA_DIR / "work_items.json"))


def get_saved_settings_path() -> Path:
    return _expand_path_setting("saved_settings", "settings_file", str(BASE_DATA_DIR / "saved_settings.toml"))

#
# End of config.py
#######################################################################################################################
