"""Application configuration module for the locale translator."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

import jsonschema
import yaml
from dotenv import load_dotenv

from locale_translator.logging_config import setup_logger
from locale_translator.reference_loader import (
    DEFAULT_GLOBAL_REFERENCE_URL,
    DEFAULT_REFERENCE_TIMEOUT,
    DEFAULT_SCOPED_REFERENCE_URL
)
from locale_translator.transcoder import ROW_ERROR_ABORT, ROW_ERROR_POLICIES
from locale_translator.translation_client import (
    DEFAULT_API_BASE_URL,
    DEFAULT_ATTEMPT_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_NAME,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_TEMPERATURE,
    TranslationClient
)

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "source_directory": {"type": "string"},
        "target_directory": {"type": "string"},
        "file_pattern": {"type": "string"},
        "global_reference_url": {"type": "string"},
        "scoped_reference_url": {"type": "string"},
        "reference_timeout": {"type": "number", "exclusiveMinimum": 0},
        "api_base_url": {"type": "string"},
        "model_name": {"type": "string"},
        "temperature": {"type": "number", "minimum": 0},
        "max_tokens": {"type": "integer", "minimum": 1},
        "max_attempts": {"type": "integer", "minimum": 1},
        "attempt_delay": {"type": "number", "minimum": 0},
        "retry_delay": {"type": "number", "minimum": 0},
        "request_timeout": {"type": "number", "exclusiveMinimum": 0},
        "on_row_error": {"enum": list(ROW_ERROR_POLICIES)},
        "logging": {
            "type": "object",
            "properties": {
                "log_level": {"type": "string"},
                "log_file_path": {"type": "string"},
                "log_to_console": {"type": "boolean"}
            }
        }
    }
}


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Core paths
    project_root: str
    locale: str
    source_directory: str
    target_directory: str
    file_pattern: str

    # Reference datasets
    global_reference_url: str
    scoped_reference_url: str
    reference_timeout: float

    # Model configuration
    api_base_url: str
    model_name: str
    temperature: float
    max_tokens: int

    # Retry settings
    max_attempts: int
    attempt_delay: float
    retry_delay: float
    request_timeout: float

    # Processing settings
    on_row_error: str

    # Translation client
    translation_client: Optional[TranslationClient]


def _compute_project_root() -> str:
    """Compute the project root directory."""
    package_dir = os.path.dirname(os.path.realpath(__file__))
    return os.path.abspath(os.path.join(package_dir, os.pardir))


def _find_dotenv_file(project_root: str) -> Optional[str]:
    for dotenv_path in (os.path.join(project_root, '.env'), os.path.join(project_root, 'docker', '.env')):
        if os.path.exists(dotenv_path):
            return dotenv_path
    return None


def _load_dotenv_files(project_root: str) -> None:
    """Load the .env file from the project root or docker directory."""
    dotenv_path = _find_dotenv_file(project_root)
    if dotenv_path:
        load_dotenv(dotenv_path)


def _load_yaml_config(project_root: str) -> Dict[str, Any]:
    """Load and validate the YAML configuration file, falling back to defaults on any problem."""
    default_config_path = os.path.join(project_root, 'config.yaml')
    config_file = os.environ.get('TRANSLATOR_CONFIG_FILE', default_config_path)

    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)

    config = {}
    try:
        if not os.path.exists(config_file):
            print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
        if loaded_config is None:
            print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                  file=sys.stderr)
        elif isinstance(loaded_config, dict):
            jsonschema.validate(instance=loaded_config, schema=CONFIG_SCHEMA)
            config = loaded_config
            print(f"Successfully loaded configuration from: {config_file}", file=sys.stderr)
        else:
            print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                  file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except jsonschema.ValidationError as e:
        print(f"Error: Invalid value in configuration file '{config_file}': {e.message}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _setup_logger_from_config(config: Dict[str, Any]) -> logging.Logger:
    """Set up logger based on configuration."""
    log_config = config.get('logging', {})
    log_level_str = log_config.get('log_level', 'INFO').upper()
    log_file_path = log_config.get('log_file_path', 'logs/translation_log.log')
    log_to_console = log_config.get('log_to_console', True)
    return setup_logger(log_level_str, log_file_path, log_to_console)


def _log_dotenv_status(logger: logging.Logger, project_root: str) -> None:
    """Log the status of .env file loading."""
    dotenv_path = _find_dotenv_file(project_root)
    if dotenv_path:
        logger.info("Loaded environment variables from: %s", dotenv_path)
    else:
        logger.info(
            "No .env file found in project root or docker/ under '%s'. Relying on system environment variables if any.",
            project_root
        )


def _create_translation_client(
        api_key: Optional[str],
        config: Dict[str, Any],
        model_name: str,
        logger: logging.Logger
) -> TranslationClient:
    """Create the translation client, exiting if no API key is available."""
    api_key = api_key or os.environ.get('GROQ_API_KEY')
    if not api_key:
        logger.critical("CRITICAL: No API key given and GROQ_API_KEY environment variable not found.")
        logger.critical("Pass the API key as the second argument or set GROQ_API_KEY.")
        sys.exit(1)

    client = TranslationClient.from_api_key(
        api_key,
        base_url=config.get('api_base_url', DEFAULT_API_BASE_URL),
        timeout=config.get('request_timeout', DEFAULT_REQUEST_TIMEOUT),
        model_name=model_name,
        temperature=config.get('temperature', DEFAULT_TEMPERATURE),
        max_tokens=config.get('max_tokens', DEFAULT_MAX_TOKENS),
        max_attempts=config.get('max_attempts', DEFAULT_MAX_ATTEMPTS),
        attempt_delay=config.get('attempt_delay', DEFAULT_ATTEMPT_DELAY),
        retry_delay=config.get('retry_delay', DEFAULT_RETRY_DELAY)
    )
    logger.info("Translation client initialized for model '%s'", model_name)
    return client


def load_app_config(locale: str, api_key: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from YAML file and environment variables.

    Args:
        locale: The target locale code (e.g., "it_IT").
        api_key: API key for the translation endpoint. Falls back to GROQ_API_KEY.

    Returns:
        AppConfig: The loaded application configuration.
    """
    project_root = _compute_project_root()

    _load_dotenv_files(project_root)

    config = _load_yaml_config(project_root)

    logger = _setup_logger_from_config(config)

    _log_dotenv_status(logger, project_root)

    model_name = os.environ.get('MODEL_NAME', config.get('model_name', DEFAULT_MODEL_NAME))
    target_directory = config.get('target_directory', './{locale}/').replace('{locale}', locale)

    translation_client = _create_translation_client(api_key, config, model_name, logger)

    return AppConfig(
        project_root=project_root,
        locale=locale,
        source_directory=config.get('source_directory', './en_US/'),
        target_directory=target_directory,
        file_pattern=config.get('file_pattern', '*.csv'),
        global_reference_url=config.get('global_reference_url', DEFAULT_GLOBAL_REFERENCE_URL),
        scoped_reference_url=config.get('scoped_reference_url', DEFAULT_SCOPED_REFERENCE_URL),
        reference_timeout=config.get('reference_timeout', DEFAULT_REFERENCE_TIMEOUT),
        api_base_url=config.get('api_base_url', DEFAULT_API_BASE_URL),
        model_name=model_name,
        temperature=config.get('temperature', DEFAULT_TEMPERATURE),
        max_tokens=config.get('max_tokens', DEFAULT_MAX_TOKENS),
        max_attempts=config.get('max_attempts', DEFAULT_MAX_ATTEMPTS),
        attempt_delay=config.get('attempt_delay', DEFAULT_ATTEMPT_DELAY),
        retry_delay=config.get('retry_delay', DEFAULT_RETRY_DELAY),
        request_timeout=config.get('request_timeout', DEFAULT_REQUEST_TIMEOUT),
        on_row_error=config.get('on_row_error', ROW_ERROR_ABORT),
        translation_client=translation_client
    )
