"""
Configuration management for autoblog.
"""
import os
import json
import copy
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    "state": {
        "directory": ".autoblog/state",
        "out_directory": ".autoblog/out"
    },
    "content": {
        "directory": "content/posts"
    },
    "site": {
        "base_url": "https://example.dev"
    },
    "topic_selection": {
        "novelty_weight": 0.4,
        "utility_weight": 0.35,
        "trend_weight": 0.25,
        "max_candidates": 20,
        "hn_top_stories": 12,
        "max_per_feed": 6
    },
    "feeds": {
        "file": "",
        "timeout_seconds": 12,
        "max_concurrent": 8,
        "user_agent": "autoblog/0.1 (+https://example.dev)"
    },
    "research": {
        "max_sources": 6,
        "allow_source_augmentation": False
    },
    "quality": {
        "min_citations": 2,
        "max_similarity_with_existing_posts": 0.85,
        "warn_similarity": 0.7,
        "min_word_count": 900,
        "min_h2_sections": 4,
        "required_sections": [],
        "max_summary_length": 300,
        "check_reachability": True,
        "reachability_timeout_seconds": 10,
        "max_reachability_checks": 8,
        "fabricated_window_days": 7
    },
    "batch": {
        "posts_per_run": 5,
        "attempt_multiplier": 3
    },
    "openai": {
        "api_key": "",
        "model": "gpt-4.1-mini",
        "temperature": 0.2,
        "timeout_seconds": 60
    },
    "notify": {
        "webhook_url": ""
    }
}

# Well-known variables honoured for compatibility with existing deployments
LEGACY_ENV_VARS = {
    "OPENAI_API_KEY": "openai.api_key",
    "OPENAI_MODEL": "openai.model",
    "BLOG_BASE_URL": "site.base_url",
    "BLOG_POSTS_PER_RUN": "batch.posts_per_run",
    "SLACK_WEBHOOK_URL": "notify.webhook_url",
}


class Config:
    """
    Configuration manager for autoblog.
    """
    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict] = None,
                 use_env: bool = True):
        """
        Initialize the Config.

        Args:
            config_path: Path to a YAML or JSON configuration file
            overrides: Values merged on top of everything else (mainly for tests)
            use_env: Whether environment variables may override settings
        """
        self.config_path = config_path
        self.use_env = use_env
        self.config = self._load_config()
        if overrides:
            self._update_dict(self.config, overrides)

    def _load_config(self) -> Dict:
        """
        Load configuration from file or use defaults.

        Returns:
            Configuration dictionary
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path:
            try:
                path = Path(self.config_path)
                if path.exists():
                    if path.suffix.lower() in ['.yaml', '.yml']:
                        with open(path, 'r', encoding='utf-8') as f:
                            user_config = yaml.safe_load(f) or {}
                    elif path.suffix.lower() == '.json':
                        with open(path, 'r', encoding='utf-8') as f:
                            user_config = json.load(f)
                    else:
                        raise ValueError(f"Unsupported config file format: {path.suffix}")

                    self._update_dict(config, user_config)
                else:
                    logger.warning(f"Config file {self.config_path} not found, using defaults")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error loading config from {self.config_path}: {e}")
                logger.error("Using default configuration")

        if self.use_env:
            self._override_from_env(config)

        return config

    def _update_dict(self, target: Dict, source: Dict) -> None:
        """
        Recursively update a dictionary.

        Args:
            target: Target dictionary to update
            source: Source dictionary with new values
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._update_dict(target[key], value)
            else:
                target[key] = value

    def _set_path(self, config: Dict, parts, raw_value: str) -> None:
        current = config
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        try:
            # Try to parse as JSON
            current[parts[-1]] = json.loads(raw_value)
        except json.JSONDecodeError:
            # If not valid JSON, use as string
            current[parts[-1]] = raw_value

    def _override_from_env(self, config: Dict, prefix: str = 'AUTOBLOG_') -> None:
        """
        Override configuration with environment variables.

        Nested keys are separated by a double underscore, so
        ``AUTOBLOG_QUALITY__MIN_WORD_COUNT=1100`` sets ``quality.min_word_count``.

        Args:
            config: Configuration dictionary to update
            prefix: Prefix for environment variables
        """
        for env_key, dotted in LEGACY_ENV_VARS.items():
            value = os.environ.get(env_key)
            if value:
                self._set_path(config, dotted.split('.'), value)

        for key, value in os.environ.items():
            if not key.startswith(prefix) or key == f'{prefix}CONFIG_PATH':
                continue
            parts = [part for part in key[len(prefix):].lower().split('__') if part]
            if parts:
                self._set_path(config, parts, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Dot-separated key path (e.g., 'quality.min_citations')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        parts = key.split('.')
        current = self.config

        for part in parts:
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def save(self, path: Optional[str] = None) -> bool:
        """
        Save the current configuration to a file.

        Args:
            path: Path to save the configuration to

        Returns:
            True if successful, False otherwise
        """
        save_path = path or self.config_path
        if not save_path:
            logger.error("No path specified for saving configuration")
            return False

        try:
            path = Path(save_path)
            if path.suffix.lower() in ['.yaml', '.yml']:
                with open(path, 'w', encoding='utf-8') as f:
                    yaml.safe_dump(self.config, f, default_flow_style=False, allow_unicode=True)
            elif path.suffix.lower() == '.json':
                with open(path, 'w', encoding='utf-8') as f:
                    json.dump(self.config, f, indent=2)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

            return True
        except (OSError, ValueError) as e:
            logger.error(f"Error saving config to {save_path}: {e}")
            return False


# Global configuration instance
config = Config(os.getenv('AUTOBLOG_CONFIG_PATH'))
