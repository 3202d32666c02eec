"""
Configuration loading and management for workspaces.

Resolves the effective compiler settings of each workspace from the process
defaults, the workspace's own config file and environment overrides.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

from pydantic import ValidationError

from core.models.config import CompilerSettings
from .defaults import ENV_VAR_MAPPING, WORKSPACE_CONFIG_DIR, WORKSPACE_CONFIG_FILE

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """Load and manage per-workspace compiler configuration"""

    def __init__(self, base_settings: Optional[CompilerSettings] = None):
        self.base_settings = base_settings or CompilerSettings()
        self.config_cache: Dict[str, CompilerSettings] = {}

    @staticmethod
    def get_config_file(workspace_path: Union[str, Path]) -> Path:
        """Get workspace configuration file path"""
        return Path(workspace_path) / WORKSPACE_CONFIG_DIR / WORKSPACE_CONFIG_FILE

    def load_workspace_settings(
        self,
        workspace_path: Union[str, Path],
        base: Optional[CompilerSettings] = None
    ) -> CompilerSettings:
        """Load effective compiler settings for a workspace"""
        workspace_path = Path(workspace_path)
        base = base or self.base_settings

        # Check cache first
        cache_key = str(workspace_path)
        if cache_key in self.config_cache:
            return self.config_cache[cache_key]

        config_data = base.model_dump()
        config_file = self.get_config_file(workspace_path)

        if config_file.exists():
            config_data.update(self._load_config_file(config_file))

        # Apply environment overrides
        config_data = self._apply_env_overrides(config_data)

        try:
            settings = CompilerSettings(**config_data)
        except ValidationError as e:
            logger.error(f"Invalid configuration for workspace {workspace_path}: {e}")
            settings = base

        # Cache the configuration
        self.config_cache[cache_key] = settings
        return settings

    def _load_config_file(self, config_file: Path) -> Dict[str, Any]:
        """Read a workspace config file, ignoring it if unreadable"""
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load config from {config_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Config file {config_file} must contain a JSON object")
            return {}

        known_fields = set(CompilerSettings.model_fields)
        unknown = set(data) - known_fields
        if unknown:
            logger.warning(f"Ignoring unknown settings in {config_file}: {sorted(unknown)}")

        return {key: value for key, value in data.items() if key in known_fields}

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        for env_var, field_name in ENV_VAR_MAPPING.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                config_data[field_name] = env_value

        return config_data

    def save_workspace_config(
        self,
        workspace_path: Union[str, Path],
        settings: CompilerSettings
    ) -> bool:
        """Save workspace configuration to disk"""
        config_file = self.get_config_file(workspace_path)

        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)

            # Only non-default values, unset fields keep inheriting
            config_data = settings.model_dump(mode='json', exclude_defaults=True)

            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2, ensure_ascii=False)

            logger.info(f"Saved configuration to {config_file}")

            # Update cache
            self.config_cache[str(Path(workspace_path))] = settings

            return True

        except OSError as e:
            logger.error(f"Failed to save config for {workspace_path}: {e}")
            return False

    def invalidate(self, workspace_path: Optional[Union[str, Path]] = None) -> None:
        """Forget cached settings for one workspace, or all of them"""
        if workspace_path is None:
            self.config_cache.clear()
        else:
            self.config_cache.pop(str(Path(workspace_path)), None)
