#!/usr/bin/env python3
"""
Configuration Manager for the Platform Migrator
Handles environment variables and the .env file centrally
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

from core.errors import ConfigError
from utils.helpers import mask_credentials

logger = logging.getLogger(__name__)

@dataclass
class MigratorConfig:
    """Migrator configuration settings"""

    # Connection strings (URL or Go-driver DSN)
    source_db_url: Optional[str] = None
    dest_db_url: Optional[str] = None

    # Runtime settings
    log_level: Optional[str] = None
    connect_timeout: Optional[int] = None

    def __post_init__(self):
        """Fill unset values from environment variables"""
        if self.source_db_url is None:
            self.source_db_url = os.environ.get('SOURCE_DB_URL')
        if self.dest_db_url is None:
            self.dest_db_url = os.environ.get('DEST_DB_URL')

        if self.log_level is None:
            self.log_level = os.environ.get('MIGRATOR_LOG_LEVEL', "INFO")
        self.log_level = self.log_level.upper()

        if self.connect_timeout is None:
            self.connect_timeout = os.environ.get('MIGRATOR_CONNECT_TIMEOUT', 10)
        try:
            self.connect_timeout = int(self.connect_timeout)
        except ValueError as e:
            raise ConfigError(f"MIGRATOR_CONNECT_TIMEOUT must be an integer: {e}") from e

    def missing_settings(self) -> List[str]:
        missing = []
        if not self.source_db_url:
            missing.append('SOURCE_DB_URL')
        if not self.dest_db_url:
            missing.append('DEST_DB_URL')
        return missing

    def validate(self):
        """Raise ConfigError naming every required setting that is absent"""
        missing = self.missing_settings()
        if missing:
            raise ConfigError(
                f"Missing required settings: {', '.join(missing)}. "
                "Set them in the environment or the .env file.",
                {'missing': missing}
            )

    def get_safe_dict(self) -> Dict[str, Any]:
        """Configuration as dict with passwords masked"""
        return {
            'source_db_url': mask_credentials(self.source_db_url),
            'dest_db_url': mask_credentials(self.dest_db_url),
            'log_level': self.log_level,
            'connect_timeout': self.connect_timeout,
        }

class ConfigManager:
    """Singleton configuration manager"""

    _instance: Optional['ConfigManager'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load_config(self, env_file: Optional[Path] = None, **overrides) -> MigratorConfig:
        """Load configuration from the .env file and environment.

        Priority (highest to lowest):
        1. Explicit overrides (CLI flags)
        2. Environment variables
        3. .env file (loaded into os.environ before config creation)
        4. MigratorConfig dataclass defaults
        """
        if env_file is None:
            env_file = Path(os.environ.get('MIGRATOR_ENV_FILE', '.env'))
        env_file = Path(env_file)
        if env_file.exists():
            self._load_env_file(env_file)
        else:
            logger.debug(f"No .env file at {env_file}, using environment only")

        return MigratorConfig(**{k: v for k, v in overrides.items() if v is not None})

    def _load_env_file(self, env_file: Path):
        """Load environment variables from .env file.

        Only sets values for keys not already in os.environ,
        ensuring exported env vars take precedence over .env file.
        """
        try:
            with open(env_file, 'r') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#') or '=' not in line:
                        continue
                    if line.startswith('export '):
                        line = line[len('export '):]
                    key, value = line.split('=', 1)
                    key = key.strip()
                    value = value.strip()
                    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                        value = value[1:-1]
                    if key not in os.environ:
                        os.environ[key] = value
        except OSError as e:
            raise ConfigError(f"Could not load .env file {env_file}: {e}") from e
        logger.debug(f"Loaded environment from {env_file}")

    @classmethod
    def reset(cls):
        cls._instance = None
