"""Configuration management for the transfer CLI."""

import json
import os
import shutil
from pathlib import Path

from common.constants import (
    DEFAULT_CHUNK_SIZE_BYTES,
    DEFAULT_FILESERVER_PORT,
    DEFAULT_PARALLELISM,
    DEFAULT_SINGLE_SHOT_THRESHOLD_BYTES,
)
from common.logging_config import get_logger
from transfer.options import TransferOptions

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("TRANSFER_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("TRANSFER_SERVER_PORT", str(DEFAULT_FILESERVER_PORT))),
        "timeout": 30,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
        "chunk_size": DEFAULT_CHUNK_SIZE_BYTES,
        "parallelism": DEFAULT_PARALLELISM,
        "single_shot_threshold": DEFAULT_SINGLE_SHOT_THRESHOLD_BYTES,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.redcloud/transfer.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        A corrupted file is copied to '<name>.json.bak' and defaults are used.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.redcloud' / 'transfer.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Corrupted config file {self.config_path}: {e}; using defaults")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError:
                    pass
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError:
                pass
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_base_url(self) -> str:
        """
        Get file server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8000")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', DEFAULT_FILESERVER_PORT)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 3),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }

    def get_transfer_options(self) -> TransferOptions:
        """
        Build default transfer options from the chunking settings.

        Raises:
            ValueError: If the configured chunk size or parallelism is invalid
        """
        return TransferOptions(
            chunk_size=self.data.get('chunk_size', DEFAULT_CHUNK_SIZE_BYTES),
            parallelism=self.data.get('parallelism', DEFAULT_PARALLELISM),
            single_shot_threshold=self.data.get('single_shot_threshold', DEFAULT_SINGLE_SHOT_THRESHOLD_BYTES),
        )
