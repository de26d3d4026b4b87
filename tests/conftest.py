"""Shared pytest fixtures for all tests."""

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from cli.config import Config
from fileserver.database import init_database
from fileserver.main import app
from transfer.client import FileStoreClient
from transfer.engine import FileTransferService


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .redcloud directory
    """
    config_dir = tmp_path / '.redcloud'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'transfer.json')


@pytest.fixture
def server_env(tmp_path, monkeypatch):
    """
    Point the file server at a temporary database and data directory.

    Returns:
        Path to the temporary data directory
    """
    db_path = tmp_path / 'server' / 'fileserver.db'
    data_dir = tmp_path / 'server' / 'files'
    monkeypatch.setattr("fileserver.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("fileserver.config.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("fileserver.storage.DATA_DIR", data_dir)
    init_database()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


@pytest.fixture
def api(server_env):
    """FastAPI test client backed by the temporary server environment."""
    return TestClient(app)


@pytest.fixture
def store_client(server_env):
    """FileStoreClient talking to the in-process file server."""
    return FileStoreClient(
        'http://testserver',
        max_retries=0,
        transport=httpx.ASGITransport(app=app),
    )


@pytest.fixture
def service(store_client):
    """FileTransferService over the in-process file server."""
    return FileTransferService(store_client)


@pytest.fixture
def sample_file(tmp_path) -> Path:
    """
    Create a sample file for testing file uploads.

    Returns:
        Path to a 100 KiB file with non-repeating content
    """
    file_path = tmp_path / 'sample.bin'
    file_path.write_bytes(bytes(i % 251 for i in range(100 * 1024)))
    return file_path
