"""Configuration settings for the file server."""

import os
from common.constants import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_DATA_PATH,
    DEFAULT_FILESERVER_HOST,
    DEFAULT_FILESERVER_PORT,
    MAX_RANGE_SIZE_BYTES,
)


DATABASE_PATH = os.environ.get("FILESERVER_DATABASE_PATH", DEFAULT_DATABASE_PATH)

DATA_PATH = os.environ.get("FILESERVER_DATA_PATH", DEFAULT_DATA_PATH)

FILESERVER_HOST = os.environ.get("FILESERVER_HOST", DEFAULT_FILESERVER_HOST)

FILESERVER_PORT = int(os.environ.get("FILESERVER_PORT", str(DEFAULT_FILESERVER_PORT)))

MAX_RANGE_WRITE_BYTES = int(os.environ.get("FILESERVER_MAX_RANGE_BYTES", str(MAX_RANGE_SIZE_BYTES)))
