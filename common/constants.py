"""Project-wide constants (range limits, transfer defaults, default ports)."""

MAX_RANGE_SIZE_BYTES: int = 4 * 1024 * 1024  # largest single range write/checked read
DEFAULT_CHUNK_SIZE_BYTES: int = MAX_RANGE_SIZE_BYTES
DEFAULT_SINGLE_SHOT_THRESHOLD_BYTES: int = 32 * 1024 * 1024
DEFAULT_PARALLELISM: int = 1

STREAM_PIECE_SIZE_BYTES: int = 64 * 1024

DEFAULT_FILESERVER_HOST: str = "0.0.0.0"
DEFAULT_FILESERVER_PORT: int = 8000
DEFAULT_DATABASE_PATH: str = "/app/data/fileserver.db"
DEFAULT_DATA_PATH: str = "/app/data/files"

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"

HEADER_CONTENT_MD5: str = "Content-MD5"
HEADER_STORED_CONTENT_MD5: str = "X-Content-MD5"
HEADER_FILE_SIZE: str = "X-File-Size"
HEADER_RANGE_GET_CONTENT_MD5: str = "X-Range-Get-Content-MD5"
HEADER_REQUEST_ID: str = "X-Request-ID"
