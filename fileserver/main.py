"""Entry point for the file server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.constants import HEADER_REQUEST_ID
from common.logging_config import setup_logging
from fileserver.config import FILESERVER_HOST, FILESERVER_PORT
from fileserver.database import init_database
from fileserver.exceptions import (
    DirectoryAlreadyExistsError,
    DirectoryNotEmptyError,
    DirectoryNotFoundError,
    FileServiceException,
    InvalidNameError,
    InvalidRangeError,
    Md5MismatchError,
    ParentNotFoundError,
    RangeNotSatisfiableError,
    ResourceNotFoundError,
    ShareAlreadyExistsError,
    ShareNotFoundError,
)
from fileserver.routes import (
    directory_router,
    file_router,
    properties_router,
    ranges_router,
    share_router,
)
from fileserver.schemas import ErrorResponse
from fileserver.storage import ensure_data_directory

logger = setup_logging('fileserver')

app = FastAPI(
    title="RedCloud Transfer File Server",
    description="Share/directory/file store with sparse ranged writes",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers[HEADER_REQUEST_ID] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database and data directory on application startup.
    """
    logger.info("File server starting up...")

    init_database()
    logger.info("Database initialized")

    ensure_data_directory()
    logger.info("Data directory ready")


def _error_response(exc: FileServiceException, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=exc.code).model_dump()
    )


async def not_found_handler(request: Request, exc: FileServiceException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_404_NOT_FOUND)


async def conflict_handler(request: Request, exc: FileServiceException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Conflict error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_409_CONFLICT)


async def bad_request_handler(request: Request, exc: FileServiceException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Bad request error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_400_BAD_REQUEST)


for _exc_class in (ShareNotFoundError, DirectoryNotFoundError, ParentNotFoundError, ResourceNotFoundError):
    app.add_exception_handler(_exc_class, not_found_handler)

for _exc_class in (ShareAlreadyExistsError, DirectoryAlreadyExistsError, DirectoryNotEmptyError):
    app.add_exception_handler(_exc_class, conflict_handler)

for _exc_class in (InvalidRangeError, InvalidNameError):
    app.add_exception_handler(_exc_class, bad_request_handler)


@app.exception_handler(RangeNotSatisfiableError)
async def range_not_satisfiable_handler(request: Request, exc: RangeNotSatisfiableError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Range not satisfiable: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE)


@app.exception_handler(Md5MismatchError)
async def md5_mismatch_handler(request: Request, exc: Md5MismatchError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Content-MD5 mismatch: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(FileServiceException)
async def file_service_exception_handler(request: Request, exc: FileServiceException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"File service exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)


app.include_router(share_router)
app.include_router(directory_router)
app.include_router(file_router)
app.include_router(properties_router)
app.include_router(ranges_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "RedCloud Transfer File Server API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "fileserver"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "fileserver.main:app",
        host=FILESERVER_HOST,
        port=FILESERVER_PORT,
    )


if __name__ == "__main__":
    main()
