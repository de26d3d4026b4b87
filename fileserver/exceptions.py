"""Custom exception classes for the file server."""


class FileServiceException(Exception):
    """
    Base exception class for all file-service errors.
    """
    code = "INTERNAL_ERROR"


class ShareNotFoundError(FileServiceException):
    """
    Raised when the requested share does not exist.
    """
    code = "SHARE_NOT_FOUND"


class ShareAlreadyExistsError(FileServiceException):
    """
    Raised when creating a share whose name is taken.
    """
    code = "SHARE_ALREADY_EXISTS"


class DirectoryNotFoundError(FileServiceException):
    """
    Raised when the requested directory does not exist.
    """
    code = "DIRECTORY_NOT_FOUND"


class DirectoryAlreadyExistsError(FileServiceException):
    """
    Raised when creating a directory that already exists.
    """
    code = "DIRECTORY_ALREADY_EXISTS"


class DirectoryNotEmptyError(FileServiceException):
    """
    Raised when deleting a directory that still holds files or subdirectories.
    """
    code = "DIRECTORY_NOT_EMPTY"


class ParentNotFoundError(FileServiceException):
    """
    Raised when the parent directory of a new resource does not exist.
    """
    code = "PARENT_NOT_FOUND"


class ResourceNotFoundError(FileServiceException):
    """
    Raised when a requested file does not exist.
    """
    code = "RESOURCE_NOT_FOUND"


class InvalidRangeError(FileServiceException):
    """
    Raised when a byte range is malformed or outside the file.
    """
    code = "INVALID_RANGE"


class RangeNotSatisfiableError(InvalidRangeError):
    """
    Raised when a read range starts beyond the end of the file.
    """
    code = "RANGE_NOT_SATISFIABLE"


class Md5MismatchError(FileServiceException):
    """
    Raised when a transactional Content-MD5 does not match the received bytes.
    """
    code = "MD5_MISMATCH"


class InvalidNameError(FileServiceException):
    """
    Raised when a share, directory or file name is not acceptable.
    """
    code = "INVALID_NAME"
