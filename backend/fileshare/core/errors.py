from __future__ import annotations


class FileShareError(Exception):
    """Base error; ``status_code`` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(FileShareError):
    status_code = 400


class InvalidFileNameError(FileShareError):
    status_code = 400


class PathTraversalError(FileShareError):
    status_code = 403


class StoredFileNotFoundError(FileShareError):
    status_code = 404


class FileConflictError(FileShareError):
    status_code = 409


class PayloadTooLargeError(FileShareError):
    status_code = 413


class UnsupportedFileTypeError(FileShareError):
    status_code = 415


class StorageError(FileShareError):
    status_code = 500
