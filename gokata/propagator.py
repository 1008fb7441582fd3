"""Layered service errors for a file upload gateway.

Each service error wraps an underlying cause, which is also set as
``__cause__``. The helpers walk that chain to classify failures.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol


class _SentinelError(Exception):
    """Base for the fixed failure kinds; carries a default message."""

    message = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.message)


class AuthFailedError(_SentinelError):
    """Authentication failed."""

    message = "authentication failed"


class TokenExpiredError(_SentinelError):
    """The presented token has expired."""

    message = "token expired"


class InvalidTokenError(_SentinelError):
    """The presented token is malformed or unknown."""

    message = "invalid token"


class DatabaseDeadlockError(_SentinelError):
    """The metadata database reported a deadlock."""

    message = "database deadlock"


class StorageUnavailableError(_SentinelError):
    """The blob storage service could not be reached."""

    message = "storage service unavailable"


class QuotaExceededError(_SentinelError):
    """A storage quota was exceeded."""

    message = "storage quota exceeded"


class ContextError(Exception):
    """An operation was cancelled or its deadline passed."""

    def __init__(self, deadline_exceeded: bool = True) -> None:
        self.deadline_exceeded = deadline_exceeded
        super().__init__(
            "context deadline exceeded" if deadline_exceeded else "context canceled"
        )


class _WrappingError(Exception):
    """Base for errors that wrap an underlying cause."""

    def __init__(self, err: BaseException | None) -> None:
        self.err = err
        super().__init__()
        if err is not None:
            self.__cause__ = err


class AuthError(_WrappingError):
    """An authentication failure; the API key never appears in the message."""

    def __init__(
        self,
        op: str,
        user_id: str,
        api_key: str = "",
        err: BaseException | None = None,
        timeout: bool = False,
        temporary: bool = False,
    ) -> None:
        super().__init__(err)
        self.op = op
        self.user_id = user_id
        self.api_key = api_key
        self.timeout = timeout
        self.temporary = temporary

    def __str__(self) -> str:
        shown_key = "" if self.api_key else "[REDACTED]"
        return (
            f"auth error during {self.op} for user {self.user_id} "
            f"(key={shown_key}): {self.err}"
        )


class MetadataError(_WrappingError):
    """A failure in the metadata database."""

    def __init__(
        self,
        op: str,
        file_id: str,
        err: BaseException | None = None,
        temporary: bool = False,
    ) -> None:
        super().__init__(err)
        self.op = op
        self.file_id = file_id
        self.temporary = temporary

    def __str__(self) -> str:
        return f"metadata error during {self.op} for file {self.file_id}: {self.err}"


class StorageError(_WrappingError):
    """A failure in blob storage."""

    def __init__(
        self,
        op: str,
        bucket: str,
        key: str,
        err: BaseException | None = None,
        timeout: bool = False,
        temporary: bool = False,
    ) -> None:
        super().__init__(err)
        self.op = op
        self.bucket = bucket
        self.key = key
        self.timeout = timeout
        self.temporary = temporary

    def __str__(self) -> str:
        return (
            f"storage error during {self.op} for bucket {self.bucket} "
            f"and key {self.key}: {self.err}"
        )


class StorageQuotaError(_WrappingError):
    """A bucket's storage quota would be exceeded."""

    def __init__(
        self,
        bucket: str,
        current_usage: int,
        limit: int,
        err: BaseException | None = None,
    ) -> None:
        super().__init__(err)
        self.bucket = bucket
        self.current_usage = current_usage
        self.limit = limit

    def __str__(self) -> str:
        return (
            f"storage quota exceeded for bucket {self.bucket}: "
            f"usage {self.current_usage} / limit {self.limit}: {self.err}"
        )


class _ContextWrappedError(_WrappingError):
    """An error annotated with a message describing where it happened."""

    def __init__(self, message: str, err: BaseException) -> None:
        super().__init__(err)
        self.message = message

    def __str__(self) -> str:
        return f"{self.message}: {self.err}"


class AuthService(Protocol):
    """Authenticates tokens."""

    def validate_token(self, token: str) -> str:
        """Return the user id for ``token``; raise AuthError on failure."""


class MetadataService(Protocol):
    """Stores file metadata."""

    def create_file_record(self, user_id: str, file_name: str, size: int) -> str:
        """Create a file record and return its id; raise MetadataError on failure."""

    def update_file_status(self, file_id: str, status: str) -> None:
        """Set the upload status of a file; raise MetadataError on failure."""


class StorageService(Protocol):
    """Stores file contents."""

    def upload_file(self, bucket: str, key: str, data: bytes) -> None:
        """Store ``data``; raise StorageError or StorageQuotaError on failure."""


@dataclass
class FileUploadRequest:
    """A request to upload one file."""

    token: str
    file_name: str
    bucket: str
    data: bytes = b""


class CloudStorageGateway:
    """Coordinates auth, metadata and storage for a file upload."""

    def __init__(
        self, auth: AuthService, metadata: MetadataService, storage: StorageService
    ) -> None:
        self.auth = auth
        self.metadata = metadata
        self.storage = storage

    def upload_file(self, request: FileUploadRequest) -> None:
        """Upload a file, raising an error annotated with the failing step."""
        try:
            user_id = self.auth.validate_token(request.token)
        except Exception as exc:
            raise wrap_with_context(exc, "upload failed: auth") from exc

        try:
            file_id = self.metadata.create_file_record(
                user_id, request.file_name, len(request.data)
            )
        except Exception as exc:
            raise wrap_with_context(exc, "create file record failed") from exc

        try:
            self.storage.upload_file(request.bucket, file_id, request.data)
        except Exception as exc:
            with contextlib.suppress(Exception):
                self.metadata.update_file_status(file_id, "failed")
            raise wrap_with_context(exc, "upload failed: storage") from exc

        try:
            self.metadata.update_file_status(file_id, "completed")
        except Exception as exc:
            raise wrap_with_context(exc, "upload failed: status update") from exc


def _chain(err: BaseException | None) -> Iterator[BaseException]:
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def _timeout_flag(exc: BaseException) -> bool | None:
    if isinstance(exc, (AuthError, StorageError)):
        return exc.timeout
    if isinstance(exc, ContextError) and exc.deadline_exceeded:
        return True
    if isinstance(exc, TimeoutError):
        return True
    return None


def _temporary_flag(exc: BaseException) -> bool | None:
    if isinstance(exc, (AuthError, MetadataError, StorageError)):
        return exc.temporary
    if isinstance(exc, ContextError) and exc.deadline_exceeded:
        return True
    return None


def _first_flag(err: BaseException | None, probe) -> bool:
    for exc in _chain(err):
        flag = probe(exc)
        if flag is not None:
            return flag
    return False


def is_timeout(err: BaseException | None) -> bool:
    """Return whether ``err`` or anything it wraps is a timeout."""
    if err is None:
        return False
    if any(
        isinstance(exc, TimeoutError)
        or (isinstance(exc, ContextError) and exc.deadline_exceeded)
        for exc in _chain(err)
    ):
        return True
    return _first_flag(err, _timeout_flag)


def is_temporary(err: BaseException | None) -> bool:
    """Return whether ``err`` or anything it wraps may succeed on retry."""
    if err is None:
        return False
    return _first_flag(err, _temporary_flag)


def wrap_with_context(
    err: BaseException | None, format: str, *args: object
) -> BaseException | None:
    """Wrap ``err`` with a %-formatted message, keeping it as the cause."""
    if err is None:
        return None
    message = format % args if args else format
    return _ContextWrappedError(message, err)