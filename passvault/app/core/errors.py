# passvault/app/core/errors.py
"""
Error kinds raised by the vault core.

Every failure the core reports is a VaultError carrying one ErrorKind from a
closed set. Callers match on the kind (or the subclass), never on the message.
The HTTP status mapping lives in passvault/app/api/errors.py.
"""
import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    INTEGRITY = "integrity"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    UNIQUENESS_CONFLICT = "uniqueness_conflict"
    VERSION_CONFLICT = "version_conflict"
    CANCELLED = "cancelled"
    BAD_GATEWAY = "bad_gateway"
    INTERNAL = "internal"


# Stable messages shown to clients
MSG_INVALID_DATA_PROVIDED = "invalid data provided"
MSG_INVALID_JSON = "invalid JSON was passed"
MSG_INVALID_LOGIN_PASSWORD = "invalid login/password"
MSG_INTERNAL_SERVER_ERROR = "internal server error"
MSG_EMPTY_AUTHORIZATION_HEADER = "empty `Authorization` header"
MSG_INVALID_AUTHORIZATION_HEADER = "invalid `Authorization` header"
MSG_EMPTY_TOKEN = "empty token in `Authorization` header"
MSG_TOKEN_IS_EXPIRED = "token is expired"
MSG_TOKEN_IS_INVALID = "token is expired or invalid"
MSG_NO_PRIVATE_DATA_PROVIDED = "no private data provided"
MSG_NO_DOWNLOAD_REQUESTS_PROVIDED = "no download requests provided"
MSG_NO_UPDATE_REQUESTS_PROVIDED = "no update requests provided"
MSG_NO_DELETE_REQUESTS_PROVIDED = "no delete requests provided"
MSG_NO_USER_ID_PROVIDED = "no user ID provided"
MSG_NO_CLIENT_IDS_FOR_SYNC = "no client IDs provided for sync"
MSG_EMPTY_CLIENT_ID_FOR_SYNC = "empty client ID provided for sync"
MSG_ACCESS_DENIED = "access denied"
MSG_VERSION_IS_NOT_SPECIFIED = "version is not specified"
MSG_INTEGRITY_CHECK_FAILED = "integrity check failed"
MSG_LOGIN_ALREADY_EXISTS = "login already exists"
MSG_RECORD_ALREADY_EXISTS = "record already exists"
MSG_DATA_NOT_FOUND = "data not found"
MSG_USER_NOT_FOUND = "user not found"
MSG_VERSION_CONFLICT = "version conflict, please sync"
MSG_REQUEST_CANCELLED = "request cancelled"
MSG_REGISTRATION_FAILED = "registration failed"
MSG_LOGIN_FAILED = "login failed"


class VaultError(Exception):
    """Base class for all errors raised by the core."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = MSG_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, *, client_side_id: Optional[str] = None):
        self.message = message or self.default_message
        self.client_side_id = client_side_id
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.client_side_id is not None:
            return f"{self.message} (client_side_id={self.client_side_id})"
        return self.message


class ValidationError(VaultError):
    kind = ErrorKind.VALIDATION
    default_message = MSG_INVALID_DATA_PROVIDED


class IntegrityCheckError(VaultError):
    kind = ErrorKind.INTEGRITY
    default_message = MSG_INTEGRITY_CHECK_FAILED


class AuthenticationError(VaultError):
    """
    Bearer token rejected.

    `reason` tells apart the ways authentication can fail.
    """
    kind = ErrorKind.AUTHENTICATION
    default_message = MSG_TOKEN_IS_INVALID

    MISSING_HEADER = "missing_header"
    MALFORMED_HEADER = "malformed_header"
    EMPTY_TOKEN = "empty_token"
    EXPIRED_TOKEN = "expired_token"
    INVALID_TOKEN = "invalid_token"
    BAD_CREDENTIALS = "bad_credentials"

    _messages = {
        MISSING_HEADER: MSG_EMPTY_AUTHORIZATION_HEADER,
        MALFORMED_HEADER: MSG_INVALID_AUTHORIZATION_HEADER,
        EMPTY_TOKEN: MSG_EMPTY_TOKEN,
        EXPIRED_TOKEN: MSG_TOKEN_IS_EXPIRED,
        INVALID_TOKEN: MSG_TOKEN_IS_INVALID,
        BAD_CREDENTIALS: MSG_INVALID_LOGIN_PASSWORD,
    }

    def __init__(self, reason: str = INVALID_TOKEN):
        self.reason = reason
        super().__init__(self._messages[reason])


class AuthorizationError(VaultError):
    kind = ErrorKind.AUTHORIZATION
    default_message = MSG_ACCESS_DENIED


class NotFoundError(VaultError):
    kind = ErrorKind.NOT_FOUND
    default_message = MSG_DATA_NOT_FOUND


class UniquenessConflictError(VaultError):
    kind = ErrorKind.UNIQUENESS_CONFLICT
    default_message = MSG_RECORD_ALREADY_EXISTS


class VersionConflictError(VaultError):
    kind = ErrorKind.VERSION_CONFLICT
    default_message = MSG_VERSION_CONFLICT


class CancelledError(VaultError):
    kind = ErrorKind.CANCELLED
    default_message = MSG_REQUEST_CANCELLED


class BadGatewayError(VaultError):
    """The credential store behind registration or login failed."""
    kind = ErrorKind.BAD_GATEWAY
    default_message = MSG_LOGIN_FAILED


class StorageError(VaultError):
    """
    Failure inside the persistence layer.

    `retryable` is True for transient conditions (lost connection, lock
    timeout) where the client may repeat the same request.
    """
    kind = ErrorKind.INTERNAL
    default_message = MSG_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, *, retryable: bool = False):
        self.retryable = retryable
        super().__init__(message)
