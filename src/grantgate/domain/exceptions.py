"""Domain exceptions."""


class GrantGateError(Exception):
    """Base exception for grantgate.

    ``error_code`` is the stable identifier sent to API callers,
    ``retryable`` tells the caller whether the same request may succeed later.
    """

    error_code = "ServerError"
    retryable = False
    default_description = "An internal error occurred"

    @property
    def description(self) -> str:
        return str(self) or self.default_description


class InvalidRequest(GrantGateError):
    """Required parameters are missing or malformed."""

    error_code = "InvalidRequest"
    default_description = "The request is missing required parameters"


class InvalidClient(GrantGateError):
    """Calling client is unknown, disabled or presented a wrong secret."""

    error_code = "InvalidClient"
    default_description = "Invalid client credentials"


class InvalidToken(GrantGateError):
    """Token cannot be trusted."""

    error_code = "InvalidToken"
    default_description = "Token validation failed"


class MalformedToken(InvalidToken):
    """Token is not a parseable signed JWT or lacks required claims."""

    default_description = "Token is malformed or unsigned"


class InvalidSignature(InvalidToken):
    """Token signature does not match any current signing key."""

    default_description = "Token signature is invalid"


class TokenExpired(GrantGateError):
    """Token exp claim is in the past."""

    error_code = "TokenExpired"
    default_description = "The token has expired"


class TokenRevoked(GrantGateError):
    """Token jti is present in the revocation registry."""

    error_code = "TokenRevoked"
    default_description = "The token has been revoked"


class NotFound(GrantGateError):
    """Requested entity was not found."""

    error_code = "NotFound"
    default_description = "Not found"

    def __init__(self, kind: str = "", key: object = "") -> None:
        if kind:
            super().__init__(f"{kind} not found: {key}" if key != "" else f"{kind} not found")
        else:
            super().__init__()


class ResourceUnknown(NotFound):
    """Resource id or code does not exist in the resource tree."""

    error_code = "ResourceUnknown"
    default_description = "Resource is unknown"

    def __init__(self, key: object = "") -> None:
        super().__init__("Resource", key)


class UserNotFound(NotFound):
    """Token subject is not a registered user."""

    error_code = "UserNotFound"
    default_description = "User not found in system"

    def __init__(self, key: object = "") -> None:
        super().__init__("User", key)


class StorageUnavailable(GrantGateError):
    """Durable storage could not be reached in time."""

    error_code = "StorageUnavailable"
    retryable = True
    default_description = "Storage is temporarily unavailable"


class ResourceTreeCorrupted(StorageUnavailable):
    """Parent pointers of the resource tree form a cycle."""

    default_description = "Resource tree is inconsistent"


class KeySetUnavailable(GrantGateError):
    """Signing keys could not be fetched from the issuer."""

    error_code = "KeySetUnavailable"
    retryable = True
    default_description = "Signing keys are temporarily unavailable"
