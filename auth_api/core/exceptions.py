"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, is_operational: bool = True):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        self.is_operational = is_operational
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class InternalServerException(AppException):
    """Server-side fault such as a hashing or signing failure."""

    def __init__(self, message: str = "Internal server error"):
        """Initialize with 500 status code."""
        super().__init__(message, status_code=500)


# Authentication errors


class InvalidLoginException(UnauthorizedException):
    """Unknown email or wrong password.

    Both cases share this exception and message so that the response does not
    reveal whether an account exists.
    """

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidRefreshTokenException(UnauthorizedException):
    """Refresh token failed verification or is no longer the stored one."""

    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message)


class UnauthenticatedException(UnauthorizedException):
    """No verified identity is attached to the request."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class InvalidTokenException(BadRequestException):
    """Token is malformed, badly signed, expired or already consumed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class InvalidProfileException(BadRequestException):
    """OAuth provider profile lacks required fields."""

    def __init__(self, message: str = "Google profile is missing email or name"):
        super().__init__(message)


class UserNotFoundException(NotFoundException):
    """User lookup returned nothing."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class EmailAlreadyExistsException(ConflictException):
    """Email is already registered."""

    def __init__(self, message: str = "Email already exists"):
        super().__init__(message)
