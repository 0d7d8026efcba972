"""Custom exceptions for the service layer.

These are HTTP-agnostic; `app.main` maps them to responses.
"""


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, code: str = "SERVICE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(ServiceError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message=f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND"
        )


class PostNotFoundError(NotFoundError):
    """Post not found error."""

    def __init__(self, post_id: str):
        super().__init__("Post", post_id)


class CommentNotFoundError(NotFoundError):
    """Comment not found error."""

    def __init__(self, comment_id: str):
        super().__init__("Comment", comment_id)


class NotificationNotFoundError(NotFoundError):
    """Notification not found error."""

    def __init__(self, notification_id: str):
        super().__init__("Notification", notification_id)


class UserNotFoundError(NotFoundError):
    """User not found error."""

    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class InvalidInputError(ServiceError):
    """Malformed id, unknown enum value, bad date or empty update."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID")


class LastAdminError(InvalidInputError):
    """Operation would leave the system without an administrator."""

    def __init__(self, message: str = "Cannot delete the last admin user"):
        super().__init__(message)
        self.code = "LAST_ADMIN"


class UnauthenticatedError(ServiceError):
    """No live session for the request."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, code="UNAUTHENTICATED")


class ForbiddenError(ServiceError):
    """Authenticated, but not allowed to perform the operation."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, code="FORBIDDEN")


class InvalidStateError(ServiceError):
    """OAuth state parameter missing or not matching the session."""

    def __init__(self, message: str = "Invalid state parameter. Possible CSRF attack."):
        super().__init__(message=message, code="INVALID_STATE")


class DomainNotAllowedError(ServiceError):
    """Signed-in Google account is outside the allowed email domain."""

    def __init__(self, email: str, allowed_domain: str):
        self.email = email
        self.allowed_domain = allowed_domain
        super().__init__(
            message=f"Email {email} is not in the allowed domain {allowed_domain}",
            code="DOMAIN_NOT_ALLOWED"
        )


class AuthExchangeFailedError(ServiceError):
    """Authorization code could not be exchanged for a profile."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, code="AUTH_EXCHANGE_FAILED")
