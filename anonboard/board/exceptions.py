"""Typed failures raised by the board service.

Each error carries a stable ``code`` so the HTTP layer can map it to a
status without looking at the message.
"""


class BoardError(Exception):
    """Base board error."""

    def __init__(self, message: str, code: str = "board_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class UnauthenticatedError(BoardError):
    """No principal was supplied for an operation that needs one."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "unauthenticated")


class ForbiddenError(BoardError):
    """The principal exists but lacks rights for this action."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, "forbidden")


class NotFoundError(BoardError):
    """Referenced entity does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found")


class PostNotFoundError(NotFoundError):
    """Post not found."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message)


class CommentNotFoundError(NotFoundError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)


class ValidationFailedError(BoardError):
    """Missing text, unknown category, or an invalid reply target."""

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message, "validation_failed")


class StoreUnavailableError(BoardError):
    """The persistence layer failed; the request is not retried."""

    def __init__(self, message: str = "Storage temporarily unavailable"):
        super().__init__(message, "store_unavailable")
