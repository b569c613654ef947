"""
Domain errors raised by the services.

Services never build HTTP responses themselves; the handler registered in
main.py turns an AppException into a JSON body using `status_code` and
`error_type`.
"""


class AppException(Exception):
    error_type = "error"

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ==================== Not Found ====================


class NotFoundError(AppException):
    error_type = "not_found"
    entity = "Resource"

    def __init__(self, message: str = None):
        super().__init__(message or f"{self.entity} not found", 404)


class AuthorNotFound(NotFoundError):
    entity = "Author"


class UserNotFound(NotFoundError):
    entity = "User"


class PostNotFound(NotFoundError):
    entity = "Post"


class CommentNotFound(NotFoundError):
    entity = "Comment"


class ParentCommentNotFound(NotFoundError):
    entity = "Parent comment"


class CategoryNotFound(NotFoundError):
    entity = "Category"


class LikeNotFound(NotFoundError):
    entity = "Like"


# ==================== Validation ====================


class ValidationFailedError(AppException):
    error_type = "validation_failed"

    def __init__(self, message: str):
        super().__init__(message, 400)


class MaxDepthExceeded(ValidationFailedError):
    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Maximum reply depth exceeded (max {max_depth})")


class SomeCategoriesNotFound(ValidationFailedError):
    def __init__(self, missing_ids=None):
        self.missing_ids = sorted(missing_ids or [])
        super().__init__("Some categories not found")


class InvalidLikeTarget(ValidationFailedError):
    def __init__(self, message: str = "Invalid target specified for likes"):
        super().__init__(message)


# ==================== Conflict ====================


class ConflictError(AppException):
    error_type = "conflict"

    def __init__(self, message: str):
        super().__init__(message, 409)
