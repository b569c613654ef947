import logging
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from forum.core.exceptions import AppException

logger = logging.getLogger(__name__)


class DBException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def db_exception(func):
    """Translate storage failures of a service method into DBException.

    The session is rolled back before re-raising so the request leaves no
    partial writes behind. Domain errors pass through untouched.
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except AppException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error in {func.__qualname__}: {e.orig}")
            raise DBException("Duplicate entry: already exists", 409)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error in {func.__qualname__}: {e}")
            raise DBException("Database error occurred", 500)

    return wrapper
