"""
Domain exceptions for the bookstore service.

Each exception carries the HTTP status and a stable error code so the API
layer can render it without inspecting messages.
"""


class BookstoreError(Exception):
    """Base class for expected, client-facing failures."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(BookstoreError):
    """A book (or user) does not exist."""

    status_code = 404
    code = "not_found"
    default_message = "Book not found"


class Unauthorized(BookstoreError):
    """No caller identity was supplied on a protected request."""

    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class InvalidToken(BookstoreError):
    """The supplied token is malformed, forged or expired."""

    status_code = 401
    code = "invalid_token"
    default_message = "Invalid token"


class AuthFailure(BookstoreError):
    """Unknown username or wrong password."""

    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class DuplicateUser(BookstoreError):
    """Registration attempted with a username that is taken."""

    status_code = 409
    code = "duplicate_user"
    default_message = "Username already registered"


class DuplicateBook(BookstoreError):
    """A book with the same ISBN is already in the catalog."""

    status_code = 409
    code = "duplicate_book"
    default_message = "Book already exists"


class ReviewConflict(BookstoreError):
    """The review could not be written because the book kept changing under us."""

    status_code = 409
    code = "review_conflict"
    default_message = "Review could not be saved, please retry"
