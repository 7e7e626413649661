"""Errors raised by the mock booking engine.

Messages are free text meant to be shown to the user as-is. The class tells
the HTTP layer which status code to use.
"""


class MockApiError(Exception):
    """Base for every error the mock engine raises on purpose."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(MockApiError):
    """A user, game or booking does not exist."""


class ConflictError(MockApiError):
    """The request clashes with existing state (duplicate email, full game...)."""


class InvalidRequestError(MockApiError):
    """The request is malformed or refers to a blocked value."""


class AuthenticationError(MockApiError):
    """Credentials or token did not check out."""
