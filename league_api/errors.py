"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; the application installs a
single handler that renders them into the ``{success, message}`` envelope.
"""


class LeagueError(Exception):
    """Base class for errors that should reach the client as-is."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(LeagueError):
    """Missing or invalid request fields."""
    status_code = 400


class Unauthorized(LeagueError):
    status_code = 401


class Forbidden(LeagueError):
    """The caller does not own the resource it is acting on."""
    status_code = 403


class NotFound(LeagueError):
    status_code = 404


class Conflict(LeagueError):
    status_code = 409


class PersistenceError(LeagueError):
    """A write failed and the workflow could not continue."""
    status_code = 500


class SchemaDrift(LeagueError):
    """The database schema is missing columns the query expected."""
    status_code = 500
