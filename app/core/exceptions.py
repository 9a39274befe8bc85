"""
Error taxonomy for the permission-scoped data access layer.

Every error raised by the access layer derives from AccessLayerError so the
application can translate them to HTTP responses in one place (see app.main).
"""


class AccessLayerError(Exception):
    """Base class for access layer errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(AccessLayerError):
    """No valid identity context could be established for the caller."""

    status_code = 401


class AuthorizationError(AccessLayerError):
    """The caller is authenticated but none of its roles grant the permission."""

    status_code = 403


class NotFoundError(AccessLayerError):
    """
    The visibility-filtered lookup matched no row.

    Raised for rows that do not exist and for rows the caller may not see alike.
    """

    status_code = 404


class UnsupportedOperationError(AccessLayerError):
    """Soft delete requested on a resource without a soft-delete column."""

    status_code = 400


class DependencyError(AccessLayerError):
    """The role-binding store or the storage engine failed."""

    status_code = 503


class ConfigurationError(AccessLayerError):
    """Unknown resource, action or column referenced by a caller or by the policy."""

    status_code = 400


class RecordValidationError(AccessLayerError):
    """A record value does not fit its column, or a required column is missing."""

    status_code = 400
