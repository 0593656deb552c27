"""Domain errors and failure typing."""


class DesigneeFinderError(Exception):
    """Base class for designee finder failures."""

    error_code = "FINDER_ERROR"


class ConfigError(DesigneeFinderError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class TransportError(DesigneeFinderError):
    """Raised when the remote registry cannot be queried."""

    error_code = "TRANSPORT_ERROR"


class ValidationError(DesigneeFinderError):
    """Raised when a registry response fails ingestion checks."""

    error_code = "VALIDATION_ERROR"


class StorageError(DesigneeFinderError):
    """Raised when the local snapshot cannot be read or written."""

    error_code = "STORAGE_ERROR"


class OriginNotFoundError(DesigneeFinderError, LookupError):
    """Raised when the ranking origin is absent from the coordinate table."""

    error_code = "ORIGIN_NOT_FOUND"


class ConvergenceError(DesigneeFinderError):
    """Raised when the geodesic solver does not converge for a pair."""

    error_code = "CONVERGENCE_ERROR"
