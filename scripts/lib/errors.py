"""
Custom error classes for the CRM Sales Metrics service.
Structured error handling with error codes across all modules.

Hierarchy:
    SalesMetricsError
    ├── ValidationError
    ├── NotFoundError
    ├── UpstreamError
    │   ├── UpstreamReadError
    │   └── UpstreamWriteError
    └── StartupError
        ├── ConfigError
        └── RepositoryInitError
"""


class SalesMetricsError(Exception):
    """Base exception for all sales metrics errors."""

    status_code = 500

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- Request Errors ---

class ValidationError(SalesMetricsError):
    """A required parameter is absent or malformed."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message, code="VALIDATION_ERROR", details={"field": field},
        )
        self.field = field


class NotFoundError(SalesMetricsError):
    """A document the request depends on does not exist."""

    status_code = 404

    def __init__(self, message: str, resource: str = None):
        super().__init__(
            message, code="NOT_FOUND", details={"resource": resource},
        )


# --- Upstream Errors ---

class UpstreamError(SalesMetricsError):
    """Base class for document store failures."""
    pass


class UpstreamReadError(UpstreamError):
    """Reading leads, activities, goals or sellers failed."""

    def __init__(self, source: str, cause: Exception = None):
        msg = f"Failed to read from '{source}'"
        if cause:
            msg += f": {cause}"
        super().__init__(msg, code="UPSTREAM_READ", details={"source": source})


class UpstreamWriteError(UpstreamError):
    """Persisting goals failed."""

    def __init__(self, source: str, cause: Exception = None):
        msg = f"Failed to write to '{source}'"
        if cause:
            msg += f": {cause}"
        super().__init__(msg, code="UPSTREAM_WRITE", details={"source": source})


# --- Startup Errors ---

class StartupError(SalesMetricsError):
    """Fatal problem detected before requests are accepted."""
    pass


class ConfigError(StartupError):
    """Configuration value missing or invalid."""

    def __init__(self, message: str, variable: str = None):
        super().__init__(
            message, code="CONFIG_ERROR", details={"variable": variable},
        )


class RepositoryInitError(StartupError):
    """The document store could not be reached during initialization."""

    def __init__(self, message: str, url: str = None):
        super().__init__(
            message, code="REPOSITORY_INIT", details={"url": url},
        )
