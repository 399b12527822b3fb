"""Exceptions raised by host selection and the host catalog."""


class RoutingError(Exception):
    """Base class for routing failures visible to callers."""


class NoHostsFound(RoutingError):
    """The catalog has no inference hosts for the requested scope."""

    def __init__(self, message: str = "No hosts found."):
        super().__init__(message)


class SourceSetNotFound(RoutingError):
    """The source set does not exist or the caller may not use it."""

    def __init__(self, message: str = "Source set not found."):
        super().__init__(message)


class SourceNotFound(RoutingError):
    """The source does not exist, belongs to another model, or is not accessible."""

    def __init__(self, message: str = "Source not found."):
        super().__init__(message)


class InvalidHostUrl(RoutingError, ValueError):
    """A host URL cannot be reduced to ``scheme://host:port``."""
