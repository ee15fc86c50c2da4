"""Exceptions raised by the location engine."""


class LocationError(Exception):
    """Base class for every location engine error."""


class DatasetLoadError(LocationError):
    """Raised by initialize() when the record source is unreachable or malformed."""


class InvalidQueryError(LocationError, ValueError):
    """Raised when a pincode query is empty, non-numeric or longer than 6 digits."""


class InvalidSelectionError(LocationError, ValueError):
    """Raised when a selection field is not reachable from its parent field."""
