"""Schema loading errors."""


class SchemaLoadError(ValueError):
    """Raised when an entity schema cannot be read, parsed or validated."""
