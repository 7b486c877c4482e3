"""Errors raised while mounting, resolving and serving records."""


class StructFSError(Exception):
    """Base error for structfs operations."""
    pass


class NotFoundError(StructFSError):
    """Path does not resolve to anything in the mounted record."""
    pass


class FieldNotFoundError(NotFoundError):
    """No field's tag matches the requested path segment."""
    pass


class NoTaggedFieldsError(NotFoundError):
    """A directory listing found no tagged fields at that level."""
    pass


class RecordError(StructFSError):
    """A record could not be built from its input data."""
    pass
