"""Mount an annotated record as a read-only filesystem."""

from resolver import resolve
from vfile import VirtualFile


class StructFS:
    """Expose the tagged fields of record as a file tree.

    Paths are '/'-separated; '/' is the record itself, '/name/' lists a
    nested record and '/name' renders a field. The record must not be
    mutated while mounted.
    """

    def __init__(self, record, tag: str = "json"):
        self.record = record
        self.tag = tag

    def open(self, path: str) -> VirtualFile:
        """Render path into a new handle. Raises NotFoundError if it does not resolve."""
        if not path.startswith("/"):
            path = "/" + path
        return VirtualFile(path, resolve(path, self.record, self.tag))
