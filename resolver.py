"""Resolve slash-delimited paths against an annotated record."""

from fields import FieldIndex
from render import render_listing, render_value


def resolve(path: str, record, tag: str) -> bytes:
    """Return the rendered content for path, which must start with '/'.

    "/"          -> listing of record
    "/a/rest"    -> resolve "/rest" against field a
    "//rest"     -> listing of record (empty segment)
    "/a"         -> rendering of field a

    Raises FieldNotFoundError or NoTaggedFieldsError when a lookup fails.
    """
    index = FieldIndex(record, tag)
    if path == "/":
        return render_listing(index.names())

    idx = path.find("/", 1) - 1
    if idx > 0:
        child = index.field(path[1:idx + 1])
        return resolve(path[idx + 1:], child, tag)
    if idx == 0:
        return render_listing(index.names())
    return render_value(index.leaf(path[1:]), tag)
