"""Render resolved fields as bytes.

    directory -> tag names, one per line
    sequence  -> element string forms, one per line
    scalar    -> natural string form
"""

from fields import FieldIndex, Kind, kind_of


def render_listing(names: list[str]) -> bytes:
    return "\n".join(names).encode("utf-8")


def _scalar_text(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_scalar(value) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return _scalar_text(value).encode("utf-8")


def render_sequence(values) -> bytes:
    # Aggregate elements fall back to their str() form
    return "\n".join(_scalar_text(v) for v in values).encode("utf-8")


def render_value(value, tag: str) -> bytes:
    """Render any field value according to its kind."""
    kind = kind_of(value, tag)
    if kind is Kind.STRUCT:
        return render_listing(FieldIndex(value, tag).names())
    if kind is Kind.SEQUENCE:
        return render_sequence(value)
    return render_scalar(value)
