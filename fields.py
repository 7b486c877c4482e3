"""Tag-driven field index over annotated records.

A record is a dataclass instance whose fields carry a name under some tag key
in their metadata:

    @dataclass
    class DNS:
        nameservers: list[str] = field(default_factory=list,
                                       metadata={"json": "nameservers"})

Fields without a name under the tag key are hidden. Classes that are not
dataclasses can be exposed with register_fields().
"""

import dataclasses
import enum
import functools
import typing
from dataclasses import dataclass

from errors import FieldNotFoundError, NoTaggedFieldsError, RecordError


class Kind(enum.Enum):
    """Shape of a field value, deciding how it resolves and renders."""
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    STRUCT = "struct"


@dataclass(frozen=True)
class FieldDescriptor:
    """One exposed field: the attribute holding it and its tag name."""
    attr: str
    name: str


# (cls, tag) -> [(attr, name), ...] for classes registered by hand
_REGISTRY: dict[tuple[type, str], tuple[FieldDescriptor, ...]] = {}


def register_fields(cls: type, tag: str, fields: list[tuple[str, str]]):
    """Expose a non-dataclass type under tag as (attribute, name) pairs, in order."""
    _REGISTRY[(cls, tag)] = tuple(FieldDescriptor(attr, name) for attr, name in fields if name)
    descriptors.cache_clear()


def _is_struct_type(cls: type, tag: str) -> bool:
    return (cls, tag) in _REGISTRY or dataclasses.is_dataclass(cls)


@functools.lru_cache(maxsize=None)
def descriptors(cls: type, tag: str) -> tuple[FieldDescriptor, ...]:
    """Return the tagged fields of cls in declaration order."""
    if (cls, tag) in _REGISTRY:
        return _REGISTRY[(cls, tag)]
    if not dataclasses.is_dataclass(cls):
        return ()
    result = []
    for f in dataclasses.fields(cls):
        name = f.metadata.get(tag, "")
        if name:
            result.append(FieldDescriptor(f.name, name))
    return tuple(result)


def kind_of(value, tag: str) -> Kind:
    if not isinstance(value, type) and _is_struct_type(type(value), tag):
        return Kind.STRUCT
    if isinstance(value, (list, tuple)):
        return Kind.SEQUENCE
    return Kind.SCALAR


class FieldIndex:
    """Name-based access to the tagged fields of one record."""

    def __init__(self, record, tag: str):
        self.record = record
        self.tag = tag
        self._fields = descriptors(type(record), tag)

    def names(self) -> list[str]:
        """Return tag names in declaration order. Raises NoTaggedFieldsError if there are none."""
        names = [d.name for d in self._fields]
        if not names:
            raise NoTaggedFieldsError(f"No fields tagged {self.tag!r} in {type(self.record).__name__}")
        return names

    def field(self, name: str):
        """Return the value of the first field tagged name. Raises FieldNotFoundError."""
        for d in self._fields:
            if d.name == name:
                return getattr(self.record, d.attr)
        raise FieldNotFoundError(f"Field not found: {name}")

    def leaf(self, name: str):
        """Return the value to render for a leaf request on name."""
        return self.field(name)


def load_record(cls: type, data, tag: str = "json"):
    """Build a cls instance from a decoded JSON mapping, keyed by tag names.

    Untagged fields are filled from the key matching their attribute name
    case-insensitively. Missing keys leave the field default in place.
    """
    if not isinstance(data, dict):
        raise RecordError(f"Expected an object for {cls.__name__}, got {type(data).__name__}")

    hints = typing.get_type_hints(cls)
    lowered = {k.lower(): k for k in data}
    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        key = f.metadata.get(tag, "")
        if not key:
            key = lowered.get(f.name.lower())
        if key is None or key not in data:
            continue
        kwargs[f.name] = _convert(hints.get(f.name), data[key], tag)
    return cls(**kwargs)


def _convert(hint, value, tag: str):
    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return load_record(hint, value, tag)
    if typing.get_origin(hint) in (list, tuple) and isinstance(value, list):
        args = typing.get_args(hint)
        item = args[0] if args else None
        items = [_convert(item, v, tag) for v in value]
        return items if typing.get_origin(hint) is list else tuple(items)
    return value
