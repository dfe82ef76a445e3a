from __future__ import annotations

"""Field schema definitions for off-chain documents.

A schema lists the top-level fields a StoragePointer exposes. Each entry is
either a bare field name or a structured descriptor. Descriptors marked as
pointers hold a locator to a nested document with its own schema:

    [
        "name",
        {"name": "description", "isStoragePointer": True, "fields": ["name", "location"]},
    ]

Only top-level fields need declaring; a plain field may still hold an
arbitrary JSON value.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from offchain.errors import SchemaError


@dataclass(frozen=True, slots=True)
class FieldDef:
    name: str
    is_pointer: bool = False
    fields: Tuple["FieldDef", ...] = ()


FieldSpec = Union[str, FieldDef, Mapping[str, Any]]


def _from_mapping(raw: Mapping[str, Any]) -> FieldDef:
    name = raw.get("name")
    if "is_pointer" in raw:
        is_pointer = bool(raw.get("is_pointer"))
    else:
        is_pointer = bool(raw.get("isStoragePointer", False))
    nested = raw.get("fields")
    return FieldDef(
        name=name if isinstance(name, str) else "",
        is_pointer=is_pointer,
        fields=normalize_fields(nested),
    )


def _normalize_one(spec: Any) -> FieldDef:
    if isinstance(spec, str):
        fd = FieldDef(name=spec)
    elif isinstance(spec, FieldDef):
        fd = FieldDef(name=spec.name, is_pointer=spec.is_pointer, fields=normalize_fields(spec.fields))
    elif isinstance(spec, Mapping):
        fd = _from_mapping(spec)
    else:
        raise SchemaError("bad_field_descriptor", f"unsupported field descriptor type {type(spec).__name__}")

    if not fd.name.strip():
        raise SchemaError("bad_field_descriptor", "field name must be a non-empty string")
    if fd.fields and not fd.is_pointer:
        raise SchemaError("bad_field_descriptor", f"field {fd.name!r} declares nested fields but is not a pointer")
    return fd


def normalize_fields(fields: Optional[Iterable[FieldSpec]]) -> Tuple[FieldDef, ...]:
    """Normalize a field schema into a tuple of FieldDef.

    Raises SchemaError on empty names, duplicate names or unknown
    descriptor types. ``None`` is an empty schema.
    """
    if fields is None:
        return ()
    if not isinstance(fields, (list, tuple)):
        raise SchemaError("bad_schema", f"fields must be a list of field descriptors; got {type(fields).__name__}")

    out = []
    seen = set()
    for spec in fields:
        fd = _normalize_one(spec)
        if fd.name in seen:
            raise SchemaError("duplicate_field", f"field {fd.name!r} is declared more than once")
        seen.add(fd.name)
        out.append(fd)
    return tuple(out)


class FieldSchema:
    """Ordered, name-indexed view over normalized field definitions."""

    def __init__(self, fields: Optional[Iterable[FieldSpec]] = None) -> None:
        self._fields = normalize_fields(fields)
        self._by_name: Dict[str, FieldDef] = {fd.name: fd for fd in self._fields}

    @property
    def fields(self) -> Tuple[FieldDef, ...]:
        return self._fields

    def names(self) -> Tuple[str, ...]:
        return tuple(fd.name for fd in self._fields)

    def get(self, name: str) -> Optional[FieldDef]:
        return self._by_name.get(name)

    def pointer_fields(self) -> Tuple[FieldDef, ...]:
        return tuple(fd for fd in self._fields if fd.is_pointer)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[FieldDef]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldSchema({list(self.names())!r})"
