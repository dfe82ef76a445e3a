from __future__ import annotations

"""Lazy, schema-driven access to an off-chain document.

A StoragePointer owns one locator and one field schema. Nothing is fetched
at construction. The first read of any declared field downloads the whole
document once through the accessor registered for the locator's scheme;
every later read is served from the cached document.

    ptr = StoragePointer.create("json://0xabc", [
        "name",
        {"name": "description", "isStoragePointer": True, "fields": ["name", "location"]},
    ], registry)

    await ptr.get("name")
    desc = await ptr.get("description")   # a StoragePointer over the nested locator
    await desc.get("location")

Concurrent readers of an unresolved pointer share a single in-flight
download task. The cache is filled inside that task before it completes,
so a reader can never see a resolved pointer with an empty cache.
"""

import asyncio
import copy
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from offchain.accessors.base import Document, StorageAccessor
from offchain.errors import DownloadError, InvalidReferenceError, SchemaError
from offchain.registry import AccessorRegistry
from offchain.schema import FieldDef, FieldSchema, FieldSpec
from offchain.structured_logging import log_event

_log = logging.getLogger("offchain.pointer")


def _retrieve_exception(task: asyncio.Task) -> None:
    # Marks the failure as seen; readers still awaiting the task get it raised.
    if not task.cancelled():
        task.exception()


class StoragePointer:
    def __init__(
        self,
        ref: str,
        schema: FieldSchema,
        registry: AccessorRegistry,
        *,
        max_depth: Optional[int] = None,
        parent_refs: Tuple[str, ...] = (),
    ) -> None:
        if not isinstance(ref, str) or not ref.strip():
            raise InvalidReferenceError("missing_ref", "cannot instantiate StoragePointer without url")
        self.ref = ref
        self.schema = schema
        self.registry = registry
        self.max_depth = int(max_depth if max_depth is not None else registry.max_depth)
        self.parent_refs = tuple(parent_refs)

        self._document: Optional[Document] = None
        self._inflight: Optional[asyncio.Task] = None
        self._children: Dict[str, StoragePointer] = {}
        # Bumped by update(); a download started before an update must not
        # overwrite the newer document.
        self._generation = 0

    @classmethod
    def create(
        cls,
        ref: Optional[str],
        fields: Optional[Iterable[FieldSpec]],
        registry: AccessorRegistry,
        *,
        max_depth: Optional[int] = None,
    ) -> "StoragePointer":
        return cls(str(ref or ""), FieldSchema(fields), registry, max_depth=max_depth)

    def __repr__(self) -> str:
        state = "resolved" if self.resolved else "unresolved"
        return f"StoragePointer({self.ref!r}, fields={list(self.schema.names())!r}, {state})"

    @property
    def fields(self) -> Tuple[FieldDef, ...]:
        return self.schema.fields

    @property
    def resolved(self) -> bool:
        return self._document is not None

    @property
    def depth(self) -> int:
        return len(self.parent_refs)

    # ----------------------------
    # Resolution
    # ----------------------------

    async def _download(self, accessor: StorageAccessor) -> Document:
        generation = self._generation
        try:
            doc = await accessor.download(self.ref)
        except Exception as e:
            if generation != self._generation and self._document is not None:
                # An update landed meanwhile; readers get the updated document.
                return self._document
            log_event(
                _log,
                "pointer_download_failed",
                level=logging.WARNING,
                ref=self.ref,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        finally:
            self._inflight = None

        if generation != self._generation and self._document is not None:
            return self._document
        if not isinstance(doc, Mapping):
            raise DownloadError("malformed_document", f"document at {self.ref} is not a JSON object")

        self._document = dict(doc)
        self._children.clear()
        log_event(_log, "pointer_resolved", ref=self.ref, fields=len(self._document), depth=self.depth)
        return self._document

    async def _resolve(self) -> Document:
        if self._document is not None:
            return self._document

        task = self._inflight
        if task is None:
            # Raises UnsupportedSchemeError before any I/O is started.
            accessor = self.registry.resolve_accessor(self.ref)
            task = asyncio.ensure_future(self._download(accessor))
            # Every reader may have been cancelled by the time the download fails.
            task.add_done_callback(_retrieve_exception)
            self._inflight = task

        # A cancelled reader must not cancel the download other readers share.
        return await asyncio.shield(task)

    async def resolve(self) -> None:
        """Ensure the document is downloaded; at most one download is in flight.

        The cached document itself is never handed out. Read it through
        get() or contents(), which expose declared fields only.
        """
        await self._resolve()

    def _child(self, fd: FieldDef, value: Any) -> "StoragePointer":
        child = self._children.get(fd.name)
        if child is not None:
            return child

        if not isinstance(value, str) or not value.strip():
            shown = "undefined" if value is None else str(value)
            raise InvalidReferenceError(
                "invalid_reference",
                f"cannot access {fd.name} under value {shown} which does not appear to be a valid reference",
            )

        lineage = self.parent_refs + (self.ref,)
        if value in lineage:
            raise InvalidReferenceError("cyclic_reference", f"{fd.name} points back to {value}", {"lineage": list(lineage)})
        if len(lineage) > self.max_depth:
            raise InvalidReferenceError(
                "max_depth_exceeded",
                f"nesting deeper than {self.max_depth} levels at {fd.name}",
                {"ref": value},
            )

        child = StoragePointer(
            value,
            FieldSchema(fd.fields),
            self.registry,
            max_depth=self.max_depth,
            parent_refs=lineage,
        )
        self._children[fd.name] = child
        return child

    async def get(self, name: str) -> Any:
        """Read one declared field.

        Returns a copy of the cached value for plain fields (None when
        absent) or a StoragePointer for fields declared as pointers. Only
        update() changes what later reads see.
        """
        fd = self.schema.get(name)
        if fd is None:
            raise SchemaError("undeclared_field", f"field {name!r} is not declared for {self.ref}")

        doc = await self._resolve()
        if fd.is_pointer:
            return self._child(fd, doc.get(fd.name))
        return copy.deepcopy(doc.get(fd.name))

    async def contents(self) -> Dict[str, Any]:
        """All declared fields, nested pointers included as StoragePointer."""
        await self._resolve()
        return {fd.name: await self.get(fd.name) for fd in self.schema}

    # ----------------------------
    # Writes
    # ----------------------------

    async def update(self, document: Mapping[str, Any]) -> None:
        """Replace the whole document at this pointer's locator.

        On success the cache holds exactly ``document`` and nested pointers
        are re-derived on their next read. On failure the cache is left as
        it was and the accessor's error propagates.
        """
        accessor = self.registry.resolve_accessor(self.ref)
        new_doc = copy.deepcopy(dict(document))
        await accessor.update(self.ref, new_doc)

        self._generation += 1
        self._document = new_doc
        self._children.clear()
        log_event(_log, "pointer_updated", ref=self.ref, fields=len(new_doc))
