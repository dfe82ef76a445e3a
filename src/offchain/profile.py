from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from offchain.catalog import INDEX_FIELDS, HotelDescription, missing_required_fields
from offchain.errors import SchemaError, UnsupportedSchemeError
from offchain.pointer import StoragePointer
from offchain.registry import AccessorRegistry
from offchain.structured_logging import log_event

Json = Dict[str, Any]

_log = logging.getLogger("offchain.profile")


def hotel_index_pointer(locator: str, registry: AccessorRegistry) -> StoragePointer:
    """Pointer over the index document a hotel's ledger record refers to."""
    return StoragePointer.create(locator, INDEX_FIELDS, registry)


async def load_description(index: StoragePointer) -> Json:
    """Follow descriptionUri and read every declared description field.

    Absent optional fields are left out of the result. Raises SchemaError
    when createdAt or updatedAt is missing.
    """
    desc = await index.get("descriptionUri")
    out: Json = {}
    for fd in desc.fields:
        value = await desc.get(fd.name)
        if value is not None:
            out[fd.name] = value

    missing = missing_required_fields(HotelDescription, out)
    if missing:
        raise SchemaError(
            "missing_required_field",
            f"hotel description at {desc.ref} lacks required fields",
            {"missing": missing},
        )
    return out


async def publish_hotel(registry: AccessorRegistry, scheme: str, description: Mapping[str, Any]) -> str:
    """Upload a description and an index document pointing at it.

    Returns the index locator, the single value the ledger stores.
    """
    missing = missing_required_fields(HotelDescription, description)
    if missing:
        raise SchemaError("missing_required_field", "hotel description lacks required fields", {"missing": missing})

    accessor = registry.get(scheme)
    if accessor is None:
        raise UnsupportedSchemeError(scheme, f"{scheme}://")

    description_uri = await accessor.upload(description)
    index_uri = await accessor.upload({"descriptionUri": description_uri})
    log_event(_log, "hotel_published", index_uri=index_uri, description_uri=description_uri)
    return index_uri
