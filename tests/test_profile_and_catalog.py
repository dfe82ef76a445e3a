from __future__ import annotations

import asyncio

import pytest

from offchain.accessors.in_memory import InMemoryAccessor, InMemoryStorage
from offchain.catalog import (
    DESCRIPTION_FIELDS,
    INDEX_FIELDS,
    Address,
    HotelDescription,
    describe_catalog,
    missing_required_fields,
    required_wire_fields,
    wire_fields,
)
from offchain.errors import SchemaError, UnsupportedSchemeError
from offchain.pointer import StoragePointer
from offchain.profile import hotel_index_pointer, load_description, publish_hotel
from offchain.registry import AccessorRegistry


def _description(**extra):
    doc = {
        "name": "Hotel Tyrol",
        "description": "Quiet rooms by the lake",
        "contacts": {"general": {"email": "info@tyrol.example", "additionalContacts": [{"title": "Desk", "value": "+43 1"}]}},
        "address": {"line1": "Seestrasse 1", "postalCode": "6020", "city": "Innsbruck", "country": "AT"},
        "location": {"latitude": 47.26, "longitude": 11.39},
        "timezone": "Europe/Vienna",
        "currency": "EUR",
        "images": ["https://img.example/1.jpg"],
        "amenities": ["wifi"],
        "createdAt": "2018-03-01T10:00:00Z",
        "updatedAt": "2018-03-02T10:00:00Z",
    }
    doc.update(extra)
    return doc


def _registry() -> AccessorRegistry:
    return AccessorRegistry({"json": InMemoryAccessor(InMemoryStorage())})


def test_catalog_wire_names_and_required_fields() -> None:
    assert "postalCode" in wire_fields(Address)
    assert required_wire_fields(HotelDescription) == ("createdAt", "updatedAt")
    assert missing_required_fields(HotelDescription, {"createdAt": "x"}) == ["updatedAt"]
    assert missing_required_fields(HotelDescription, {"createdAt": "x", "updatedAt": "y"}) == []


def test_catalog_schemas() -> None:
    names = [f.name for f in DESCRIPTION_FIELDS]
    assert names[0] == "name"
    assert "amenities" in names and "updatedAt" in names
    assert not any(f.is_pointer for f in DESCRIPTION_FIELDS)

    (index_field,) = INDEX_FIELDS
    assert index_field.name == "descriptionUri"
    assert index_field.is_pointer is True
    assert index_field.fields == DESCRIPTION_FIELDS


def test_catalog_models_parse_wire_documents() -> None:
    desc = HotelDescription.model_validate(_description())
    assert desc.address.postal_code == "6020"
    assert desc.contacts.general.additional_contacts[0].title == "Desk"
    assert desc.created_at == "2018-03-01T10:00:00Z"


def test_describe_catalog() -> None:
    shapes = describe_catalog()
    assert shapes["HotelDataIndex"] == {"fields": ["descriptionUri"], "required": ["descriptionUri"]}
    assert shapes["AdditionalContact"]["required"] == ["title", "value"]


def test_publish_then_load_round_trip() -> None:
    reg = _registry()

    async def _run():
        index_uri = await publish_hotel(reg, "json", _description(unlisted="ignored"))
        index = hotel_index_pointer(index_uri, reg)
        return index_uri, await load_description(index)

    index_uri, desc = asyncio.run(_run())
    assert index_uri.startswith("json://")
    assert desc["name"] == "Hotel Tyrol"
    assert desc["address"]["city"] == "Innsbruck"
    assert desc["updatedAt"] == "2018-03-02T10:00:00Z"
    # Only declared fields are exposed.
    assert "unlisted" not in desc


def test_load_description_drops_absent_optional_fields() -> None:
    reg = _registry()
    minimal = {"createdAt": "2018-03-01T10:00:00Z", "updatedAt": "2018-03-01T10:00:00Z"}

    async def _run():
        index_uri = await publish_hotel(reg, "json", minimal)
        return await load_description(hotel_index_pointer(index_uri, reg))

    assert asyncio.run(_run()) == minimal


def test_load_description_requires_timestamps() -> None:
    reg = _registry()
    acc = reg.get("json")

    async def _run():
        desc_uri = await acc.upload({"name": "No dates"})
        index_uri = await acc.upload({"descriptionUri": desc_uri})
        await load_description(hotel_index_pointer(index_uri, reg))

    with pytest.raises(SchemaError) as e:
        asyncio.run(_run())
    assert e.value.code == "missing_required_field"
    assert e.value.details == {"missing": ["createdAt", "updatedAt"]}


def test_publish_rejects_incomplete_description() -> None:
    with pytest.raises(SchemaError):
        asyncio.run(publish_hotel(_registry(), "json", {"name": "x", "createdAt": "now"}))


def test_publish_to_unknown_scheme() -> None:
    with pytest.raises(UnsupportedSchemeError):
        asyncio.run(publish_hotel(_registry(), "ipfs", _description()))


def test_index_pointer_is_lazy() -> None:
    reg = _registry()
    index = hotel_index_pointer("json://0xmissing", reg)
    assert isinstance(index, StoragePointer)
    assert index.resolved is False
    assert reg.get("json").calls["download"] == 0
