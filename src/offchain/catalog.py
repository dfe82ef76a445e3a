from __future__ import annotations

"""Document shapes for off-chain hotel data.

These are declarative contracts: they describe which fields a document may
carry, which are required and which hold nested shapes. Wire names are
camelCase (``postalCode``, ``updatedAt``); Python attributes are snake_case.

Content validation is limited to structural presence
(missing_required_fields). Values are never type-checked by the
resolution layer.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field

from offchain.schema import FieldDef, normalize_fields


class _Shape(BaseModel):
    # Unknown keys are allowed (forward compatible).
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class AdditionalContact(_Shape):
    title: str
    value: str


class Contact(_Shape):
    email: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    ethereum: Optional[str] = Field(default=None, description="Ledger address of the contact")
    additional_contacts: Optional[List[AdditionalContact]] = Field(default=None, alias="additionalContacts")


class Contacts(_Shape):
    general: Contact


class Address(_Shape):
    line1: Optional[str] = None
    line2: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


class Location(_Shape):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class HotelDescription(_Shape):
    name: Optional[str] = None
    description: Optional[str] = None
    contacts: Optional[Contacts] = None
    address: Optional[Address] = None
    location: Optional[Location] = None
    timezone: Optional[str] = None
    currency: Optional[str] = None
    images: Optional[List[str]] = None
    amenities: Optional[List[str]] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")


class HotelDataIndex(_Shape):
    """Entry document the ledger points to."""

    description_uri: str = Field(..., alias="descriptionUri")


def _wire_name(name: str, info: Any) -> str:
    return info.alias or name


def wire_fields(model: Type[BaseModel]) -> Tuple[str, ...]:
    return tuple(_wire_name(n, f) for n, f in model.model_fields.items())


def required_wire_fields(model: Type[BaseModel]) -> Tuple[str, ...]:
    return tuple(_wire_name(n, f) for n, f in model.model_fields.items() if f.is_required())


def missing_required_fields(model: Type[BaseModel], document: Mapping[str, Any]) -> List[str]:
    return [name for name in required_wire_fields(model) if document.get(name) is None]


DESCRIPTION_FIELDS: Tuple[FieldDef, ...] = normalize_fields(wire_fields(HotelDescription))

INDEX_FIELDS: Tuple[FieldDef, ...] = normalize_fields(
    [FieldDef(name="descriptionUri", is_pointer=True, fields=DESCRIPTION_FIELDS)]
)


def describe_catalog() -> Dict[str, Dict[str, List[str]]]:
    """Field listing per shape, for API docs and debugging."""
    shapes: List[Type[BaseModel]] = [
        AdditionalContact,
        Contact,
        Contacts,
        Address,
        Location,
        HotelDescription,
        HotelDataIndex,
    ]
    return {
        m.__name__: {"fields": list(wire_fields(m)), "required": list(required_wire_fields(m))}
        for m in shapes
    }
