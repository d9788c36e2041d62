"""
Decoders for Voyado API responses.

Voyado returns different shapes depending on the API version (a bare contact id
string vs. an object, a bare array vs. an `items` envelope). Everything is
normalized here so the orchestrators only ever see one shape.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError


class ContactRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]


class PointAccount(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    contactId: Optional[str] = None
    balance: Optional[float] = None


class InteractionSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    schemaId: Optional[str] = None
    createdDate: Optional[str] = None


class InteractionDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    contactId: Optional[str] = None
    schemaId: Optional[str] = None
    createdDate: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None


class _ItemsEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: List[Dict[str, Any]]


_point_accounts = TypeAdapter(List[PointAccount])
_interactions = TypeAdapter(List[InteractionSummary])


def _unwrap_items(data: Any) -> Optional[list]:
    """A bare array, or the `items` array of an envelope object. None otherwise."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        try:
            return _ItemsEnvelope.model_validate(data).items
        except ValidationError:
            return None
    return None


def decode_contact_id(data: Any) -> Optional[str]:
    """Contact id from either a bare string or an object with an `id` field."""
    if isinstance(data, str):
        return data.strip().strip('"') or None
    if isinstance(data, dict):
        try:
            contact_id = ContactRef.model_validate(data).id
        except ValidationError:
            return None
        return str(contact_id).strip() or None
    return None


def decode_point_accounts(data: Any) -> List[PointAccount]:
    items = _unwrap_items(data)
    if items is None:
        raise ValueError(f"Unexpected point-account response shape: {type(data).__name__}")
    return _point_accounts.validate_python(items)


def decode_interactions(data: Any) -> List[InteractionSummary]:
    items = _unwrap_items(data)
    if items is None:
        raise ValueError(f"Unexpected interaction list shape: {type(data).__name__}")
    return _interactions.validate_python(items)


def decode_interaction_detail(data: Any) -> InteractionDetail:
    return InteractionDetail.model_validate(data)
