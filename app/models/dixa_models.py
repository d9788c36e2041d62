"""
Decoders for Dixa API responses. Dixa wraps every result in a `data` field.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class EndUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    displayName: Optional[str] = None
    email: Optional[str] = None
    phoneNumber: Optional[str] = None
    externalId: Optional[str] = None


class Conversation(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Union[int, str]
    requesterId: Optional[str] = None


class _EndUserList(BaseModel):
    data: List[EndUser] = []


class _EndUserEnvelope(BaseModel):
    data: EndUser


class _ConversationEnvelope(BaseModel):
    data: Conversation


def decode_end_users(body: Any) -> List[EndUser]:
    return _EndUserList.model_validate(body).data


def decode_end_user(body: Any) -> EndUser:
    return _EndUserEnvelope.model_validate(body).data


def decode_conversation(body: Any) -> Conversation:
    return _ConversationEnvelope.model_validate(body).data
