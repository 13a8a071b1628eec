import math
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, StrictStr, field_validator

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


# Inbound

class SubscribeRequest(BaseModel):
    partyId: NonEmptyStr
    roomId: NonEmptyStr


class RelayRequest(BaseModel):
    partyId: NonEmptyStr
    roomId: NonEmptyStr
    toPartyId: NonEmptyStr
    msg: Any

    @field_validator("msg")
    @classmethod
    def msg_not_empty(cls, value: Any) -> Any:
        # Falsy scalars (null, "", 0, false, NaN) are empty; {} and [] are content
        if value is None or (isinstance(value, str) and value == ""):
            raise ValueError("msg must not be empty")
        if isinstance(value, (int, float)) and not value:
            raise ValueError("msg must not be empty")
        if isinstance(value, float) and math.isnan(value):
            raise ValueError("msg must not be empty")
        return value


# Outbound

class ErrorPayload(BaseModel):
    error: str


class PresencePayload(BaseModel):
    action: Literal["presence"] = "presence"
    fromPartyId: str
    roomId: str
    online: bool


class RelayedMessage(BaseModel):
    action: Literal["message"] = "message"
    fromPartyId: str
    roomId: str
    msg: Any
