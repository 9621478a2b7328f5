from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_USER_ID = "default"
DEFAULT_TYPE = "default"


def _blank_to_none(value: Any) -> Any:
    """
    Internal helper treating None and whitespace-only strings as 'not supplied'.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


# PUBLIC_INTERFACE
class ActivityCreate(BaseModel):
    """
    Schema for creating a new activity.

    title and start are required; end falls back to start, userId and type to
    'default' and description to ''.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Morning run",
                "start": "2024-01-01",
                "end": "2024-01-01",
                "userId": "u1",
                "description": "5k around the park",
                "type": "sport",
            }
        },
    )

    title: str = Field(..., description="Activity title", min_length=1)
    start: str = Field(..., description="Start date or datetime", min_length=1)
    end: Optional[str] = Field(default=None, description="End date or datetime; defaults to start")
    user_id: str = Field(default=DEFAULT_USER_ID, alias="userId", description="Owner partition key")
    description: str = Field(default="", description="Free text description")
    type: str = Field(default=DEFAULT_TYPE, description="Activity category")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and reject titles that end up empty.
        """
        s = v.strip()
        if not s:
            raise ValueError("title is required")
        return s

    @field_validator("start")
    @classmethod
    def validate_start(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("start is required")
        return v

    @field_validator("end", mode="before")
    @classmethod
    def normalize_end(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("user_id", mode="before")
    @classmethod
    def default_user_id(cls, v: Any) -> Any:
        """
        Null or blank userId falls back to 'default'.
        """
        return DEFAULT_USER_ID if _blank_to_none(v) is None else v

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v: Any) -> Any:
        return DEFAULT_TYPE if _blank_to_none(v) is None else v

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @model_validator(mode="after")
    def end_defaults_to_start(self) -> "ActivityCreate":
        if self.end is None:
            self.end = self.start
        return self


# PUBLIC_INTERFACE
class ActivityUpdate(ActivityCreate):
    """
    Schema for replacing the mutable fields of an existing activity.
    The record is matched by (id, userId); id, userId and created are never changed.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f1c2a9e-5b7d-4e8a-9c61-0d2b7f4a8e10",
                "title": "Evening run",
                "start": "2024-01-01T18:00:00",
                "userId": "u1",
            }
        },
    )

    id: str = Field(..., description="Identifier of the activity to update", min_length=1)
    user_id: Optional[str] = Field(
        default=DEFAULT_USER_ID, alias="userId", description="Owner partition key used to match the record"
    )

    @field_validator("user_id", mode="before")
    @classmethod
    def default_user_id(cls, v: Any) -> Any:
        """
        Only an omitted userId means 'default'; null or blank is matched as sent.
        """
        return v


# PUBLIC_INTERFACE
class ActivityOut(BaseModel):
    """
    Schema documenting an activity as returned by the API.

    Responses carry the stored record as is, including keys not listed here.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(..., description="Unique identifier of the activity")
    title: str = Field(..., description="Activity title")
    start: str = Field(..., description="Start date or datetime")
    end: str = Field(..., description="End date or datetime")
    user_id: str = Field(..., alias="userId", description="Owner partition key")
    description: str = Field(default="", description="Free text description")
    type: str = Field(default=DEFAULT_TYPE, description="Activity category")
    created: Optional[str] = Field(default=None, description="Creation timestamp (ISO8601 UTC)")
    updated: Optional[str] = Field(default=None, description="Last update timestamp (ISO8601 UTC)")


# PUBLIC_INTERFACE
class MessageOut(BaseModel):
    """Confirmation message body."""

    message: str


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Error body returned for every failed request."""

    error: str
