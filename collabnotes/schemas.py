from typing import Literal, Optional, TypeVar

from flask import request
from pydantic import BaseModel, ConfigDict, Field, field_validator
from werkzeug.exceptions import BadRequest

T = TypeVar("T", bound=BaseModel)

Role = Literal["read", "write"]

# Hostnames are matched verbatim, so keep them to a plain DNS shape
HOSTNAME_PATTERN = r"^([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)*[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$"


class Patch(BaseModel):
    # Unknown keys are rejected rather than silently written
    model_config = ConfigDict(extra="forbid")


class NoteSettingsPatch(Patch):
    custom_hostname: Optional[str] = Field(
        default=None, max_length=253, pattern=HOSTNAME_PATTERN
    )
    is_public: Optional[bool] = None

    @field_validator("is_public")
    @classmethod
    def _is_public_not_null(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("is_public cannot be null")
        return v


class TeamMemberPatch(Patch):
    user_id: int
    role: Optional[Role] = None


class TeamMemberCreate(Patch):
    user_id: int
    role: Role = "read"


class ParentRequest(Patch):
    parent_id: str = Field(..., min_length=1)


class NoteCreateRequest(Patch):
    parent_id: Optional[str] = Field(default=None, min_length=1)
    is_public: Optional[bool] = None


def validate(model: type[T]) -> T:
    """Validate request JSON against a Pydantic model."""
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body required")
    return model.model_validate(data)
