from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from agency_admin.models.enums import ProjectType


class ProjectCreateRequest(BaseModel):
    client_id: int
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    type: ProjectType
    other_type: Optional[str] = Field(default=None, max_length=80)

    @model_validator(mode="after")
    def _other_type(self) -> "ProjectCreateRequest":
        # other_type only means something for type=other
        if self.type != ProjectType.OTHER:
            self.other_type = None
        return self


class ProjectPatchRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[str] = Field(default=None, min_length=1, max_length=30)
    type: Optional[ProjectType] = None
    other_type: Optional[str] = Field(default=None, max_length=80)


class MyPermissions(BaseModel):
    can_edit: bool
    can_manage_payments: bool


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    code: str
    tracking_id: str
    name: str
    description: Optional[str] = None
    type: str
    other_type: Optional[str] = None
    status: str
    updated_by: Optional[int] = None
    updated_by_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    my_perms: Optional[MyPermissions] = None
