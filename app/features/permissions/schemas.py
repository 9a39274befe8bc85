"""
Pydantic schemas for access introspection responses.
"""
from typing import List
from pydantic import BaseModel, Field


class AccessSummary(BaseModel):
    """What the caller may do, for navigation gating in the UI."""
    principal_id: str
    profile_id: str
    department_id: str | None = None
    roles: List[str] = Field(default_factory=list, description="Role names bound to the caller")
    hierarchy_level: int = Field(0, description="Highest hierarchy level among the caller's roles")
    permissions: List[str] = Field(default_factory=list, description="Granted permissions as 'resource:action'")
    modules: List[str] = Field(default_factory=list, description="Modules the caller may open")


class ModuleAccessResponse(BaseModel):
    module: str
    allowed: bool


class RolesWithPermissionResponse(BaseModel):
    permission: str
    roles: List[str]
