"""
Request-scoped identity context.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuthContext:
    """
    Identity of the caller for one request. Never persisted.

    Attributes:
        principal_id: External identity id (role bindings are keyed on it)
        profile_id: Internal profile id (ownership columns store it)
        department_id: Caller's department, if any
    """
    principal_id: str
    profile_id: str
    department_id: Optional[str] = None
