"""
Caller Identity and Directory Profile Models.

Exports:
    Principal: Authenticated caller handed to every operation
    UserProfile: Directory profile (Graph user resource subset)
"""

from typing import List, Optional

from pydantic import Field

from .base import DomainModel


class Principal(DomainModel):
    """
    Authenticated caller.

    Produced by the HTTP layer from platform authentication headers and
    trusted as-is; tokens are never re-validated.
    """

    user_id: str
    display_name: str = ""
    roles: List[str] = Field(default_factory=list)
    access_token: Optional[str] = Field(default=None, exclude=True, repr=False)

    def has_role(self, role: str) -> bool:
        return role.lower() in (r.lower() for r in self.roles)


class UserProfile(DomainModel):
    """Directory profile. Aliases match the Graph user resource field names."""

    id: str = ""
    display_name: Optional[str] = None
    mail: Optional[str] = None
    user_principal_name: Optional[str] = None
    department: Optional[str] = None
    job_title: Optional[str] = None
    office_location: Optional[str] = None

    @property
    def email(self) -> str:
        """Mail address, falling back to the UPN."""
        return self.mail or self.user_principal_name or ""
