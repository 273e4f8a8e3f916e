"""
Directory API Configuration.

Settings for the Microsoft Graph client used to look up the caller's
profile and direct reports.

Exports:
    DirectoryConfig: Graph endpoint and timeout
"""

import os
from pydantic import BaseModel, Field

from .defaults import DirectoryDefaults


class DirectoryConfig(BaseModel):
    """Directory (Microsoft Graph) client configuration."""

    base_url: str = Field(
        default=DirectoryDefaults.BASE_URL,
        description="Graph API base URL including version segment"
    )

    timeout_seconds: float = Field(
        default=DirectoryDefaults.TIMEOUT_SECONDS,
        gt=0,
        le=120,
        description="Per-request timeout for directory calls"
    )

    @classmethod
    def from_environment(cls) -> "DirectoryConfig":
        """Load from environment variables."""
        return cls(
            base_url=os.environ.get("GRAPH_BASE_URL", DirectoryDefaults.BASE_URL).rstrip('/'),
            timeout_seconds=float(os.environ.get(
                "GRAPH_TIMEOUT_SECONDS", str(DirectoryDefaults.TIMEOUT_SECONDS)
            )),
        )
