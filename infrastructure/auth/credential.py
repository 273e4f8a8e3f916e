# ============================================================================
# SHARED AZURE CREDENTIAL SINGLETON
# ============================================================================
# STATUS: Infrastructure - Canonical credential provider
# PURPOSE: Cached async DefaultAzureCredential for managed identity table access
# DEPENDENCIES: azure.identity.aio (no infrastructure dependencies)
# ============================================================================
"""
Shared Azure credential singleton.

Depends only on azure.identity so it is safe to import at boot time.
The async credential is required by the azure.data.tables.aio clients.
"""

from typing import Optional

from azure.identity.aio import DefaultAzureCredential

_credential: Optional[DefaultAzureCredential] = None


def get_azure_credential() -> DefaultAzureCredential:
    """Get cached DefaultAzureCredential singleton."""
    global _credential
    if _credential is None:
        _credential = DefaultAzureCredential()
    return _credential


async def close_azure_credential() -> None:
    """Close and forget the cached credential."""
    global _credential
    if _credential is not None:
        await _credential.close()
        _credential = None


__all__ = ["get_azure_credential", "close_azure_credential"]
