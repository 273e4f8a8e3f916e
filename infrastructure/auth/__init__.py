"""
Authentication helpers for Azure resources.

Exports:
    get_azure_credential: Cached async DefaultAzureCredential
    close_azure_credential: Dispose the cached credential
"""

from .credential import get_azure_credential, close_azure_credential

__all__ = ["get_azure_credential", "close_azure_credential"]
