"""
RepositoryFactory credential selection and ServiceContainer wiring.
"""

import pytest

import infrastructure.factory as factory_module
from config import AuditPartitionScheme, StorageConfig
from exceptions import ConfigurationError
from infrastructure import AuditRepository, CheckInRepository, RepositoryFactory
from services import ServiceContainer, get_services, set_services


@pytest.fixture
def built(monkeypatch):
    """Record which AzureTableStore constructor the factory picks."""
    calls = []

    def from_connection_string(connection_string, table_name):
        calls.append(("connection_string", connection_string, table_name))
        return table_name

    def from_endpoint(endpoint, table_name, credential):
        calls.append(("endpoint", endpoint, table_name, credential))
        return table_name

    monkeypatch.setattr(factory_module.AzureTableStore, "from_connection_string", from_connection_string)
    monkeypatch.setattr(factory_module.AzureTableStore, "from_endpoint", from_endpoint)
    monkeypatch.setattr(factory_module, "get_azure_credential", lambda: "credential")
    return calls


class TestCreateTableStore:

    def test_connection_string(self, built):
        storage = StorageConfig(connection_string="UseDevelopmentStorage=true", account_name="acct")
        RepositoryFactory.create_table_store("checkinrecords", storage)
        assert built == [("connection_string", "UseDevelopmentStorage=true", "checkinrecords")]

    def test_managed_identity(self, built):
        RepositoryFactory.create_table_store("auditlogs", StorageConfig(account_name="acct"))
        assert built == [("endpoint", "https://acct.table.core.windows.net", "auditlogs", "credential")]

    def test_unconfigured(self, built):
        with pytest.raises(ConfigurationError):
            RepositoryFactory.create_table_store("auditlogs", StorageConfig())

    def test_all_tables(self, built):
        stores = RepositoryFactory.create_table_stores(StorageConfig(account_name="acct", audit_table="Audit"))
        assert stores == {
            "checkins": "checkinrecords",
            "preferences": "userpreferences",
            "campaigns": "headcountcampaigns",
            "audit": "Audit",
        }


class TestCreateRepositories:

    def test_repositories_and_partition_scheme(self, stores):
        repos = RepositoryFactory.create_repositories(
            stores, StorageConfig(audit_partition_scheme=AuditPartitionScheme.MONTH)
        )
        assert isinstance(repos["checkin_repo"], CheckInRepository)
        assert isinstance(repos["audit_repo"], AuditRepository)
        assert repos["audit_repo"].scheme == AuditPartitionScheme.MONTH


class TestServiceContainer:

    async def test_ensure_tables_and_close(self, services, stores):
        names = [store.table_name for store in stores.values()]
        assert await services.ensure_tables() == dict.fromkeys(names, True)
        assert await services.ensure_tables() == dict.fromkeys(names, False)
        await services.close()
        assert all(store.closed for store in stores.values())

    def test_set_services(self, services):
        set_services(services)
        assert get_services() is services

    def test_get_services_builds_from_config(self, built):
        container = get_services()
        assert isinstance(container, ServiceContainer)
        assert container.stores["checkins"] == "checkinrecords"
