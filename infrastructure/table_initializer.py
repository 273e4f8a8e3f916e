"""
Table Initializer.

Creates any missing application table. Run at startup and from the
storage diagnostics endpoint; existing tables are left untouched.

Exports:
    TableInitializer: Ensures every configured table exists
"""

from typing import Dict, Iterable

from util_logger import LoggerFactory, ComponentType
from .table_store import TableStore

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "TableInitializer")


class TableInitializer:
    """Ensure-exists pass over a set of table stores."""

    def __init__(self, stores: Iterable[TableStore]):
        self.stores = list(stores)

    async def ensure_tables(self) -> Dict[str, bool]:
        """
        Create missing tables.

        Returns:
            {table_name: created} where created is False for tables that already existed

        Raises:
            UpstreamError: The table service could not be reached
        """
        results = {}
        for store in self.stores:
            results[store.table_name] = await store.ensure_table()
        created = [name for name, was_created in results.items() if was_created]
        if created:
            logger.info(f"Created tables: {', '.join(created)}")
        else:
            logger.debug(f"All {len(results)} tables present")
        return results
