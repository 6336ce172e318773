"""
Supabase Connector
Table-style access to the remote store (products, sales, expenses)

Author: TM3
Date: 2026-10-19
"""
import logging
from typing import Any, Dict, List, Optional

from fastpos.core.exceptions import RemoteStoreError

logger = logging.getLogger(__name__)


class SupabaseConnector:
    """
    Connector for the remote Supabase tables

    Handles:
    - Select all (optionally ordered and limited)
    - Select one by id
    - Insert, update by id, delete by id

    Every failure is raised as RemoteStoreError; callers decide whether it
    matters.
    """

    def __init__(self, client):
        """
        Initialize Supabase connector

        Args:
            client: supabase.Client created with the project URL and anon key
        """
        self.client = client

    def select_all(
        self,
        table: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch rows from a table

        Args:
            table: Table name
            order_by: Column to order by
            descending: Newest first when ordering by date
            limit: Maximum rows

        Returns:
            List of row dicts
        """
        try:
            query = self.client.table(table).select("*")
            if order_by:
                query = query.order(order_by, desc=descending)
            if limit:
                query = query.limit(limit)
            response = query.execute()
            return list(response.data or [])
        except Exception as e:
            raise RemoteStoreError(f"select from {table} failed: {e}") from e

    def select_by_id(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one row by id, or None if the remote store doesn't have it"""
        try:
            response = self.client.table(table).select("*").eq("id", record_id).limit(1).execute()
        except Exception as e:
            raise RemoteStoreError(f"select {table}/{record_id} failed: {e}") from e

        rows = response.data or []
        return rows[0] if rows else None

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.table(table).insert(row).execute()
        except Exception as e:
            raise RemoteStoreError(f"insert into {table} failed: {e}") from e

        rows = response.data or []
        return rows[0] if rows else row

    def update(self, table: str, record_id: str, changes: Dict[str, Any]) -> None:
        try:
            self.client.table(table).update(changes).eq("id", record_id).execute()
        except Exception as e:
            raise RemoteStoreError(f"update {table}/{record_id} failed: {e}") from e

    def delete(self, table: str, record_id: str) -> None:
        try:
            self.client.table(table).delete().eq("id", record_id).execute()
        except Exception as e:
            raise RemoteStoreError(f"delete {table}/{record_id} failed: {e}") from e
