"""
Unit tests for SyncCoordinator

The remote store is a MagicMock SupabaseConnector; remote writes run on the
coordinator's worker thread, so every test flushes before asserting.

Author: TM3
Date: 2026-10-19
"""
import threading
from decimal import Decimal
from unittest.mock import patch

import pytest

from fastpos.core.exceptions import RemoteStoreError
from fastpos.domain.order import CartItem, OrderStatus
from fastpos.repositories import ExpenseRepository, SaleRepository
from fastpos.services import events as ev
from fastpos.services.pos import PointOfSale
from fastpos.services.sync_service import EntryState, Operation, Resolution, SyncStatus

ITEMS = [CartItem(id='p1', name='Wooper', price=Decimal('5.00'), category='Hamburguesas', quantity=2)]


def collect(pos, name):
    received = []
    pos.events.subscribe(received.append, name)
    return received


class TestOfflineMode:
    """Test behaviour without remote credentials"""

    def test_status_is_offline(self, pos):
        assert pos.sync.status == SyncStatus.OFFLINE
        assert pos.sync.get_status()['online'] is False

    def test_mutations_only_touch_local_store(self, pos, session_factory):
        sale = pos.orders.create_sale(ITEMS, None, 'cash')

        assert pos.sync.entries() == []
        assert SaleRepository(session_factory).find_by_id(sale.id) is not None

    def test_flush_is_a_noop(self, pos):
        assert pos.sync.flush(timeout=1) == []


class TestRemoteWrites:
    """Test mirroring of successful writes"""

    def test_insert_is_confirmed(self, online_pos, mock_remote):
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')

        online_pos.sync.flush(timeout=5)

        entry = online_pos.sync.entries()[-1]
        assert entry.operation == Operation.INSERT
        assert entry.state == EntryState.CONFIRMED
        assert entry.record_id == sale.id
        mock_remote.insert.assert_called_once_with('sales', SaleRepository(None).to_row(sale))

    def test_status_update_sends_only_status(self, online_pos, mock_remote):
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')

        online_pos.orders.update_status(sale.id, 'ready')
        online_pos.sync.flush(timeout=5)

        mock_remote.update.assert_called_once_with('sales', sale.id, {'status': 'ready'})
        assert [entry.state for entry in online_pos.sync.entries()] == [EntryState.CONFIRMED] * 2

    def test_writes_reach_remote_in_order(self, online_pos, mock_remote):
        """Test an insert always lands before the update of the same record"""
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        online_pos.orders.update_status(sale.id, 'ready')
        online_pos.orders.update_status(sale.id, 'completed')

        online_pos.sync.flush(timeout=5)

        names = [call[0] for call in mock_remote.method_calls if call[0] in ('insert', 'update')]
        assert names == ['insert', 'update', 'update']

    def test_status_syncing_while_writes_are_pending(self, online_pos, mock_remote):
        """Test connected / syncing / connected"""
        # Arrange: block the remote insert until released
        gate = threading.Event()
        mock_remote.insert.side_effect = lambda table, row: gate.wait(5)
        assert online_pos.sync.status == SyncStatus.CONNECTED

        # Act
        online_pos.orders.create_sale(ITEMS, None, 'cash')
        syncing = online_pos.sync.status
        gate.set()
        online_pos.sync.flush(timeout=5)

        # Assert
        assert syncing == SyncStatus.SYNCING
        assert online_pos.sync.status == SyncStatus.CONNECTED
        assert online_pos.sync.get_status()['entries']['confirmed'] == 1


class TestInsertFailure:
    """Test the configured insert-failure policy"""

    def test_rollback_policy_discards_record(self, online_pos, mock_remote, session_factory):
        # Arrange
        mock_remote.insert.side_effect = RemoteStoreError("insert rejected")
        rolled_back = collect(online_pos, ev.SYNC_ROLLED_BACK)

        # Act
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        online_pos.sync.flush(timeout=5)

        # Assert
        assert online_pos.orders.get_sale(sale.id) is None
        assert SaleRepository(session_factory).find_by_id(sale.id) is None
        entry = online_pos.sync.entries()[-1]
        assert entry.state == EntryState.RESOLVED
        assert entry.resolution == Resolution.ROLLED_BACK
        assert "insert rejected" in entry.error
        assert rolled_back[0].payload == {'collection': 'sales', 'record_id': sale.id}

    def test_keep_policy_keeps_record(self, session_factory, test_settings, rate_source, clock, mock_remote):
        # Arrange
        test_settings.SYNC_INSERT_FAILURE_POLICY = "keep"
        mock_remote.insert.side_effect = RemoteStoreError("insert rejected")
        pos = PointOfSale(session_factory, settings=test_settings, remote=mock_remote,
                          rate_source=rate_source, clock=clock)
        pos.sync.load_initial_state()

        # Act
        expense = pos.expenses.add(Decimal('4.00'), 'Hielo')
        pos.shutdown()

        # Assert
        assert pos.expenses.list_expenses() == (expense,)
        assert ExpenseRepository(session_factory).find_by_id(expense.id) is not None
        assert pos.sync.entries()[-1].resolution == Resolution.KEPT

    def test_rolled_back_order_number_is_not_reused(self, online_pos, mock_remote):
        """Test a rollback mid-day leaves a gap instead of a duplicate number"""
        # Arrange: the remote store rejects order #2 only
        def insert(collection, row):
            if row['order_number'] == 2:
                raise RemoteStoreError("insert rejected")
        mock_remote.insert.side_effect = insert
        for _ in range(3):
            online_pos.orders.create_sale(ITEMS, None, 'cash')
        online_pos.sync.flush(timeout=5)

        # Act
        fourth = online_pos.orders.create_sale(ITEMS, None, 'cash')
        online_pos.sync.flush(timeout=5)

        # Assert
        numbers = sorted(sale.order_number for sale in online_pos.orders.list_sales())
        assert numbers == [1, 3, 4]
        assert fourth.order_number == 4

    def test_update_after_rollback_does_not_resurrect_sale(self, online_pos, mock_remote, session_factory):
        """Test a status update racing the rollback never rewrites the local row"""
        # Arrange
        mock_remote.insert.side_effect = RemoteStoreError("insert rejected")
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        record_update = online_pos.sync.record_update

        def rollback_first(ledger, record, changes=None):
            online_pos.sync.flush(timeout=5)
            return record_update(ledger, record, changes)

        # Act
        with patch.object(online_pos.sync, 'record_update', side_effect=rollback_first):
            online_pos.orders.update_status(sale.id, 'ready')
        online_pos.sync.flush(timeout=5)

        # Assert
        assert online_pos.orders.get_sale(sale.id) is None
        assert SaleRepository(session_factory).find_by_id(sale.id) is None
        mock_remote.update.assert_not_called()


class TestUpdateAndDeleteFailure:
    """Test refetch on failed update/delete"""

    def test_failed_update_restores_remote_copy(self, online_pos, mock_remote):
        """Test the remote copy overwrites the optimistic status"""
        # Arrange
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        mock_remote.update.side_effect = RemoteStoreError("update rejected")
        mock_remote.select_by_id.return_value = SaleRepository(None).to_row(sale)
        refetched = collect(online_pos, ev.SYNC_REFETCHED)

        # Act
        online_pos.orders.update_status(sale.id, 'ready')
        online_pos.sync.flush(timeout=5)

        # Assert
        assert online_pos.orders.get_sale(sale.id).status == OrderStatus.PENDING
        assert online_pos.sync.entries()[-1].resolution == Resolution.REFETCHED
        mock_remote.select_by_id.assert_called_once_with('sales', sale.id)
        assert len(refetched) == 1

    def test_failed_delete_restores_record(self, online_pos, mock_remote):
        expense = online_pos.expenses.add(Decimal('8.00'), 'Gas')
        mock_remote.delete.side_effect = RemoteStoreError("delete rejected")
        mock_remote.select_by_id.return_value = ExpenseRepository(None).to_row(expense)

        online_pos.expenses.delete(expense.id)
        online_pos.sync.flush(timeout=5)

        assert [e.id for e in online_pos.expenses.list_expenses()] == [expense.id]

    def test_record_missing_on_remote_is_kept(self, online_pos, mock_remote):
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        mock_remote.update.side_effect = RemoteStoreError("update rejected")

        online_pos.orders.update_status(sale.id, 'ready')
        online_pos.sync.flush(timeout=5)

        assert online_pos.orders.get_sale(sale.id).status == OrderStatus.READY
        assert online_pos.sync.entries()[-1].resolution == Resolution.NOT_ON_REMOTE

    def test_refetch_failure_marks_divergence(self, online_pos, mock_remote):
        """Test local state is accepted and a divergence event published"""
        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        mock_remote.update.side_effect = RemoteStoreError("update rejected")
        mock_remote.select_by_id.side_effect = RemoteStoreError("remote down")
        diverged = collect(online_pos, ev.SYNC_DIVERGED)

        online_pos.orders.update_status(sale.id, 'ready')
        online_pos.sync.flush(timeout=5)

        assert online_pos.orders.get_sale(sale.id).status == OrderStatus.READY
        assert online_pos.sync.entries()[-1].resolution == Resolution.DIVERGED
        assert diverged[0].payload['record_id'] == sale.id

    def test_failure_is_never_raised_to_caller(self, online_pos, mock_remote):
        mock_remote.insert.side_effect = RemoteStoreError("boom")
        failures = collect(online_pos, ev.SYNC_FAILED)

        sale = online_pos.orders.create_sale(ITEMS, None, 'cash')
        online_pos.sync.flush(timeout=5)

        assert sale.order_number == 1
        assert failures[0].payload['operation'] == 'insert'


class TestInitialLoad:
    """Test load_initial_state"""

    def test_remote_rows_merge_with_local_only_records(
        self, pos, session_factory, test_settings, rate_source, clock, mock_remote
    ):
        # Arrange: an expense that only exists locally, a sale only remotely
        local_expense = pos.expenses.add(Decimal('2.00'), 'Hielo')
        remote_sale = pos.orders.create_sale(ITEMS, None, 'mobile')
        remote_row = SaleRepository(None).to_row(remote_sale)
        SaleRepository(session_factory).delete(remote_sale.id)
        mock_remote.select_all.side_effect = lambda table, **kwargs: [remote_row] if table == 'sales' else []

        # Act
        online = PointOfSale(session_factory, settings=test_settings, remote=mock_remote,
                             rate_source=rate_source, clock=clock)
        online.sync.load_initial_state()

        # Assert
        assert online.orders.get_sale(remote_sale.id) == remote_sale
        assert online.expenses.list_expenses() == (local_expense,)
        mock_remote.select_all.assert_any_call('sales', order_by='date', descending=True, limit=200)
        mock_remote.select_all.assert_any_call('products', order_by='name', descending=False, limit=None)
        online.shutdown()

    def test_remote_failure_falls_back_to_local_store(
        self, pos, session_factory, test_settings, rate_source, clock, mock_remote
    ):
        expense = pos.expenses.add(Decimal('2.00'), 'Hielo')
        mock_remote.select_all.side_effect = RemoteStoreError("remote down")

        online = PointOfSale(session_factory, settings=test_settings, remote=mock_remote,
                             rate_source=rate_source, clock=clock)
        online.sync.load_initial_state()

        assert online.expenses.list_expenses() == (expense,)
        online.shutdown()


@pytest.mark.parametrize("state", list(EntryState))
def test_entries_filter_by_state(online_pos, state):
    online_pos.orders.create_sale(ITEMS, None, 'cash')
    online_pos.sync.flush(timeout=5)

    entries = online_pos.sync.entries(state)

    assert all(entry.state == state for entry in entries)
    assert len(entries) == (1 if state == EntryState.CONFIRMED else 0)
