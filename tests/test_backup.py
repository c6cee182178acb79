"""Tests for JSON backup export and restore."""
import json
import os
import shutil
import tempfile
import unittest
from datetime import datetime

from cashbook.backup import parse_backup
from cashbook.database import DatabaseManager
from cashbook.data_structures import TransactionType
from cashbook.engine import LedgerEngine
from cashbook.exceptions import StorageError, ValidationError


class TestBackup(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmpdir, "backup.json")
        self.db = DatabaseManager(":memory:")
        self.engine = LedgerEngine(self.db)
        self.day = datetime(2024, 3, 15, 10, 0)

        self.engine.set_opening_balance(1000, 200, 50, 10, datetime(2024, 3, 1))
        self.engine.add_transaction(TransactionType.CASH_IN, 1000, "Sales", self.day)
        tx_id = self.engine.add_transaction(TransactionType.UPI_OUT, 75, "Phone bill", self.day)
        self.engine.add_transaction(TransactionType.SAVINGS_OUT, 20, "", self.day)
        self.engine.delete_transaction(tx_id)
        self.engine.set_user_deduction(self.day, 40)
        self.engine.get_daily_tracking(self.day)

    def tearDown(self):
        self.db.close()
        shutil.rmtree(self.tmpdir)

    def _write(self, document):
        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump(document, fh)

    def test_export_document(self):
        document = self.engine.export_backup(self.path)

        self.assertEqual(document['version'], 1)
        self.assertEqual(len(document['transactions']), 2)
        self.assertEqual(document['next_id'], 3)
        self.assertEqual(document['opening_balance']['cash_balance'], 1000)

        with open(self.path, encoding='utf-8') as fh:
            on_disk = json.load(fh)
        self.assertEqual(on_disk['transactions'], document['transactions'])
        self.assertEqual(set(on_disk['user_deductions'].values()), {40})

    def test_restore_after_clear(self):
        balances = self.engine.get_balances()
        transactions = self.engine.get_all_transactions()
        self.engine.export_backup(self.path)

        self.engine.clear_all()
        self.assertEqual(self.engine.get_all_transactions(), [])

        restored = self.engine.restore_backup(self.path)

        self.assertEqual(restored, 2)
        self.assertEqual(self.engine.get_all_transactions(), transactions)
        self.assertEqual(self.engine.get_balances(), balances)
        # The id counter survives, so deleted ids stay retired
        self.assertEqual(self.engine.add_transaction(TransactionType.CASH_IN, 5, "", self.day), 3)

    def test_restore_into_fresh_database(self):
        self.engine.export_backup(self.path)
        with DatabaseManager(":memory:") as other_db:
            other = LedgerEngine(other_db)
            other.restore_backup(self.path)
            self.assertEqual(other.get_balances(), self.engine.get_balances())
            self.assertEqual(other.get_cumulative_stats(), self.engine.get_cumulative_stats())

    def test_missing_section_leaves_state_untouched(self):
        document = self.engine.export_backup(self.path)
        del document['ten_percent_savings']
        self._write(document)

        with self.assertRaises(ValidationError):
            self.engine.restore_backup(self.path)
        self.assertEqual(len(self.engine.get_all_transactions()), 2)

    def test_zero_amount_entry_rejected(self):
        document = self.engine.export_backup(self.path)
        document['transactions'][0]['amount'] = 0
        self._write(document)

        with self.assertRaises(ValidationError):
            self.engine.restore_backup(self.path)
        self.assertEqual(sorted(t.amount for t in self.engine.get_all_transactions()), [20, 1000])

    def test_out_of_range_date_rejected(self):
        document = self.engine.export_backup(self.path)
        document['transactions'][0]['date'] = 10 ** 21
        self._write(document)

        with self.assertRaises(ValidationError):
            self.engine.restore_backup(self.path)
        self.assertEqual(len(self.engine.get_all_transactions()), 2)
        self.assertEqual(len(self.engine.get_range_breakdown(self.day, self.day)), 1)

    def test_duplicate_ids_rejected(self):
        document = self.engine.export_backup(self.path)
        document['transactions'][1]['id'] = document['transactions'][0]['id']
        self._write(document)

        with self.assertRaises(ValidationError):
            self.engine.restore_backup(self.path)
        self.assertEqual(len(self.engine.get_all_transactions()), 2)

    def test_invalid_json(self):
        with open(self.path, 'w', encoding='utf-8') as fh:
            fh.write("{ this is not json")
        with self.assertRaises(ValidationError):
            self.engine.restore_backup(self.path)

    def test_missing_file(self):
        with self.assertRaises(StorageError):
            self.engine.restore_backup(os.path.join(self.tmpdir, "nope.json"))

    def test_unwritable_path(self):
        with self.assertRaises(StorageError):
            self.engine.export_backup(os.path.join(self.tmpdir, "missing_dir", "backup.json"))


class TestParseBackup(unittest.TestCase):

    def test_rejects_non_object(self):
        with self.assertRaises(ValidationError):
            parse_backup([1, 2, 3])

    def test_rejects_unknown_version(self):
        with self.assertRaises(ValidationError):
            parse_backup({'version': 99})

    def test_rejects_bad_day_map(self):
        document = {
            'version': 1,
            'transactions': [],
            'opening_balance': {},
            'user_deductions': {'abc': 10},
            'ten_percent_savings': {},
        }
        with self.assertRaises(ValidationError):
            parse_backup(document)

    def test_minimal_document(self):
        state = parse_backup({
            'version': 1,
            'transactions': [],
            'opening_balance': {},
            'user_deductions': {},
            'ten_percent_savings': {'1710460800000000000': 110},
        })
        self.assertEqual(state['transactions'], [])
        self.assertEqual(state['next_id'], 0)
        self.assertEqual(state['ten_percent_savings'], {1710460800000000000: 110})


if __name__ == '__main__':
    unittest.main()
