"""Backup and restore of the whole ledger as a single JSON document."""
import json
import logging
from datetime import datetime

from cashbook.config import BACKUP_FORMAT_VERSION
from cashbook.data_structures import OpeningBalance, Transaction
from cashbook.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ('transactions', 'opening_balance', 'user_deductions', 'ten_percent_savings')


class BackupManager:
    """Writes and reads ledger backups."""

    def __init__(self, transaction_manager):
        self.transaction_manager = transaction_manager

    def export_backup(self, path):
        """Write every collection to ``path`` and return the written document."""
        document = {
            'version': BACKUP_FORMAT_VERSION,
            'created_at': datetime.now().isoformat(timespec='seconds'),
        }
        document.update(self.transaction_manager.export_state())
        try:
            with open(path, 'w', encoding='utf-8') as fh:
                json.dump(document, fh, indent=2)
        except OSError as e:
            logger.error("Backup to %s failed: %s", path, e)
            raise StorageError(f"Could not write backup: {e}", {'path': str(path)}) from e
        logger.info("Backup written to %s (%d transactions)", path, len(document['transactions']))
        return document

    def restore_backup(self, path):
        """Replace the whole ledger with the contents of a backup file.

        The file is fully parsed and validated before anything is written,
        so a malformed backup leaves the current state untouched.

        Returns:
            Number of transactions restored.

        Raises:
            StorageError: If the file cannot be read.
            ValidationError: If the file is not a valid backup.
        """
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                document = json.load(fh)
        except OSError as e:
            raise StorageError(f"Could not read backup: {e}", {'path': str(path)}) from e
        except ValueError as e:
            raise ValidationError(f"Backup is not valid JSON: {e}", "path", str(path)) from e

        state = parse_backup(document)
        self.transaction_manager.replace_state(**state)
        logger.info("Backup restored from %s", path)
        return len(state['transactions'])


def _parse_day_map(raw, name):
    if not isinstance(raw, dict):
        raise ValidationError(f"Backup section '{name}' must be an object", name)
    try:
        return {int(k): int(v) for k, v in raw.items()}
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Backup section '{name}' has a non-integer entry", name) from e


def parse_backup(document):
    if not isinstance(document, dict):
        raise ValidationError("Invalid backup file format")
    version = document.get('version')
    if version != BACKUP_FORMAT_VERSION:
        raise ValidationError(f"Unsupported backup version {version!r}", "version", version)
    missing = [s for s in REQUIRED_SECTIONS if s not in document]
    if missing:
        raise ValidationError(f"Backup is missing sections: {', '.join(missing)}", "sections", missing)

    if not isinstance(document['transactions'], list):
        raise ValidationError("Backup section 'transactions' must be a list", "transactions")
    try:
        transactions = [Transaction.from_dict(d) for d in document['transactions']]
        opening = OpeningBalance.from_dict(document['opening_balance'])
        next_id = int(document.get('next_id') or 0)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"Backup contains a malformed record: {e}") from e

    return {
        'transactions': transactions,
        'next_id': next_id,
        'opening': opening,
        'user_deductions': _parse_day_map(document['user_deductions'], 'user_deductions'),
        'ten_percent_savings': _parse_day_map(document['ten_percent_savings'], 'ten_percent_savings'),
    }
