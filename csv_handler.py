"""
CSV export and import functionality for SplitMate ledger
"""
from __future__ import annotations
import csv
from typing import List

from exceptions import LedgerFormatError
from models import ExpenseRecord, Split, SplitMode

CSV_HEADER = ['id', 'group_id', 'created_at', 'payer', 'amount', 'split_mode',
              'participants', 'splits', 'description']


def export_expenses_to_csv(expenses: List[ExpenseRecord], filepath: str) -> None:
    """
    Export expenses list to CSV file
    participants are ';'-joined, splits are ';'-joined member:value pairs
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)

        for e in expenses:
            split_str = ';'.join([f"{s.member}:{s.value}" for s in e.splits])
            writer.writerow([
                e.id,
                e.group_id,
                e.created_at,
                e.payer,
                e.amount,
                e.split_mode.value,
                ';'.join(e.participants),
                split_str,
                e.description
            ])


def _parse_splits(text: str) -> List[Split]:
    splits = []
    for pair in text.split(';'):
        pair = pair.strip()
        if not pair:
            continue
        if ':' not in pair:
            raise ValueError(f"split '{pair}' is not member:value")
        # member ids may themselves contain ':'; the value never does
        k, v = pair.rsplit(':', 1)
        splits.append(Split(k.strip(), float(v.strip())))
    return splits


def _required(row: dict, column: str) -> str:
    value = (row.get(column) or '').strip()
    if not value:
        raise ValueError(f"missing {column}")
    return value


def import_expenses_from_csv(filepath: str, group_id: str = "") -> List[ExpenseRecord]:
    """
    Import expenses list from CSV file
    Rows without a group_id get `group_id`. Raises LedgerFormatError on a bad row.
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)

        for line_no, row in enumerate(reader, start=2):
            try:
                participants = [p.strip() for p in (row.get('participants') or '').split(';') if p.strip()]
                expense = ExpenseRecord(
                    id=_required(row, 'id'),
                    group_id=row.get('group_id') or group_id,
                    payer=_required(row, 'payer'),
                    amount=float(row['amount']),
                    split_mode=SplitMode((row.get('split_mode') or SplitMode.EQUAL.value).strip().lower()),
                    participants=tuple(participants),
                    splits=tuple(_parse_splits(row.get('splits') or '')),
                    description=row.get('description') or '',
                    created_at=row.get('created_at') or '',
                )
            except (KeyError, TypeError, ValueError) as ex:
                raise LedgerFormatError(f"{filepath}:{line_no}: {ex}") from ex
            expenses.append(expense)

    return expenses
