"""
Configuration and group snapshot loading/saving for SplitMate ledger
"""
from __future__ import annotations
import json
import os
from dataclasses import dataclass

from exceptions import LedgerFormatError
from models import ExpenseRecord, Group, Settlement, Split, SplitMode
from utils import app_dir

# Balances and settlement amounts are kept to a tenth of a cent;
# anything within half a cent of zero counts as settled.
CURRENCY_PRECISION = 3
TOLERANCE = 0.005


@dataclass(frozen=True)
class Settings:
    """Numeric settings shared by the balance and settlement computations"""
    precision: int = CURRENCY_PRECISION
    tolerance: float = TOLERANCE


def default_settings_path() -> str:
    return os.path.join(app_dir(), "settings.json")


def load_settings(path: str) -> Settings:
    """Load settings from JSON file, falling back to defaults"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return Settings()
    except json.JSONDecodeError as ex:
        raise LedgerFormatError(f"{path}: invalid settings JSON ({ex})") from ex
    if not isinstance(data, dict):
        raise LedgerFormatError(f"{path}: settings must be a JSON object")

    try:
        precision = int(data.get("precision", CURRENCY_PRECISION))
        tolerance = float(data.get("tolerance", TOLERANCE))
    except (TypeError, ValueError) as ex:
        raise LedgerFormatError(f"{path}: {ex}") from ex
    if precision < 0 or tolerance < 0:
        raise LedgerFormatError(f"{path}: precision and tolerance must be non-negative")
    return Settings(precision=precision, tolerance=tolerance)


def expense_to_dict(e: ExpenseRecord) -> dict:
    return {
        "id": e.id,
        "group_id": e.group_id,
        "payer": e.payer,
        "amount": e.amount,
        "split_mode": e.split_mode.value,
        "participants": list(e.participants),
        "splits": [{"member": s.member, "value": s.value} for s in e.splits],
        "description": e.description,
        "created_at": e.created_at,
    }


def dict_to_expense(d: dict, group_id: str = "") -> ExpenseRecord:
    """Convert a JSON expense entry to ExpenseRecord"""
    try:
        return ExpenseRecord(
            id=str(d["id"]),
            group_id=str(d.get("group_id") or group_id),
            payer=str(d["payer"]),
            amount=float(d["amount"]),
            split_mode=SplitMode(d.get("split_mode", SplitMode.EQUAL.value)),
            participants=tuple(str(p) for p in d.get("participants", [])),
            splits=tuple(Split(str(s["member"]), float(s["value"])) for s in d.get("splits", [])),
            description=d.get("description", ""),
            created_at=d.get("created_at", ""),
        )
    except (KeyError, TypeError, ValueError) as ex:
        raise LedgerFormatError(f"invalid expense entry {d!r}: {ex}") from ex


def group_to_dict(group: Group) -> dict:
    """Convert Group object to dictionary for JSON serialization"""
    return {
        "version": group.version,
        "id": group.id,
        "name": group.name,
        "currency": group.currency,
        "members": list(group.members),
        "expenses": [expense_to_dict(e) for e in group.expenses],
        "paid_settlements": [
            {"from": s.from_member, "to": s.to_member, "amount": s.amount}
            for s in group.paid_settlements
        ],
    }


def dict_to_group(d: dict) -> Group:
    """Convert dictionary from JSON to Group object"""
    if not isinstance(d, dict):
        raise LedgerFormatError("group snapshot must be a JSON object")
    group_id = str(d.get("id", "default"))
    exps = [dict_to_expense(e, group_id) for e in d.get("expenses", [])]
    try:
        paid = [Settlement(str(s["from"]), str(s["to"]), float(s["amount"]))
                for s in d.get("paid_settlements", [])]
    except (KeyError, TypeError, ValueError) as ex:
        raise LedgerFormatError(f"invalid paid settlement: {ex}") from ex

    return Group(
        version=d.get("version", 1),
        id=group_id,
        name=d.get("name", ""),
        currency=d.get("currency", "USD"),
        members=[str(m) for m in d.get("members", [])],
        expenses=exps,
        paid_settlements=paid,
    )


def load_group(path: str) -> Group:
    """Load group snapshot from JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        try:
            d = json.load(f)
        except json.JSONDecodeError as ex:
            raise LedgerFormatError(f"{path}: invalid JSON ({ex})") from ex
    return dict_to_group(d)


def save_group(group: Group, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(group_to_dict(group), f, ensure_ascii=False, indent=2)
