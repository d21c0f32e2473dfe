"""
Balance and settlement computations for SplitMate ledger
"""
from __future__ import annotations
import logging
import math
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from config import CURRENCY_PRECISION, TOLERANCE
from exceptions import InvalidExpenseError, LedgerFormatError
from models import (
    Balance,
    BalanceReport,
    ExpenseRecord,
    Group,
    ReconciliationWarning,
    Settlement,
    SkippedExpense,
    SplitMode,
    UnknownMemberWarning,
)
from utils import is_settled, parse_date, round_currency, round_preserving_total

logger = logging.getLogger(__name__)


def compute_expense_shares(
    e: ExpenseRecord,
    tolerance: float = TOLERANCE
) -> Tuple[List[Tuple[str, float]], Optional[ReconciliationWarning]]:
    """
    Split one expense into ordered (member, share) pairs.

    Whatever the shares fail to cover (or overshoot) is folded into the first
    entry, so the shares always add up to the amount. A ReconciliationWarning
    is returned alongside when that correction exceeds the tolerance.
    Raises InvalidExpenseError when there is nobody to split between.
    """
    amount = float(e.amount)
    if e.split_mode == SplitMode.EQUAL:
        if not e.participants:
            raise InvalidExpenseError(e.id, "equal split with no participants")
        per_person = amount / len(e.participants)
        shares = [(p, per_person) for p in e.participants]
    elif e.split_mode == SplitMode.UNEQUAL:
        if not e.splits:
            raise InvalidExpenseError(e.id, "unequal split with no split amounts")
        shares = [(s.member, float(s.value)) for s in e.splits]
    else:
        if not e.splits:
            raise InvalidExpenseError(e.id, "percentage split with no percentages")
        shares = [(s.member, amount * (float(s.value) / 100.0)) for s in e.splits]

    total = math.fsum(v for _, v in shares)
    residual = amount - total
    warning = None
    if abs(residual) > tolerance:
        warning = ReconciliationWarning(e.id, amount, total, shares[0][0])
    if residual:
        first, value = shares[0]
        shares[0] = (first, value + residual)
    return shares, warning


def _fold_expenses(
    expenses: Iterable[ExpenseRecord],
    members: Optional[Sequence[str]],
    tolerance: float
):
    """Accumulate paid/owed/net per member; members=None accepts anyone"""
    known = set(members) if members is not None else None
    paid: Dict[str, float] = {p: 0.0 for p in members or []}
    owed: Dict[str, float] = dict(paid)
    net: Dict[str, float] = dict(paid)
    warnings: list = []
    skipped: List[SkippedExpense] = []

    for e in expenses:
        try:
            shares, warning = compute_expense_shares(e, tolerance)
        except InvalidExpenseError as ex:
            logger.warning("Skipping %s", ex)
            skipped.append(SkippedExpense(e.id, ex.reason))
            continue
        if warning is not None:
            logger.warning("Reconciled %s", warning.message)
            warnings.append(warning)

        involved = [e.payer] + [m for m, _ in shares]
        for m in involved:
            paid.setdefault(m, 0.0)
            owed.setdefault(m, 0.0)
            net.setdefault(m, 0.0)
        if known is not None:
            for m in dict.fromkeys(involved):
                if m not in known:
                    logger.debug("Expense %s references unknown member %s", e.id, m)
                    warnings.append(UnknownMemberWarning(e.id, m))

        # payer fronted the full amount; their own share is debited below like anyone else's
        paid[e.payer] += float(e.amount)
        net[e.payer] += float(e.amount)
        for m, share in shares:
            owed[m] += share
            net[m] -= share

    return paid, owed, net, warnings, skipped


def analyze_expenses(
    expenses: Iterable[ExpenseRecord],
    members: Sequence[str],
    precision: int = CURRENCY_PRECISION,
    tolerance: float = TOLERANCE
) -> BalanceReport:
    """
    Fold expenses into one balance per group member, in member order.

    Expenses that cannot be split are skipped and listed in the report;
    non-reconciling splits and references to non-members are reported as
    warnings. Members outside `members` are accumulated but not returned.
    """
    members = list(dict.fromkeys(members))
    paid, owed, net, warnings, skipped = _fold_expenses(expenses, members, tolerance)
    rounded = round_preserving_total({p: net[p] for p in members}, precision)
    return BalanceReport(
        balances=[Balance(p, rounded[p]) for p in members],
        paid={p: round_currency(paid[p], precision) for p in members},
        owed={p: round_currency(owed[p], precision) for p in members},
        warnings=warnings,
        skipped=skipped,
    )


def compute_group_balances(
    expenses: Iterable[ExpenseRecord],
    members: Sequence[str],
    precision: int = CURRENCY_PRECISION,
    tolerance: float = TOLERANCE
) -> List[Balance]:
    """Net balance per member: positive is owed money, negative owes money"""
    return analyze_expenses(expenses, members, precision, tolerance).balances


def compute_raw_balances(
    expenses: Iterable[ExpenseRecord],
    precision: int = CURRENCY_PRECISION,
    tolerance: float = TOLERANCE
) -> Dict[str, float]:
    """Net balance of everyone appearing in the expenses, in first-seen order"""
    _, _, net, _, _ = _fold_expenses(expenses, None, tolerance)
    return round_preserving_total(net, precision)


def compute_summary(
    expenses: Iterable[ExpenseRecord],
    members: Sequence[str],
    precision: int = CURRENCY_PRECISION,
    tolerance: float = TOLERANCE
) -> Dict[str, dict]:
    """
    Compute summary statistics for each member.
    Returns dict mapping member -> {paid, owed, net}
    """
    report = analyze_expenses(expenses, members, precision, tolerance)
    return {
        b.member: {
            "paid": report.paid[b.member],
            "owed": report.owed[b.member],
            "net": b.net_amount,
        } for b in report.balances
    }


def filter_expenses_by_date(
    expenses: Iterable[ExpenseRecord],
    start: Optional[date],
    end: Optional[date]
) -> List[ExpenseRecord]:
    """Filter expenses by date range; undated expenses are always kept"""
    out = []
    for e in expenses:
        if not e.created_at:
            out.append(e)
            continue
        try:
            ed = parse_date(e.created_at)
        except ValueError as ex:
            raise LedgerFormatError(f"expense {e.id}: bad date {e.created_at!r}") from ex
        if start and ed < start:
            continue
        if end and ed > end:
            continue
        out.append(e)
    return out


def compute_settlements(
    balances: Iterable[Balance],
    precision: int = CURRENCY_PRECISION,
    tolerance: float = TOLERANCE
) -> List[Settlement]:
    """
    Compute transfers to settle debts.
    Greedy settlement: the largest remaining debtor pays the largest remaining
    creditor until one of them is cleared. Produces at most k-1 transfers for
    k unsettled members. Ties keep input order.
    """
    balances = list(balances)
    creditors = [(b.member, b.net_amount) for b in balances if b.net_amount > tolerance]
    debtors = [(b.member, -b.net_amount) for b in balances if b.net_amount < -tolerance]
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)
    logger.debug("Settling %d creditors against %d debtors", len(creditors), len(debtors))

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        dname, damt = debtors[i]
        cname, camt = creditors[j]
        x = min(damt, camt)
        transfers.append(Settlement(dname, cname, round_currency(x, precision)))
        damt -= x
        camt -= x
        if is_settled(damt, tolerance):
            i += 1
        else:
            debtors[i] = (dname, damt)
        if is_settled(camt, tolerance):
            j += 1
        else:
            creditors[j] = (cname, camt)

    if i < len(debtors) or j < len(creditors):
        logger.warning("Balances do not sum to zero; %d unsettled after %d transfers",
                       len(debtors) - i + len(creditors) - j, len(transfers))
    return transfers


def apply_settlements(
    balances: Iterable[Balance],
    settlements: Iterable[Settlement],
    precision: int = CURRENCY_PRECISION
) -> List[Balance]:
    """Balances left after the given payments are made"""
    net = {b.member: b.net_amount for b in balances}
    for s in settlements:
        net[s.from_member] = net.get(s.from_member, 0.0) + s.amount
        net[s.to_member] = net.get(s.to_member, 0.0) - s.amount
    return [Balance(p, v) for p, v in round_preserving_total(net, precision).items()]


def plan_group(
    group: Group,
    start: Optional[date] = None,
    end: Optional[date] = None,
    precision: int = CURRENCY_PRECISION,
    tolerance: float = TOLERANCE
) -> Tuple[BalanceReport, List[Balance], List[Settlement]]:
    """
    Balances for a stored group, what is still outstanding after the payments
    already marked as paid, and the transfers that would clear the rest.
    """
    exps = filter_expenses_by_date(group.expenses, start, end)
    report = analyze_expenses(exps, group.members, precision, tolerance)
    outstanding = apply_settlements(report.balances, group.paid_settlements, precision)
    return report, outstanding, compute_settlements(outstanding, precision, tolerance)
