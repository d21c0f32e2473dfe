"""
Data models for SplitMate ledger
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class SplitMode(str, Enum):
    """How an expense amount is divided among its participants"""
    EQUAL = "equal"
    UNEQUAL = "unequal"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class Split:
    """Explicit share: currency amount (unequal) or percentage points (percentage)"""
    member: str
    value: float


@dataclass(frozen=True)
class ExpenseRecord:
    """Single recorded expense"""
    id: str
    group_id: str
    payer: str
    amount: float
    split_mode: SplitMode
    participants: Tuple[str, ...] = ()
    splits: Tuple[Split, ...] = ()
    description: str = ""
    created_at: str = ""  # YYYY-MM-DD or ISO timestamp

    def __post_init__(self):
        # accept plain strings such as "equal"; anything else raises ValueError
        object.__setattr__(self, "split_mode", SplitMode(self.split_mode))


@dataclass(frozen=True)
class Balance:
    """Net position of a member: positive is owed money, negative owes money"""
    member: str
    net_amount: float


@dataclass(frozen=True)
class Settlement:
    """Directed payment instruction from a debtor to a creditor"""
    from_member: str
    to_member: str
    amount: float


@dataclass(frozen=True)
class ReconciliationWarning:
    """Computed shares did not add up to the expense amount"""
    expense_id: str
    expected: float
    actual: float
    adjusted_member: str

    @property
    def message(self) -> str:
        diff = self.expected - self.actual
        return (f"expense {self.expense_id}: shares total {self.actual:.2f} "
                f"but amount is {self.expected:.2f}; {diff:+.2f} assigned to {self.adjusted_member}")


@dataclass(frozen=True)
class UnknownMemberWarning:
    """Expense references someone outside the group member list"""
    expense_id: str
    member: str

    @property
    def message(self) -> str:
        return f"expense {self.expense_id}: '{self.member}' is not a group member"


@dataclass(frozen=True)
class SkippedExpense:
    """Expense excluded from the balance computation"""
    expense_id: str
    reason: str

    @property
    def message(self) -> str:
        return f"expense {self.expense_id} skipped: {self.reason}"


@dataclass
class BalanceReport:
    """Result of folding a batch of expenses"""
    balances: List[Balance]
    paid: Dict[str, float] = field(default_factory=dict)
    owed: Dict[str, float] = field(default_factory=dict)
    warnings: list = field(default_factory=list)
    skipped: List[SkippedExpense] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings and not self.skipped


@dataclass
class Group:
    """Snapshot of a group as stored on disk"""
    id: str
    name: str
    members: List[str]
    expenses: List[ExpenseRecord] = field(default_factory=list)
    paid_settlements: List[Settlement] = field(default_factory=list)
    currency: str = "USD"
    version: int = 1
