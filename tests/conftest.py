import itertools

import pytest

from config import save_group
from models import ExpenseRecord, Group, Split, SplitMode


@pytest.fixture
def make_expense():
    """Return a factory building ExpenseRecords with sequential ids."""
    counter = itertools.count(1)

    def _make(payer, amount, participants=(), splits=None, mode=SplitMode.EQUAL, **kwargs):
        return ExpenseRecord(
            id=kwargs.pop("id", f"e{next(counter)}"),
            group_id=kwargs.pop("group_id", "g1"),
            payer=payer,
            amount=amount,
            split_mode=mode,
            participants=tuple(participants),
            splits=tuple(Split(m, v) for m, v in (splits or {}).items()),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_group(make_expense):
    """Four members ending at A +50, B +30, C -40, D -40."""
    return Group(
        id="g1",
        name="Trip",
        members=["A", "B", "C", "D"],
        currency="EUR",
        expenses=[
            make_expense("A", 80.0, ["A", "B", "C", "D"], description="Dinner", created_at="2024-03-01"),
            make_expense("B", 60.0, splits={"A": 10, "B": 10, "C": 20, "D": 20},
                         mode=SplitMode.UNEQUAL, description="Taxi", created_at="2024-03-05T18:30:00Z"),
        ],
    )


@pytest.fixture
def group_file(tmp_path, sample_group):
    """Write the sample group snapshot to disk and return its path."""
    path = tmp_path / "group.json"
    save_group(sample_group, str(path))
    return path
