import json
import os

import pytest

from config import (
    CURRENCY_PRECISION,
    TOLERANCE,
    Settings,
    default_settings_path,
    dict_to_group,
    load_group,
    load_settings,
    save_group,
)
from exceptions import LedgerFormatError
from models import Settlement, SplitMode


class TestSettings:

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "missing.json"))

        assert settings == Settings()
        assert (settings.precision, settings.tolerance) == (CURRENCY_PRECISION, TOLERANCE)

    def test_values_are_read(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"precision": 2, "tolerance": 0.01}), encoding="utf-8")

        assert load_settings(str(path)) == Settings(precision=2, tolerance=0.01)

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"precision": 2}), encoding="utf-8")

        assert load_settings(str(path)) == Settings(precision=2, tolerance=TOLERANCE)

    @pytest.mark.parametrize("content", ["{not json", "[2]", '{"precision": "two"}', '{"tolerance": -1}'])
    def test_bad_file_raises(self, tmp_path, content):
        path = tmp_path / "settings.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(LedgerFormatError):
            load_settings(str(path))

    def test_default_path_honours_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SPLITMATE_HOME", str(tmp_path / "home"))

        assert default_settings_path() == os.path.join(str(tmp_path / "home"), "settings.json")
        assert (tmp_path / "home").is_dir()


class TestGroupSnapshot:

    def test_save_and_load(self, tmp_path, sample_group):
        sample_group.paid_settlements.append(Settlement("C", "A", 40.0))
        path = tmp_path / "group.json"

        save_group(sample_group, str(path))

        assert load_group(str(path)) == sample_group
        stored = json.loads(path.read_text(encoding="utf-8"))
        assert stored["paid_settlements"] == [{"from": "C", "to": "A", "amount": 40.0}]
        assert stored["expenses"][1]["split_mode"] == "unequal"

    def test_string_split_mode_is_saved(self, tmp_path, sample_group, make_expense):
        sample_group.expenses.append(make_expense("C", 12.0, ["A", "C"], mode="equal"))
        path = tmp_path / "group.json"

        save_group(sample_group, str(path))

        assert load_group(str(path)).expenses[-1].split_mode is SplitMode.EQUAL

    def test_defaults_fill_missing_keys(self):
        group = dict_to_group({
            "id": "g7",
            "members": ["A", "B"],
            "expenses": [{"id": "x", "payer": "A", "amount": "12.50", "participants": ["A", "B"]}],
        })

        assert group.currency == "USD"
        assert group.paid_settlements == []
        expense = group.expenses[0]
        assert expense.group_id == "g7"
        assert expense.amount == 12.5
        assert expense.split_mode is SplitMode.EQUAL

    @pytest.mark.parametrize("expense", [
        {"id": "x", "payer": "A", "amount": 5, "split_mode": "shares"},
        {"id": "x", "amount": 5},
        {"id": "x", "payer": "A", "amount": "five"},
        {"id": "x", "payer": "A", "amount": 5, "split_mode": "unequal", "splits": [{"member": "A"}]},
    ])
    def test_bad_expense_raises(self, expense):
        with pytest.raises(LedgerFormatError):
            dict_to_group({"id": "g", "members": ["A"], "expenses": [expense]})

    def test_not_an_object_raises(self):
        with pytest.raises(LedgerFormatError):
            dict_to_group(["A", "B"])

    def test_invalid_json_file_raises(self, tmp_path):
        path = tmp_path / "group.json"
        path.write_text("{", encoding="utf-8")

        with pytest.raises(LedgerFormatError):
            load_group(str(path))
