import pytest

from config import load_group
from split_ledger_cli import main


@pytest.fixture
def settings_arg(tmp_path):
    return ["--settings", str(tmp_path / "settings.json")]


def test_prints_balances_and_settlements(group_file, settings_arg, capsys):
    assert main([str(group_file)] + settings_arg) == 0

    out = capsys.readouterr().out
    assert "Trip (EUR)" in out
    assert "C pays A 40.00" in out
    assert "D pays A 10.00" in out
    assert "D pays B 30.00" in out
    assert "Issues:" not in out


def test_exports(tmp_path, group_file, settings_arg):
    xlsx = tmp_path / "out.xlsx"
    exported = tmp_path / "out.csv"

    code = main([str(group_file), "--export-excel", str(xlsx), "--export-csv", str(exported)] + settings_arg)

    assert code == 0
    assert xlsx.exists()
    assert exported.read_text(encoding="utf-8").startswith("id,group_id,")


def test_import_csv_appends_and_saves(tmp_path, group_file, settings_arg, capsys):
    extra = tmp_path / "extra.csv"
    extra.write_text("id,payer,amount,split_mode,participants\nx1,C,40,equal,C;D\n", encoding="utf-8")

    assert main([str(group_file), "--import-csv", str(extra)] + settings_arg) == 0

    group = load_group(str(group_file))
    assert [e.id for e in group.expenses] == ["e1", "e2", "x1"]
    assert group.expenses[2].group_id == "g1"
    assert "D pays A 50.00" in capsys.readouterr().out


def test_import_csv_replace(tmp_path, group_file, settings_arg):
    extra = tmp_path / "extra.csv"
    extra.write_text("id,payer,amount,split_mode,participants\nx1,C,40,equal,C;D\n", encoding="utf-8")

    assert main([str(group_file), "--import-csv", str(extra), "--replace"] + settings_arg) == 0

    assert [e.id for e in load_group(str(group_file)).expenses] == ["x1"]


def test_issues_are_listed(tmp_path, settings_arg, capsys):
    path = tmp_path / "g.json"
    path.write_text(
        '{"id": "g", "name": "G", "members": ["A", "B"],'
        ' "expenses": [{"id": "x", "payer": "A", "amount": 10, "participants": []}]}',
        encoding="utf-8",
    )

    assert main([str(path)] + settings_arg) == 0

    out = capsys.readouterr().out
    assert "all settled" in out
    assert "expense x skipped" in out


def test_missing_group_file_fails(tmp_path, settings_arg):
    assert main([str(tmp_path / "nope.json")] + settings_arg) == 1


def test_bad_date_is_usage_error(group_file):
    with pytest.raises(SystemExit) as exc_info:
        main([str(group_file), "--start", "03/01/2024"])

    assert exc_info.value.code == 2
