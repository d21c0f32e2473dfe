"""
Excel export functionality for SplitMate ledger
"""
from __future__ import annotations
from datetime import date
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from config import Settings
from computations import filter_expenses_by_date, plan_group
from models import Group, SkippedExpense, SplitMode


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_columns(ws, *cols):
    for r in range(2, ws.max_row + 1):
        for c in cols:
            ws.cell(r, c).number_format = "0.00"


def _new_sheet(wb, title, headers):
    ws = wb.create_sheet(title)
    ws.append(headers)
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    return ws


def _split_text(e) -> str:
    if e.split_mode == SplitMode.EQUAL:
        return ", ".join(e.participants)
    unit = "%" if e.split_mode == SplitMode.PERCENTAGE else ""
    return ", ".join(f"{s.member}:{s.value:g}{unit}" for s in e.splits)


def export_excel(
    group: Group,
    filepath: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    settings: Optional[Settings] = None
) -> None:
    """
    Export group report to Excel file with sheets:
    - Balances (paid, owed, net per member)
    - Settlements (transfers that clear the outstanding balances)
    - Outstanding (balances after payments already marked as paid)
    - Expenses
    - Issues (reconciliation/unknown member warnings, skipped expenses)
    """
    settings = settings or Settings()
    report, outstanding, settlements = plan_group(
        group, start, end, settings.precision, settings.tolerance)

    wb = Workbook()
    # remove default sheet
    wb.remove(wb.active)

    ws = _new_sheet(wb, "Balances", ["Member", "Paid", "Owed", "Net"])
    for b in report.balances:
        ws.append([b.member, report.paid[b.member], report.owed[b.member], b.net_amount])
    if report.balances:
        ws.append(["TOTALS",
                   f"=SUM(B2:B{ws.max_row})", f"=SUM(C2:C{ws.max_row})", f"=SUM(D2:D{ws.max_row})"])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
    _money_columns(ws, 2, 3, 4)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Settlements", ["From (Debtor)", "To (Creditor)", f"Amount ({group.currency})"])
    for s in settlements:
        ws.append([s.from_member, s.to_member, s.amount])
    _money_columns(ws, 3)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Outstanding", ["Member", "Net after paid settlements"])
    for b in outstanding:
        ws.append([b.member, b.net_amount])
    _money_columns(ws, 2)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Expenses",
                    ["Date", "Id", "Description", "Payer", "Amount", "Split mode", "Split"])
    exps = sorted(filter_expenses_by_date(group.expenses, start, end),
                  key=lambda e: (e.created_at, e.id))
    for e in exps:
        ws.append([e.created_at[:10], e.id, e.description, e.payer, e.amount,
                   e.split_mode.value, _split_text(e)])
    _money_columns(ws, 5)
    _autosize_columns(ws)

    ws = _new_sheet(wb, "Issues", ["Expense", "Kind", "Message"])
    for issue in list(report.skipped) + list(report.warnings):
        kind = "skipped" if isinstance(issue, SkippedExpense) else type(issue).__name__
        ws.append([issue.expense_id, kind, issue.message])
        if isinstance(issue, SkippedExpense):
            ws.cell(ws.max_row, 2).fill = PatternFill("solid", fgColor="F4CCCC")
    _autosize_columns(ws)

    wb.save(filepath)
