"""
Tabular exports of accounts and movements.

Formats: Excel (.xlsx via openpyxl), CSV (.csv) and aligned text (.txt).
"""
import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from django.http import HttpResponse
from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter


class ExportFormat:
    EXCEL = 'xlsx'
    CSV = 'csv'
    TXT = 'txt'

    CHOICES = [EXCEL, CSV, TXT]
    CONTENT_TYPES = {
        EXCEL: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        CSV: 'text/csv',
        TXT: 'text/plain',
    }


@dataclass(frozen=True)
class Column:
    key: str
    header: str
    width: int = 15
    numeric: bool = False


TXT_MAX_WIDTH = 40


def as_text(value: Any) -> str:
    """Render one cell for the text formats."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return str(value)


def build_workbook(rows: list[dict], columns: list[Column], title: str) -> bytes:
    """
    Render rows into a single-sheet workbook.

    Layout: title on row 1, export time on row 2, header on row 4, data
    below it. Numeric columns are written as numbers so totals work in
    a spreadsheet.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    edge = Side(style='thin')
    border = Border(left=edge, right=edge, top=edge, bottom=edge)
    last_col = max(len(columns), 1)

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_col)
    ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=14)

    ws.merge_cells(start_row=2, start_column=1, end_row=2, end_column=last_col)
    stamp = ws.cell(row=2, column=1, value=f"Exported: {timezone.now():%Y-%m-%d %H:%M} UTC")
    stamp.font = Font(italic=True, size=10, color='666666')

    header_row = 4
    for idx, col in enumerate(columns, 1):
        cell = ws.cell(row=header_row, column=idx, value=col.header)
        cell.font = Font(bold=True, color='FFFFFF')
        cell.fill = PatternFill(start_color='2F5597', end_color='2F5597', fill_type='solid')
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = border
        ws.column_dimensions[get_column_letter(idx)].width = col.width

    for row_idx, row in enumerate(rows, header_row + 1):
        for idx, col in enumerate(columns, 1):
            value = row.get(col.key)
            if col.numeric and value is not None:
                cell = ws.cell(row=row_idx, column=idx, value=float(value))
                cell.number_format = '#,##0.00'
                cell.alignment = Alignment(horizontal='right')
            else:
                cell = ws.cell(row=row_idx, column=idx, value=as_text(value))
            cell.border = border

    ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_csv(rows: list[dict], columns: list[Column]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([col.header for col in columns])
    for row in rows:
        writer.writerow([as_text(row.get(col.key)) for col in columns])
    return buffer.getvalue()


def build_text(rows: list[dict], columns: list[Column]) -> str:
    """Space-aligned table; long cells are cut with an ellipsis."""
    cells = [[as_text(row.get(col.key)) for col in columns] for row in rows]
    widths = []
    for idx, col in enumerate(columns):
        longest = max([len(col.header)] + [len(r[idx]) for r in cells])
        widths.append(min(longest, TXT_MAX_WIDTH))

    def line(values):
        parts = []
        for idx, (value, width) in enumerate(zip(values, widths)):
            if len(value) > width:
                value = value[:width - 3] + '...'
            parts.append(value.rjust(width) if columns[idx].numeric else value.ljust(width))
        return '  '.join(parts).rstrip()

    out = [line([col.header for col in columns]), '  '.join('-' * w for w in widths)]
    out.extend(line(r) for r in cells)
    return '\n'.join(out) + '\n'


def create_export_response(
    rows: list[dict],
    columns: list[Column],
    export_format: str,
    filename: str,
    title: str,
) -> HttpResponse:
    """
    Build a file download response.

    Raises:
        ValueError: unknown export_format
    """
    if export_format not in ExportFormat.CHOICES:
        raise ValueError(
            f"Invalid format '{export_format}'. Expected one of: {', '.join(ExportFormat.CHOICES)}."
        )

    content_type = ExportFormat.CONTENT_TYPES[export_format]
    if export_format == ExportFormat.EXCEL:
        response = HttpResponse(build_workbook(rows, columns, title), content_type=content_type)
    elif export_format == ExportFormat.CSV:
        # BOM so Excel detects UTF-8
        response = HttpResponse(
            build_csv(rows, columns), content_type=content_type, charset='utf-8-sig',
        )
    else:
        response = HttpResponse(build_text(rows, columns), content_type=content_type)

    response['Content-Disposition'] = f'attachment; filename="{filename}.{export_format}"'
    return response


# =============================================================================
# Accounts
# =============================================================================

ACCOUNT_COLUMNS = [
    Column('code', 'Code', 12),
    Column('name', 'Account Name', 30),
    Column('account_type', 'Type', 12),
    Column('group_name', 'Group', 20),
    Column('phone', 'Phone', 15),
    Column('email', 'Email', 25),
    Column('tax_office', 'Tax Office', 18),
    Column('tax_number', 'Tax Number', 14),
    Column('balance', 'Balance', 15, numeric=True),
]


def account_rows(accounts: Iterable) -> list[dict]:
    return [
        {
            'code': account.code,
            'name': account.name,
            'account_type': account.get_account_type_display(),
            'group_name': account.group.name if account.group_id else '',
            'phone': account.phone,
            'email': account.email,
            'tax_office': account.tax_office,
            'tax_number': account.tax_number,
            'balance': account.balance,
        }
        for account in accounts
    ]


# =============================================================================
# Movements
# =============================================================================

MOVEMENT_COLUMNS = [
    Column('transaction_date', 'Date', 12),
    Column('account_code', 'Account Code', 12),
    Column('account_name', 'Account', 28),
    Column('type', 'Type', 12),
    Column('signed_amount', 'Amount', 15, numeric=True),
    Column('payment_method', 'Payment Method', 15),
    Column('status', 'Status', 11),
    Column('reference_number', 'Reference', 16),
    Column('due_date', 'Due Date', 12),
    Column('description', 'Description', 40),
]


def movement_rows(movements: Iterable) -> list[dict]:
    """Amounts are exported signed so a column total equals the net effect."""
    return [
        {
            'transaction_date': movement.transaction_date,
            'account_code': movement.account.code,
            'account_name': movement.account.name,
            'type': movement.get_movement_type_display(),
            'signed_amount': movement.signed_amount,
            'payment_method': movement.get_payment_method_display(),
            'status': movement.get_status_display(),
            'reference_number': movement.reference_number,
            'due_date': movement.due_date,
            'description': movement.description,
        }
        for movement in movements
    ]
