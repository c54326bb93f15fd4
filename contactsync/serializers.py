"""
contactsync.serializers
~~~~~~~~~~~~~~~~~~~~~~~

This module encodes flat records into CSV or XLSX bytes.
"""

import csv
import io
from typing import Iterable, List

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

FORMATS = ("csv", "xlsx")

FONT_HEADER = Font(bold=True)


def _cell(value) -> str:
    return "" if value is None else value


def _xlsx_cell(value):
    """ Strip characters worksheets can't hold from string values. """
    value = _cell(value)
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def to_csv(records: Iterable[dict], headers: List[str]) -> bytes:
    """ Encode records as UTF-8 CSV with a header row.

    Values holding a comma, a double quote or a line break are quoted and
    their quotes doubled.

    :param records: Flat `dict` records.
    :param headers: Column order; missing keys become empty cells.
    """
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")

    writer.writerow(headers)
    for record in records:
        writer.writerow([_cell(record.get(header)) for header in headers])

    return buffer.getvalue().encode("utf-8")


def to_xlsx(records: Iterable[dict], headers: List[str], sheet_name: str) -> bytes:
    """ Encode records as a single sheet workbook with a bold header row.

    :param records: Flat `dict` records.
    :param headers: Column order; missing keys become empty cells.
    :param sheet_name: Title of the only sheet.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name

    sheet.append(list(headers))
    for cell in sheet[1]:
        cell.font = FONT_HEADER

    widths = [len(str(header)) for header in headers]
    for r, record in enumerate(records, start=2):
        row = [_xlsx_cell(record.get(header)) for header in headers]
        for c, value in enumerate(row, start=1):
            cell = sheet.cell(row=r, column=c, value=value)
            # Values starting with "=" are text, not formulas.
            if cell.data_type == "f":
                cell.data_type = "s"
        widths = [max(w, len(str(v))) for w, v in zip(widths, row)]

    for i, width in enumerate(widths, start=1):
        sheet.column_dimensions[get_column_letter(i)].width = min(width + 2, 60)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def serialize(
    records: Iterable[dict], headers: List[str], fmt: str, sheet_name: str = "Sheet1"
) -> bytes:
    """ Encode records in the requested format.

    :param fmt: `csv` or `xlsx`.
    :raises ValueError: If the format is unknown.
    """
    fmt = (fmt or "").lower()
    if fmt == "csv":
        return to_csv(records, headers)
    if fmt == "xlsx":
        return to_xlsx(records, headers, sheet_name)
    raise ValueError(f"Unsupported format '{fmt}'. Use one of {', '.join(FORMATS)}.")
