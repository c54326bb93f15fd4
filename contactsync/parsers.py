"""
contactsync.parsers
~~~~~~~~~~~~~~~~~~~

This module turns uploaded CSV and XLSX files into ordered lists of rows.

Each row is a `dict` mapping the file's header cells to string values. Rows
keep the order they have in the file, since that order decides the line
numbers shown in the error report.
"""

import csv
import io
import zipfile
from logging import info
from typing import Dict, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from contactsync.errors import ParseError

Row = Dict[str, str]

SUPPORTED_EXTENSIONS = ("csv", "xlsx")


def normalize_extension(extension: str) -> str:
    """ Normalize a declared extension such as `.CSV` to `csv`.

    :param extension: A `str` extension or file name.
    :return: The lowercase extension.
    :raises ParseError: If the extension is not supported.
    """
    ext: str = (extension or "").rsplit(".", 1)[-1].strip().lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ParseError(f"Unsupported file type '{extension}'. Use .xlsx or .csv.")
    return ext


def parse_file(content: bytes, extension: str, naive_csv: bool = False) -> List[Row]:
    """ Parse file content according to its declared extension.

    :param content: The raw `bytes` of the file.
    :param extension: `csv` or `xlsx`; a file name is accepted too.
    :param naive_csv: Split CSV lines on every comma, like the legacy importer.
    :return: A `list` of rows in file order.
    """
    ext: str = normalize_extension(extension)

    if ext == "csv":
        rows = parse_csv(content, naive=naive_csv)
    else:
        rows = parse_xlsx(content)

    info(f"Parsed {len(rows)} rows from {ext.upper()} file.")
    return rows


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"File is not valid UTF-8 text: {e}") from e


def _zip_row(headers: List[str], values: List[str]) -> Row:
    return {
        header: values[i].strip() if i < len(values) else ""
        for i, header in enumerate(headers)
    }


def parse_csv(content: bytes, naive: bool = False) -> List[Row]:
    """ Parse CSV content whose first non-blank line is the header.

    By default quoted values may hold commas, double quotes and line breaks.
    With `naive` set, every line is split on each comma and all double quotes
    are removed, which is what the legacy importer did; quoted commas are not
    supported in that mode.

    :param content: The raw `bytes` of the file.
    :param naive: Use the legacy comma splitter.
    """
    text: str = _decode(content)

    if naive:
        lines = [line.split(",") for line in text.splitlines() if line.strip()]
        lines = [[cell.replace('"', "") for cell in line] for line in lines]
    else:
        try:
            lines = [
                line
                for line in csv.reader(io.StringIO(text, newline=""))
                # A row of empty cells like ",," is kept; only blank lines go.
                if line and not (len(line) == 1 and not line[0].strip())
            ]
        except csv.Error as e:
            raise ParseError(f"Malformed CSV content: {e}") from e

    if not lines:
        return []

    headers: List[str] = [cell.strip().replace('"', "") for cell in lines[0]]

    return [_zip_row(headers, line) for line in lines[1:]]


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_xlsx(content: bytes) -> List[Row]:
    """ Parse the first sheet of a workbook whose top row is the header.

    Columns without a header are ignored and fully empty rows are skipped.

    :param content: The raw `bytes` of the workbook.
    """
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ParseError(f"File is not a readable XLSX workbook: {e}") from e

    try:
        sheet = workbook.worksheets[0]
        values = sheet.iter_rows(values_only=True)

        header_cells = next(values, None)
        if header_cells is None:
            return []

        headers = [
            (i, _cell_text(cell))
            for i, cell in enumerate(header_cells)
            if _cell_text(cell)
        ]

        rows: List[Row] = []
        for cells in values:
            if all(cell in (None, "") for cell in cells):
                continue
            rows.append(
                {
                    header: _cell_text(cells[i]) if i < len(cells) else ""
                    for i, header in headers
                }
            )
    finally:
        workbook.close()

    return rows
