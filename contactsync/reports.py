"""
contactsync.reports
~~~~~~~~~~~~~~~~~~~

This module builds the downloadable report of failed import rows.
"""

from dataclasses import dataclass
from datetime import date
from logging import info
from typing import Dict, Iterable, List

from contactsync.models import RecordError
from contactsync.serializers import serialize

# Known API messages and the text shown to the user instead.
MESSAGE_TRANSLATIONS: Dict[str, str] = {
    "There is already a contact with this number !": (
        "Já existe um contato com este número."
    ),
    "Contact not found!": "Contato não encontrado.",
}

REPORT_HEADERS: List[str] = ["Linha", "Número", "Nome", "Mensagem de Erro"]
REPORT_SHEET = "Erros de Importação"


@dataclass
class Report:
    """ Model a generated file ready to be written or downloaded. """

    content: bytes
    filename: str
    count: int


class ErrorReportGenerator:
    """ Implement the `ErrorReportGenerator` class.

    :param translations: Extra message translations, merged over the defaults.
    :param fmt: `xlsx` or `csv`.
    """

    def __init__(self, translations: Dict[str, str] = None, fmt: str = "xlsx"):
        self.translations: Dict[str, str] = {
            **MESSAGE_TRANSLATIONS,
            **(translations or {}),
        }
        self.fmt: str = fmt.lower()

    def translate(self, message: str) -> str:
        message = "" if message is None else str(message)
        return self.translations.get(message, message)

    def rows(self, errors: Iterable[RecordError]) -> List[dict]:
        return [
            {
                "Linha": e.line,
                "Número": e.number,
                "Nome": e.name,
                "Mensagem de Erro": self.translate(e.message),
            }
            for e in errors
        ]

    def generate(self, errors: Iterable[RecordError]) -> Report:
        """ Encode the errors as a report file.

        :param errors: `RecordError` objects in the order they happened.
        """
        rows: List[dict] = self.rows(errors)
        content: bytes = serialize(
            rows, REPORT_HEADERS, self.fmt, sheet_name=REPORT_SHEET
        )
        filename: str = f"erros_importacao_{date.today().isoformat()}.{self.fmt}"

        info(f"Error report {filename} generated with {len(rows)} rows.")
        return Report(content=content, filename=filename, count=len(rows))
