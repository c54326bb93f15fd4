"""
Unit tests for CSV and XLSX encoding.
"""

import io

import pytest
from openpyxl import load_workbook

from contactsync.exporter import EXPORT_HEADERS
from contactsync.parsers import parse_csv, parse_xlsx
from contactsync.serializers import serialize, to_csv, to_xlsx


class TestToCSV:
    """Tests for CSV encoding."""

    def test_header_and_rows(self):
        content = to_csv([{"a": "1", "b": "x"}, {"b": "y"}], ["a", "b"])

        assert content == b"a,b\r\n1,x\r\n,y\r\n"

    def test_special_values_quoted(self):
        content = to_csv([{"a": 'say "hi", then\nleave', "b": "plain"}], ["a", "b"])

        assert content == b'a,b\r\n"say ""hi"", then\nleave",plain\r\n'

    def test_none_and_numbers(self):
        assert to_csv([{"a": None, "b": 12}], ["a", "b"]) == b"a,b\r\n,12\r\n"

    def test_round_trip(self):
        records = [
            {
                "nome": "Ana Souza",
                "apelido": "",
                "numero": "5511999990001",
                "email": "ana@example.com",
                "observacao": 'liga depois, "urgente"\r\nsegunda linha',
                "etiquetas": "vip,lead",
            },
            {
                "nome": "Zé",
                "apelido": "Zezinho",
                "numero": "5511999990002",
                "email": "",
                "observacao": "",
                "etiquetas": "",
            },
        ]

        assert parse_csv(to_csv(records, EXPORT_HEADERS)) == records


class TestToXLSX:
    """Tests for XLSX encoding."""

    def test_single_named_sheet(self):
        content = to_xlsx([{"a": "1", "b": "x"}, {"a": "2"}], ["a", "b"], "Contatos")
        workbook = load_workbook(io.BytesIO(content))

        assert workbook.sheetnames == ["Contatos"]
        rows = list(workbook["Contatos"].iter_rows(values_only=True))
        assert rows[0] == ("a", "b")
        assert rows[1] == ("1", "x")
        assert rows[2][0] == "2"
        assert workbook["Contatos"]["A1"].font.bold

    def test_parses_back(self):
        records = [{"nome": "Ana", "numero": "5511999990001"}]
        content = to_xlsx(records, ["nome", "numero"], "S")

        assert parse_xlsx(content) == records

    def test_illegal_characters_dropped(self):
        """Test control characters worksheets reject are removed, not raised."""
        content = to_xlsx([{"observacao": "linha\x0bquebrada"}], ["observacao"], "S")

        assert parse_xlsx(content) == [{"observacao": "linhaquebrada"}]

    def test_formula_like_values_stay_text(self):
        records = [{"nome": "=1+1", "numero": "=HYPERLINK(\"x\")"}]
        content = to_xlsx(records, ["nome", "numero"], "S")

        sheet = load_workbook(io.BytesIO(content))["S"]
        assert sheet["A2"].data_type == "s"
        assert sheet["A2"].value == "=1+1"
        assert parse_xlsx(content) == records


class TestSerialize:
    """Tests for format dispatch."""

    def test_dispatch(self):
        assert serialize([], ["a"], "CSV") == b"a\r\n"
        assert serialize([], ["a"], "xlsx")[:2] == b"PK"

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            serialize([], ["a"], "json")
