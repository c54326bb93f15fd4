"""
Unit tests for the export engine.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from contactsync.errors import NoMatchesError
from contactsync.exporter import EXPORT_HEADERS, ExportEngine, project_contact, select_contacts
from contactsync.models import Contact, TagRef
from contactsync.parsers import parse_csv, parse_xlsx


def tag(tag_id, description):
    return {"Id": tag_id, "organizationId": "org-1", "hexColor": "#192D3E", "Description": description}


CONTACTS = [
    Contact.from_api(
        {
            "id": "c1",
            "name": "Ana",
            "nickName": "Aninha",
            "number": "5511999990001",
            "email": "ana@example.com",
            "observation": "liga depois, sem falta",
            "tags": [tag("t2", "vip"), tag("t1", "lead")],
        }
    ),
    Contact.from_api({"id": "c2", "name": "Bruno", "number": "5511999990002", "tags": [tag("t3", "frio")]}),
    Contact.from_api({"id": "c3", "name": "Carla", "number": "5511999990003", "tags": None}),
]


@pytest.fixture
def client():
    client = MagicMock()
    client.get_contacts.return_value = CONTACTS
    return client


@pytest.fixture
def engine(client):
    return ExportEngine(client_factory=lambda token: client)


class TestSelectContacts:
    """Tests for tag filtering."""

    def test_empty_selection_keeps_all(self):
        assert select_contacts(CONTACTS, []) == CONTACTS

    def test_intersection(self):
        assert [c.id for c in select_contacts(CONTACTS, ["t1"])] == ["c1"]
        assert [c.id for c in select_contacts(CONTACTS, ["t1", "t3"])] == ["c1", "c2"]
        assert select_contacts(CONTACTS, ["t9"]) == []


class TestProjectContact:
    """Tests for flattening contacts."""

    def test_projection(self):
        assert project_contact(CONTACTS[0]) == {
            "nome": "Ana",
            "apelido": "Aninha",
            "numero": "5511999990001",
            "email": "ana@example.com",
            "observacao": "liga depois, sem falta",
            "etiquetas": "vip,lead",
        }

    def test_missing_values_are_empty(self):
        record = project_contact(CONTACTS[2])

        assert record["apelido"] == ""
        assert record["etiquetas"] == ""


class TestExportEngine:
    """Tests for ExportEngine."""

    def test_fetch_records_filtered(self, engine):
        records = engine.fetch_records("token", ["t3"])

        assert [r["nome"] for r in records] == ["Bruno"]

    def test_no_matches(self, engine):
        with pytest.raises(NoMatchesError):
            engine.fetch_records("token", ["t9"])

    def test_empty_catalog_without_selection(self, engine, client):
        client.get_contacts.return_value = []

        assert engine.fetch_records("token") == []

    def test_csv_export(self, engine):
        report = engine.export("token", fmt="csv")

        assert report.count == 3
        assert report.filename == f"contatos_{date.today().isoformat()}.csv"
        records = parse_csv(report.content)
        assert list(records[0]) == EXPORT_HEADERS
        assert records[0]["observacao"] == "liga depois, sem falta"
        assert [r["nome"] for r in records] == ["Ana", "Bruno", "Carla"]

    def test_xlsx_export(self, engine):
        report = engine.export("token", selection=["t1"])

        assert report.count == 1
        assert report.filename.endswith(".xlsx")
        assert report.content[:2] == b"PK"

    def test_xlsx_export_with_control_characters(self, engine, client):
        client.get_contacts.return_value = [
            Contact.from_api({"id": "c9", "name": "=1+1", "observation": "linha\x0bquebrada"})
        ]

        records = parse_xlsx(engine.export("token").content)

        assert records[0]["nome"] == "=1+1"
        assert records[0]["observacao"] == "linhaquebrada"

    def test_unknown_format_fails_before_fetch(self, engine, client):
        with pytest.raises(ValueError):
            engine.export("token", fmt="pdf")

        client.get_contacts.assert_not_called()

    def test_list_tags(self, engine, client):
        client.get_tags.return_value = [TagRef("t1", "lead", "#192D3E", "org-1")]

        assert engine.list_tags("token")[0].description == "lead"
