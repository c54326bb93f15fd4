"""
contactsync.exporter
~~~~~~~~~~~~~~~~~~~~

This module implements the export engine.
"""

from datetime import date
from logging import info, warning
from typing import Callable, Iterable, List

from contactsync.clients.contacts_api import ContactsAPIClient
from contactsync.errors import NoMatchesError
from contactsync.models import Contact, TagRef
from contactsync.reports import Report
from contactsync.serializers import FORMATS, serialize

EXPORT_HEADERS: List[str] = [
    "nome",
    "apelido",
    "numero",
    "email",
    "observacao",
    "etiquetas",
]
EXPORT_SHEET = "Contatos"


def select_contacts(contacts: List[Contact], selection: Iterable[str]) -> List[Contact]:
    """ Keep the contacts carrying at least one selected tag.

    :param contacts: `Contact` objects in API order.
    :param selection: Tag ids; an empty selection keeps every contact.
    """
    wanted: set = {str(tag_id) for tag_id in selection or ()}
    if not wanted:
        return list(contacts)

    return [contact for contact in contacts if contact.tag_ids & wanted]


def project_contact(contact: Contact) -> dict:
    """ Flatten a contact into an export record. """
    return {
        "nome": contact.name,
        "apelido": contact.nickname,
        "numero": contact.number,
        "email": contact.email,
        "observacao": contact.observation,
        "etiquetas": ",".join(tag.description for tag in contact.tags),
    }


class ExportEngine:
    """ Implement the `ExportEngine` class.

    :param client_factory: A callable building an API client from a token.
    """

    def __init__(
        self, client_factory: Callable[[str], ContactsAPIClient] = ContactsAPIClient
    ):
        self.client_factory = client_factory

    def list_tags(self, token: str) -> List[TagRef]:
        """ Get the tags a selection can be made from. """
        return self.client_factory(token).get_tags()

    def fetch_records(self, token: str, selection: Iterable[str] = ()) -> List[dict]:
        """ Fetch, filter and flatten the channel's contacts.

        :param token: The channel's access token.
        :param selection: Tag ids to filter on.
        :raises NoMatchesError: If a selection was given and nothing matched.
        """
        selection = list(selection or ())
        contacts: List[Contact] = self.client_factory(token).get_contacts()
        selected: List[Contact] = select_contacts(contacts, selection)

        info(f"Contacts: {len(contacts)} fetched, {len(selected)} selected.")

        if selection and not selected:
            warning("No contact found with the selected tags.")
            raise NoMatchesError("No contact found with the selected tags.")

        return [project_contact(contact) for contact in selected]

    def export(
        self, token: str, selection: Iterable[str] = (), fmt: str = "xlsx"
    ) -> Report:
        """ Export the channel's contacts to a file.

        :param token: The channel's access token.
        :param selection: Tag ids to filter on.
        :param fmt: `xlsx` or `csv`.
        """
        fmt = fmt.lower()
        if fmt not in FORMATS:
            raise ValueError(
                f"Unsupported format '{fmt}'. Use one of {', '.join(FORMATS)}."
            )

        records: List[dict] = self.fetch_records(token, selection)
        content: bytes = serialize(
            records, EXPORT_HEADERS, fmt, sheet_name=EXPORT_SHEET
        )

        return Report(
            content=content,
            filename=f"contatos_{date.today().isoformat()}.{fmt}",
            count=len(records),
        )
