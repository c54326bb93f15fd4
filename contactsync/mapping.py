"""
contactsync.mapping
~~~~~~~~~~~~~~~~~~~

This module maps parsed file rows onto contact creation payloads.
"""

from typing import Dict, List

DEFAULT_TAG_COLOR = "#192D3E"

# Canonical field -> header spellings, in lookup order.
FIELD_ALIASES: Dict[str, tuple] = {
    "numero": ("numero", "Numero"),
    "nome": ("nome", "Nome"),
    "apelido": ("apelido", "Apelido"),
    "email": ("email", "Email"),
    "observacao": ("observacao", "Observacao"),
    "etiquetas": ("etiquetas", "Etiquetas"),
}


def resolve_field(row: dict, field: str) -> str:
    """ Resolve one canonical field of a row through its aliases.

    The first alias holding a non-empty value wins. Absent fields resolve to
    an empty string.

    :param row: A parsed file row.
    :param field: A key of `FIELD_ALIASES`.
    """
    for alias in FIELD_ALIASES[field]:
        value = row.get(alias)
        if value:
            return str(value)
    return ""


def resolve_row(row: dict) -> Dict[str, str]:
    """ Resolve every canonical field of a row at once. """
    return {field: resolve_field(row, field) for field in FIELD_ALIASES}


def parse_tags(value: str, organization_id: str) -> List[dict]:
    """ Turn a comma separated tag field into tag payloads.

    :param value: The raw `etiquetas` value, e.g. `"vip, lead"`.
    :param organization_id: The organization owning the tags.
    """
    return [
        {
            "description": description,
            "organizationId": organization_id,
            "hexColor": DEFAULT_TAG_COLOR,
        }
        for description in (token.strip() for token in (value or "").split(","))
        if description
    ]


def build_payload(
    row: dict, organization_id: str, update_if_exists: bool = False
) -> dict:
    """ Build the `POST /contacts` body for one row.

    `updateIfExists` is forwarded untouched; the API decides what it means.

    :param row: A parsed file row.
    :param organization_id: The organization the tags are created under.
    :param update_if_exists: Ask the API to update a contact with the same number.
    """
    fields: Dict[str, str] = resolve_row(row)

    return {
        "number": fields["numero"],
        "nickName": fields["apelido"],
        "email": fields["email"],
        "observation": fields["observacao"],
        "tags": parse_tags(fields["etiquetas"], organization_id),
        "updateIfExists": update_if_exists,
    }
