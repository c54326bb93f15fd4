"""
contactsync.models
~~~~~~~~~~~~~~~~~~

This module implements data models.
"""

from dataclasses import dataclass, field
from typing import List


def _pick(record: dict, *keys: str, default: str = "") -> str:
    """ Return the first non-empty value among the given keys of a record. """
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return default


@dataclass(frozen=True)
class TagRef:
    """ Model a `TagRef` object that parallels the API's tag fields. """

    id: str
    description: str
    hex_color: str
    organization_id: str

    @classmethod
    def from_api(cls, record: dict) -> "TagRef":
        """ Build a `TagRef` from a tag JSON object.

        The API is inconsistent about key casing, so both `Id` and `id`
        spellings are accepted.

        :param record: A `dict` tag record.
        """
        return cls(
            id=str(_pick(record, "Id", "id")),
            description=_pick(record, "Description", "description"),
            hex_color=_pick(record, "HexColor", "hexColor"),
            organization_id=str(_pick(record, "OrganizationId", "organizationId")),
        )


@dataclass
class Contact:
    """ Model a `Contact` object that parallels the API's contact fields. """

    id: str

    name: str
    nickname: str

    number: str
    email: str
    observation: str

    tags: List[TagRef] = field(default_factory=list)

    @classmethod
    def from_api(cls, record: dict) -> "Contact":
        """ Build a `Contact` from a contact JSON object.

        :param record: A `dict` contact record.
        """
        return cls(
            id=str(record.get("id") or ""),
            name=record.get("name") or "",
            nickname=record.get("nickName") or "",
            number=record.get("number") or "",
            email=record.get("email") or "",
            observation=record.get("observation") or "",
            tags=[TagRef.from_api(tag) for tag in record.get("tags") or []],
        )

    @property
    def tag_ids(self) -> set:
        return {tag.id for tag in self.tags}


@dataclass
class RecordError:
    """ Model a failed import row, as shown in the error report. """

    line: int

    number: str
    name: str
    email: str

    status: str
    message: str
    error_code: str
