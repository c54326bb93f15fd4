"""
contactsync.clients.contacts_api
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

This module contains a high-level contacts API client class.
"""

import os
from logging import info, warning
from typing import List

import requests as rq

from contactsync.errors import APIError, TransportError
from contactsync.models import Contact, TagRef

DEFAULT_API_URL = "https://api.inovstar.com/core/v2/api"
DEFAULT_TIMEOUT = 30.0


def error_message(response: rq.Response) -> str:
    """ Extract a readable message from a failed response.

    :param response: A non-2xx `requests.Response`.
    :return: The body's `message` or `msg`, else `"<status> <reason>"`.
    """
    fallback: str = f"{response.status_code} {response.reason}".strip()
    try:
        data = response.json()
    except ValueError:
        return fallback

    if isinstance(data, dict):
        return data.get("message") or data.get("msg") or fallback
    return fallback


class ContactsAPIClient:
    """ Implement the `ContactsAPIClient` class.

    This class contains a high-level controlled interface for interacting with the
    contacts API of a single channel.

    It requires an access token, passed in or stored in the environment variable
    `CONTACTSYNC_TOKEN`. The base URL and request timeout can be overridden with
    `CONTACTSYNC_API_URL` and `CONTACTSYNC_TIMEOUT`.

    :param token: The channel's access token.
    :param base: The API base URL.
    :param session: A `requests.Session` to send requests through.
    """

    def __init__(self, token: str = None, base: str = None, session: rq.Session = None):
        base = base or os.getenv("CONTACTSYNC_API_URL") or DEFAULT_API_URL
        self.base: str = base.rstrip("/")
        self.timeout: float = float(os.getenv("CONTACTSYNC_TIMEOUT") or DEFAULT_TIMEOUT)

        self.token: str = token or os.getenv("CONTACTSYNC_TOKEN")

        self.session: rq.Session = session or rq.Session()
        self.session.headers.update(
            {"access-token": self.token or "", "Accept": "application/json"}
        )

    def _get(self, path: str, what: str):
        """ Send a GET request and decode its JSON body.

        :param path: The endpoint path, e.g. `/tags`.
        :param what: A `str` naming the resource, used in error messages.
        :raises APIError: On a non-2xx response.
        :raises TransportError: If no response was received.
        """
        url: str = "".join([self.base, path])
        info(f"Fetching {what} with token {(self.token or '')[:10]}...")

        try:
            response: rq.Response = self.session.get(url, timeout=self.timeout)
        except rq.RequestException as e:
            raise TransportError(f"Couldn't fetch {what}: {e}") from e

        if not response.ok:
            message: str = error_message(response)
            warning(f"Couldn't fetch {what}: {message}")
            raise APIError(response.status_code, f"Couldn't fetch {what}: {message}")

        return response.json()

    def get_tags(self) -> List[TagRef]:
        """ Get every tag of the channel's organization. """
        records: list = self._get("/tags", "tags") or []
        info(f"Loaded {len(records)} tags.")

        return [TagRef.from_api(record) for record in records]

    def get_channel(self) -> dict:
        """ Get the channel the token belongs to. """
        return self._get("/channel", "channel information") or {}

    def get_organization_id(self) -> str:
        """ Get the organization id of the token's channel. """
        organization_id = self.get_channel().get("organizationId") or ""
        info(f"Organization ID resolved: {organization_id}")

        return str(organization_id)

    def get_contacts(self) -> List[Contact]:
        """ Get every contact of the channel in one unpaginated request. """
        records: list = self._get("/contacts", "contacts") or []

        return [Contact.from_api(record) for record in records]

    def create_contact(self, payload: dict) -> rq.Response:
        """ Send one contact creation request.

        Non-2xx responses are returned, not raised, so the caller can read the
        API's error body.

        :param payload: A `POST /contacts` body.
        :raises TransportError: If no response was received.
        """
        url: str = "".join([self.base, "/contacts"])

        try:
            return self.session.post(url, json=payload, timeout=self.timeout)
        except rq.RequestException as e:
            raise TransportError(str(e)) from e
