"""
contactsync.errors
~~~~~~~~~~~~~~~~~~

This module contains the exceptions raised by the system.

Only `ParseError`, `PreconditionError`, `APIError` and `NoMatchesError` ever
reach a caller. `TransportError` raised while sending a single contact is
folded into that row's `RecordError` by the import engine.
"""


class ContactSyncError(Exception):
    """ Base class for every error raised by contactsync. """


class ParseError(ContactSyncError):
    """ The file could not be decoded in its declared format. """


class PreconditionError(ContactSyncError):
    """ A run was started without a credential, a file or an organization. """


class TransportError(ContactSyncError):
    """ A request failed before any response was received. """


class NoMatchesError(ContactSyncError):
    """ No contact carries any of the selected tags. """


class APIError(ContactSyncError):
    """ The API answered a read request with a non-2xx status. """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
