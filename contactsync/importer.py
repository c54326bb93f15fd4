"""
contactsync.importer
~~~~~~~~~~~~~~~~~~~~

This module implements the import engine.

Rows are sent one at a time, in file order, each one paced by the
`RateLimiter`. A failing row is recorded as a `RecordError` and the loop moves
on; nothing a single row does can stop the batch.
"""

import json
import math
import threading
from dataclasses import dataclass, field
from logging import error, info, warning
from typing import Callable, List, Optional

from contactsync.clients.contacts_api import ContactsAPIClient
from contactsync.errors import ContactSyncError, PreconditionError
from contactsync.mapping import build_payload, resolve_row
from contactsync.models import RecordError
from contactsync.parsers import parse_file
from contactsync.reports import ErrorReportGenerator, Report
from contactsync.throttle import RateLimiter

NOT_PROVIDED = "Não informado"
PROCESSING_ERROR = "Erro de processamento"
NO_CODE = "N/A"

# First data row is line 2, after the header.
LINE_OFFSET = 2

STATS_EVERY = 100


def progress_of(done: int, total: int) -> int:
    """ Return the completion percentage, rounding halves up. """
    return int(math.floor(100 * done / total + 0.5))


def _text(value) -> str:
    """ Render an API error field as text, whatever JSON type it came in. """
    if value is None:
        return ""
    if isinstance(value, list):
        return "; ".join(_text(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


@dataclass
class ImportResult:
    """ Model the outcome of one import run. """

    total: int
    success_count: int = 0
    error_count: int = 0
    errors: List[RecordError] = field(default_factory=list)
    processed: int = 0
    cancelled: bool = False


class ImportEngine:
    """ Implement the `ImportEngine` class.

    The access token is handed to `run` and lives only in the client created
    for that run.

    :param client_factory: A callable building an API client from a token.
    :param rate_limiter: A `RateLimiter`; a fresh one is made per run if omitted.
    """

    def __init__(
        self,
        client_factory: Callable[[str], ContactsAPIClient] = ContactsAPIClient,
        rate_limiter: RateLimiter = None,
    ):
        self.client_factory = client_factory
        self.rate_limiter: Optional[RateLimiter] = rate_limiter

        self.errors: List[RecordError] = []

    def run(
        self,
        token: str,
        content: bytes,
        extension: str,
        organization_id: str = None,
        update_if_exists: bool = False,
        on_progress: Callable[[int], None] = None,
        cancel_event: threading.Event = None,
        naive_csv: bool = False,
    ) -> ImportResult:
        """ Import every row of a file as a contact.

        :param token: The channel's access token.
        :param content: The raw `bytes` of the file.
        :param extension: `csv` or `xlsx`.
        :param organization_id: The organization for new tags; fetched when omitted.
        :param update_if_exists: Forwarded to the API with every contact.
        :param on_progress: Called with the percentage after each row.
        :param cancel_event: Stops the run between rows once set.
        :param naive_csv: Parse CSV with the legacy comma splitter.
        :raises PreconditionError: If the token, file or organization is missing.
        :raises ParseError: If the file can't be read.
        """
        self.errors = []

        if not token:
            raise PreconditionError("Select a channel or provide an access token.")
        if not content:
            raise PreconditionError("Select a file to import.")

        client = self.client_factory(token)

        if not organization_id:
            try:
                organization_id = client.get_organization_id()
            except ContactSyncError as e:
                raise PreconditionError(f"Organization ID not found: {e}") from e
        if not organization_id:
            raise PreconditionError(
                "Organization ID not found. Check the channel token."
            )

        rows: list = parse_file(content, extension, naive_csv=naive_csv)
        limiter: RateLimiter = self.rate_limiter or RateLimiter()
        result = ImportResult(total=len(rows))

        info(f"Importing {result.total} contacts with rate limiting.")

        for i, row in enumerate(rows):
            if cancel_event is not None and cancel_event.is_set():
                warning(
                    f"Import cancelled after {result.processed} "
                    f"of {result.total} rows."
                )
                result.cancelled = True
                break

            failure: Optional[RecordError] = self._process(
                client, limiter, i, row, organization_id, update_if_exists
            )
            if failure is None:
                result.success_count += 1
            else:
                result.error_count += 1
                result.errors.append(failure)

            result.processed = i + 1

            if result.processed % STATS_EVERY == 0:
                stats = limiter.get_stats()
                info(
                    f"Progress: {result.processed}/{result.total} - "
                    f"Rate: {stats.requests_last_second}/s, "
                    f"{stats.requests_last_minute}/min"
                )

            if on_progress is not None:
                on_progress(progress_of(result.processed, result.total))

        stats = limiter.get_stats()
        info(
            f"Import finished: {result.success_count} imported, "
            f"{result.error_count} failed. "
            f"Rate: {stats.requests_last_second}/s, {stats.requests_last_minute}/min"
        )

        self.errors = list(result.errors)
        return result

    def _process(
        self, client, limiter, index, row, organization_id, update_if_exists
    ) -> Optional[RecordError]:
        """ Send one row and return its `RecordError`, or `None` on success. """
        try:
            limiter.wait()
            payload: dict = build_payload(row, organization_id, update_if_exists)
            response = client.create_contact(payload)
        except Exception as e:
            error(f"Couldn't process contact on line {index + LINE_OFFSET}: {e}")
            message = str(e) or type(e).__name__
            return self._record_error(index, row, PROCESSING_ERROR, message, NO_CODE)

        if response.ok:
            return None

        try:
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError("error body is not an object")
            status = body.get("status") or response.status_code
            message = body.get("msg") or response.reason
            code = body.get("errorCode") or NO_CODE
        except ValueError:
            status, message, code = str(response.status_code), response.reason, NO_CODE

        error(
            f"Couldn't import contact on line {index + LINE_OFFSET}: "
            f"{response.status_code} {response.reason}"
        )
        return self._record_error(index, row, status, message, code)

    def _record_error(self, index, row, status, message, code) -> RecordError:
        fields = resolve_row(row)

        return RecordError(
            line=index + LINE_OFFSET,
            number=fields["numero"] or NOT_PROVIDED,
            name=fields["nome"] or NOT_PROVIDED,
            email=fields["email"] or NOT_PROVIDED,
            status=_text(status),
            message=_text(message),
            error_code=_text(code),
        )

    def error_report(
        self, fmt: str = "xlsx", generator: ErrorReportGenerator = None
    ) -> Optional[Report]:
        """ Build the report of the last run's errors and release them.

        :param fmt: `csv` or `xlsx`.
        :return: A `Report`, or `None` when the last run had no errors.
        """
        if not self.errors:
            return None

        report = (generator or ErrorReportGenerator(fmt=fmt)).generate(self.errors)
        self.errors = []
        return report
