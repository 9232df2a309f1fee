"""FolderSession: one IMAP folder seen through a borrowed IMAPClient connection.

Wraps the synchronous IMAPClient library for the backup/restore pipeline.
Translates IMAP protocol responses into backup domain values (MessageRecord,
AppendResult) and the one domain error the pipeline acts on (FolderNotFoundError).

CRITICAL: The connection must pass folder names through verbatim
(``folder_encode = False``, as set by ``connect()``). The session sends the
folder name already encoded to modified UTF-7, and IMAPClient would encode it
a second time otherwise.
"""

import logging
import re
import ssl
from functools import cached_property
from typing import Any

from imapclient import IMAPClient, imap_utf7  # type: ignore[import-untyped]
from imapclient.exceptions import (  # type: ignore[import-untyped]
    IMAPClientAbortError,
    IMAPClientError,
    ProtocolError,
)

from mailbackup_imapclient.errors import AppendUIDError, FolderNotFoundError
from mailbackup_imapclient.retry import retry_on_error
from mailbackup_imapclient.types import AppendResult, Message, MessageRecord

logger = logging.getLogger(__name__)

REQUESTED_ATTRIBUTES = ["RFC822", "FLAGS", "INTERNALDATE"]

# imaplib reports a dropped connection as abort('socket error: EOF')
FETCH_RETRY_ERRORS: tuple[type[BaseException], ...] = (IMAPClientAbortError, ssl.SSLEOFError)

_APPENDUID = re.compile(rb"\[APPENDUID (\d+) (\d+)\]", re.IGNORECASE)

_FOLDER_MISSING_MARKERS = (
    "select failed",
    "examine failed",
    "nonexistent",
    "does not exist",
    "no such mailbox",
)


class FolderSession:
    """A single folder on an already-authenticated IMAP connection.

    Operations:
    - exists: EXAMINE → bool
    - create: EXAMINE + CREATE (only if missing)
    - uid_validity: EXAMINE → UIDVALIDITY (cached)
    - uids: EXAMINE + UID SEARCH ALL → sorted UIDs
    - fetch: EXAMINE + UID FETCH (RFC822 FLAGS INTERNALDATE), retried on EOF
    - append: APPEND → UID from the APPENDUID response code

    Folder Selection:
    - Every read operation re-issues EXAMINE (read-only SELECT). Another session
      may have selected a different folder on the shared connection since.
    - A NO response to EXAMINE becomes FolderNotFoundError. All other errors
      propagate unchanged.

    Caching:
    - encoded_name is computed once per session
    - uid_validity is read from the first successful EXAMINE, or refreshed by append
    - Deleting and recreating the folder mid-session is not detected

    Connection Management:
    - The connection is borrowed; the session never logs out or closes it
    - Callers serialize commands on a shared connection (IMAP is not interleaved)

    Args:
        connection: Authenticated IMAPClient with folder_encode disabled
        name: Human-readable folder name (e.g. 'INBOX', 'Archive/2024', 'Entwürfe')

    Raises:
        ValueError: If the connection still has IMAPClient folder_encode enabled

    Example:
        >>> from mailbackup_imapclient import ConnectionConfig, FolderSession, connect
        >>> client = connect(ConnectionConfig(host='imap.example.com', username='me', password='secret'))
        >>> folder = FolderSession(client, 'INBOX')
        >>> for uid in folder.uids():
        ...     record = folder.fetch(uid)
    """

    def __init__(self, connection: IMAPClient, name: str):
        # Names are sent pre-encoded; IMAPClient would encode them again
        if getattr(connection, "folder_encode", False) is True:
            raise ValueError("FolderSession needs a connection with folder_encode = False (see connect())")
        self.connection = connection
        self.name = name
        self._uid_validity: int | None = None

    def __repr__(self) -> str:
        return f"FolderSession(name={self.name!r})"

    @property
    def folder(self) -> str:
        """Deprecated alias for ``name``."""
        return self.name

    @cached_property
    def encoded_name(self) -> bytes:
        """Folder name in IMAP modified UTF-7 (RFC 3501 section 5.1.3)."""
        return imap_utf7.encode(self.name)

    def exists(self) -> bool:
        """Return True if the folder can be selected.

        Returns:
            False if the server reports no such mailbox

        Raises:
            IMAPClientError: Any other EXAMINE failure
        """
        try:
            self._examine()
        except FolderNotFoundError:
            return False
        return True

    def create(self) -> None:
        """Create the folder on the server unless it already exists."""
        if self.exists():
            return

        self.connection.create_folder(self.encoded_name)
        logger.info("Created folder '%s'", self.name)

    @property
    def uid_validity(self) -> int:
        """UIDVALIDITY of the folder (cached after first read).

        Raises:
            FolderNotFoundError: If the folder does not exist
        """
        if self._uid_validity is None:
            select_info = self._examine()
            self._uid_validity = int(select_info[b"UIDVALIDITY"])
        return self._uid_validity

    def uids(self) -> list[int]:
        """Return all message UIDs in the folder, ascending.

        Returns:
            Sorted UIDs; empty if the folder does not exist or the server
            sent a SEARCH response IMAPClient could not parse
        """
        try:
            self._examine()
        except FolderNotFoundError:
            return []

        try:
            found = self.connection.search(["ALL"])
        except (ValueError, ProtocolError) as e:
            # parse_message_list rejects split or malformed untagged SEARCH data
            logger.warning("Folder '%s': unparseable SEARCH response, treating as empty (%s)", self.name, e)
            return []

        # SEARCH returns arbitrary order; UIDs are unique within one UIDVALIDITY
        return sorted(set(found))

    def fetch(self, uid: int) -> MessageRecord | None:
        """Fetch one message with RFC822, FLAGS and INTERNALDATE.

        Missing folder and missing message both return None: either way the
        caller skips this UID.

        Args:
            uid: Message UID

        Returns:
            MessageRecord, or None if the folder or message body is not available

        Raises:
            IMAPClientAbortError: If every retry of the FETCH hit end-of-stream
        """
        try:
            self._examine()
        except FolderNotFoundError:
            return None

        uid = int(uid)
        raw_data = retry_on_error(
            lambda: self.connection.fetch([uid], REQUESTED_ATTRIBUTES),
            errors=FETCH_RETRY_ERRORS,
        )
        if not raw_data:
            return None

        attributes = raw_data.get(uid)
        if attributes is None or b"RFC822" not in attributes:
            return None

        return MessageRecord.from_fetch(uid, attributes)

    def append(self, message: Message) -> int:
        """Append a message and return the UID the server assigned.

        Not retried: a repeated APPEND could store the message twice.

        Args:
            message: Message exposing imap_body, date and flags

        Returns:
            New UID (valid under ``uid_validity``, which this call refreshes)

        Raises:
            AppendUIDError: If the server did not return APPENDUID
        """
        body = message.imap_body
        date = message.date
        response = self.connection.append(self.encoded_name, body, flags=message.flags, msg_time=date)
        logger.debug("Appended %d bytes to '%s': %r", len(body), self.name, response)

        result = self._extract_uid(response)
        self._uid_validity = result.uid_validity
        return result.uid

    def _examine(self) -> dict[bytes, Any]:
        """EXAMINE the folder (read-only SELECT).

        Returns:
            SELECT response dict (b'EXISTS', b'UIDVALIDITY', ...)

        Raises:
            FolderNotFoundError: If the server answered NO
        """
        try:
            select_info: dict[bytes, Any] = self.connection.select_folder(self.encoded_name, readonly=True)
        except IMAPClientAbortError:
            raise
        except IMAPClientError as e:
            if not _is_folder_missing(e):
                raise
            logger.warning("Folder '%s' does not exist on server", self.name)
            raise FolderNotFoundError(self.name) from e

        logger.debug("Examined folder '%s'", self.name)
        return select_info

    def _extract_uid(self, response: bytes | str) -> AppendResult:
        """Decode ``[APPENDUID <uidvalidity> <uid>]`` from an APPEND response."""
        raw = response.encode() if isinstance(response, str) else response
        match = _APPENDUID.search(raw or b"")
        if match is None:
            raise AppendUIDError(self.name, response)
        return AppendResult(uid_validity=int(match.group(1)), uid=int(match.group(2)))


def _is_folder_missing(error: IMAPClientError) -> bool:
    """Whether a SELECT/EXAMINE error is the server saying the folder is absent."""
    error_msg = str(error).lower()
    return any(marker in error_msg for marker in _FOLDER_MISSING_MARKERS)
