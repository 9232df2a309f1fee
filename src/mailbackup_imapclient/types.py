"""Value types exchanged with FolderSession.

- MessageRecord: one FETCH result (RFC822, FLAGS, INTERNALDATE)
- AppendResult: (UIDVALIDITY, UID) pair decoded from an APPENDUID response
- Message: appendable message built from raw RFC822 bytes
"""

import email.utils
import re
from dataclasses import dataclass, field
from datetime import datetime
from email.parser import BytesHeaderParser
from email.policy import compat32
from typing import Any, NamedTuple

_BARE_LF = re.compile(rb"(?<!\r)\n")


@dataclass(frozen=True)
class MessageRecord:
    """Raw message and metadata as returned by UID FETCH.

    Attributes:
        uid: Message UID in the fetched folder
        body: Full RFC822 bytes
        flags: FLAGS tuple (b'\\Seen', b'$Forwarded', ...)
        internal_date: INTERNALDATE (None if the server omitted it)
        raw: Complete FETCH attribute dict, keyed by bytes
    """

    uid: int
    body: bytes
    flags: tuple[bytes, ...] = ()
    internal_date: datetime | None = None
    raw: dict[bytes, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_fetch(cls, uid: int, attributes: dict[bytes, Any]) -> "MessageRecord":
        return cls(
            uid=uid,
            body=attributes[b"RFC822"],
            flags=tuple(attributes.get(b"FLAGS", ())),
            internal_date=attributes.get(b"INTERNALDATE"),
            raw=dict(attributes),
        )


class AppendResult(NamedTuple):
    """UID assigned by APPEND, valid only under ``uid_validity``."""

    uid_validity: int
    uid: int


@dataclass
class Message:
    """Message to be appended to a folder.

    Args:
        raw: RFC822 message bytes, with either LF or CRLF line endings
        date_override: Explicit INTERNALDATE; when None the Date: header is used
        flags: Flags to set on the appended message
    """

    raw: bytes
    date_override: datetime | None = None
    flags: tuple[str | bytes, ...] = ()

    @property
    def imap_body(self) -> bytes:
        """Message bytes with every bare LF converted to CRLF, as IMAP requires."""
        return _BARE_LF.sub(b"\r\n", self.raw)

    @property
    def date(self) -> datetime | None:
        """Origination time for APPEND, or None to let the server pick."""
        if self.date_override is not None:
            return self.date_override

        headers = BytesHeaderParser(policy=compat32).parsebytes(self.raw)
        value = headers.get("Date")
        if not value:
            return None
        try:
            return email.utils.parsedate_to_datetime(str(value))
        except (TypeError, ValueError):
            # Unparseable Date: header - let the server set the time
            return None
