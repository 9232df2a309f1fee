"""Unit tests for Message, MessageRecord and AppendResult."""

from datetime import datetime, timedelta, timezone

from mailbackup_imapclient import AppendResult, Message, MessageRecord


def test_imap_body_converts_bare_lf():
    """Test that bare LF line endings become CRLF."""
    message = Message(raw=b"Subject: x\n\nline 1\nline 2\n")

    assert message.imap_body == b"Subject: x\r\n\r\nline 1\r\nline 2\r\n"


def test_imap_body_keeps_existing_crlf():
    """Test that CRLF line endings are not doubled."""
    message = Message(raw=b"Subject: x\r\n\r\nhi\r\n")

    assert message.imap_body == b"Subject: x\r\n\r\nhi\r\n"


def test_date_from_header():
    """Test that the Date: header supplies the APPEND time."""
    message = Message(raw=b"Date: Tue, 01 Apr 2025 08:30:00 +0200\r\nSubject: x\r\n\r\nhi")

    assert message.date == datetime(2025, 4, 1, 8, 30, tzinfo=timezone(timedelta(hours=2)))


def test_date_override_wins():
    """Test that an explicit date takes precedence over the header."""
    override = datetime(2020, 1, 1, tzinfo=timezone.utc)
    message = Message(raw=b"Date: Tue, 01 Apr 2025 08:30:00 +0200\r\n\r\nhi", date_override=override)

    assert message.date == override


def test_date_none_without_header():
    """Test that a message without Date: lets the server choose."""
    assert Message(raw=b"Subject: x\r\n\r\nhi").date is None


def test_date_none_for_garbage_header():
    """Test that an unparseable Date: header is ignored."""
    assert Message(raw=b"Date: not a date\r\n\r\nhi").date is None


def test_message_record_from_fetch():
    """Test that FETCH attributes map onto MessageRecord fields."""
    internal_date = datetime(2025, 12, 15, 10, 0, 0)
    attributes = {
        b"SEQ": 3,
        b"RFC822": b"raw",
        b"FLAGS": [b"\\Seen", b"$Forwarded"],
        b"INTERNALDATE": internal_date,
    }

    record = MessageRecord.from_fetch(42, attributes)

    assert record.uid == 42
    assert record.body == b"raw"
    assert record.flags == (b"\\Seen", b"$Forwarded")
    assert record.internal_date == internal_date
    assert record.raw[b"SEQ"] == 3


def test_message_record_optional_attributes():
    """Test that FLAGS and INTERNALDATE may be absent."""
    record = MessageRecord.from_fetch(1, {b"RFC822": b"raw"})

    assert record.flags == ()
    assert record.internal_date is None


def test_append_result_unpacks():
    """Test that AppendResult behaves as a (uid_validity, uid) pair."""
    uid_validity, uid = AppendResult(uid_validity=7, uid=42)

    assert (uid_validity, uid) == (7, 42)
