"""IMAP folder access for mail backup, built on IMAPClient."""

from mailbackup_imapclient.connection import ConnectionConfig, connect
from mailbackup_imapclient.errors import (
    AppendUIDError,
    FolderNotFoundError,
    IMAPConnectionError,
    MailBackupError,
)
from mailbackup_imapclient.folder import FolderSession
from mailbackup_imapclient.retry import retry_on_error
from mailbackup_imapclient.types import AppendResult, Message, MessageRecord

__all__ = [
    "AppendResult",
    "AppendUIDError",
    "ConnectionConfig",
    "FolderNotFoundError",
    "FolderSession",
    "IMAPConnectionError",
    "MailBackupError",
    "Message",
    "MessageRecord",
    "connect",
    "retry_on_error",
]
