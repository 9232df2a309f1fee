"""Domain exceptions raised by mailbackup_imapclient.

IMAPClient errors that are not translated here propagate with their original
type, so callers can still tell an authentication loss from a protocol fault.
"""


class MailBackupError(Exception):
    """Base class for all mailbackup_imapclient errors."""


class FolderNotFoundError(MailBackupError):
    """The server answered NO to a SELECT/EXAMINE of the folder.

    Args:
        folder: Human-readable folder name (not the UTF-7 wire form)
    """

    def __init__(self, folder: str):
        self.folder = folder
        super().__init__(f"Folder '{folder}' does not exist on server")


class AppendUIDError(MailBackupError):
    """APPEND succeeded but the response carried no APPENDUID code.

    Happens on servers without the UIDPLUS extension (RFC 4315). The message
    has been stored, but its UID cannot be recovered from the response.
    """

    def __init__(self, folder: str, response: bytes | str):
        self.folder = folder
        self.response = response
        super().__init__(f"No APPENDUID in APPEND response for folder '{folder}': {response!r}")


class IMAPConnectionError(MailBackupError):
    """Connecting or logging in to the IMAP server failed."""
