"""IMAPClient connection factory for FolderSession."""

import contextlib
import logging
import os
from dataclasses import dataclass

from imapclient import IMAPClient  # type: ignore[import-untyped]

from mailbackup_imapclient.errors import IMAPConnectionError

logger = logging.getLogger(__name__)

ENV_PREFIX = "MAILBACKUP_IMAP_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ConnectionConfig:
    """Connection parameters for one IMAP account.

    Args:
        host: IMAP server hostname
        port: IMAP server port (default: 993 for SSL)
        username: IMAP username (usually email address)
        password: IMAP password (or app-specific password)
        ssl: Use SSL/TLS connection (default: True)
        timeout: Socket timeout in seconds (default: 10)
    """

    host: str
    port: int = 993
    username: str = ""
    password: str = ""
    ssl: bool = True
    timeout: int = 10

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "ConnectionConfig":
        """Build a config from ``<prefix>HOST``, ``<prefix>PORT`` etc.

        Raises:
            IMAPConnectionError: If ``<prefix>HOST`` is not set
        """
        host = os.environ.get(f"{prefix}HOST")
        if not host:
            raise IMAPConnectionError(f"{prefix}HOST is not set")

        ssl_value = os.environ.get(f"{prefix}SSL")
        return cls(
            host=host,
            port=int(os.environ.get(f"{prefix}PORT", "993")),
            username=os.environ.get(f"{prefix}USERNAME", ""),
            password=os.environ.get(f"{prefix}PASSWORD", ""),
            ssl=True if ssl_value is None else ssl_value.strip().lower() in _TRUE_VALUES,
            timeout=int(os.environ.get(f"{prefix}TIMEOUT", "10")),
        )


def connect(config: ConnectionConfig) -> IMAPClient:
    """Create and authenticate an IMAPClient for use by FolderSession.

    Folder name encoding is switched off on the client: sessions send names
    already encoded to modified UTF-7.

    Raises:
        IMAPConnectionError: On connection or login failure
    """
    try:
        client = IMAPClient(host=config.host, port=config.port, ssl=config.ssl, timeout=config.timeout)
    except Exception as exc:
        raise IMAPConnectionError(f"Cannot connect to {config.host}:{config.port}: {exc}") from exc

    client.folder_encode = False

    try:
        client.login(config.username, config.password)
    except Exception as exc:
        with contextlib.suppress(Exception):
            client.shutdown()
        raise IMAPConnectionError(f"Authentication failed for {config.username}: {exc}") from exc

    logger.info("Authenticated %s@%s", config.username, config.host)
    return client
