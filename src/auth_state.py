"""
Auth State - Session credential persistence.

The protocol client emits creds.update whenever its session credentials
change. This store merges each update into the saved credentials and
writes them to <auth_state_dir>/creds.json, so the next start reuses the
session instead of asking for a new QR pairing.

Security:
    When AUTH_ENCRYPTION_KEY is set, the file is encrypted with Fernet and
    written as creds.json.enc instead. A key that cannot decrypt the file
    is treated as "no saved session".

Usage:
    store = AuthStateStore("auth_info_baileys")
    state = store.load()                 # handed to the protocol client
    handle.on("creds.update", store.save)
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

PLAIN_FILENAME = "creds.json"
ENCRYPTED_FILENAME = "creds.json.enc"


class AuthStateStore:
    """File-backed credential store used as the creds.update hook."""

    def __init__(self, directory: str | Path, encryption_key: Optional[str] = None) -> None:
        """
        Initialize the store.

        Args:
            directory: Directory holding the credential file.
            encryption_key: Optional Fernet key for encryption at rest.
        """
        self.directory = Path(directory)
        self._fernet = Fernet(encryption_key.encode()) if encryption_key else None
        self.creds: dict[str, Any] = {}

    @property
    def path(self) -> Path:
        filename = ENCRYPTED_FILENAME if self._fernet else PLAIN_FILENAME
        return self.directory / filename

    def load(self) -> dict[str, Any]:
        """
        Load saved credentials.

        Returns:
            The credentials mapping, empty if none are saved or readable.
        """
        if not self.path.exists():
            logger.info(f"No saved session in {self.directory}, pairing will be required")
            self.creds = {}
            return self.creds

        data = self.path.read_bytes()
        if self._fernet:
            try:
                data = self._fernet.decrypt(data)
            except InvalidToken:
                logger.error(
                    f"Cannot decrypt {self.path} with AUTH_ENCRYPTION_KEY, "
                    "starting without a saved session"
                )
                self.creds = {}
                return self.creds

        try:
            self.creds = json.loads(data)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt credential file {self.path}: {e}")
            self.creds = {}
            return self.creds

        logger.info(f"Loaded saved session from {self.path}")
        return self.creds

    def save(self, update: dict[str, Any]) -> None:
        """Merge a creds.update payload and write it to disk."""
        self.creds.update(update or {})
        self.directory.mkdir(parents=True, exist_ok=True)

        data = json.dumps(self.creds).encode("utf-8")
        if self._fernet:
            data = self._fernet.encrypt(data)

        # Write to a temp file first so a crash never leaves half a file
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".creds-")
        try:
            with os.fdopen(fd, "wb") as tmp_file:
                tmp_file.write(data)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug(f"Saved credentials ({len(self.creds)} keys) to {self.path}")
