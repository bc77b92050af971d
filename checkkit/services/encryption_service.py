"""Symmetric encryption with a per-device key.

The key is a Fernet key stored in a file next to the database (not inside it),
so clearing routines and instances keeps it. It is generated on first use and
published with a hard link, which fails if another caller already published
one; every process on the device therefore ends up with the same key.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken

from checkkit.core.config import KEY_PATH
from checkkit.core.errors import DecryptionError

logger = logging.getLogger(__name__)


class EncryptionService:
    def __init__(self, key_path: Path | str):
        self.key_path = Path(key_path)
        self._lock = threading.Lock()
        self._key: str | None = None
        self._fernet: Fernet | None = None

    def get_key(self) -> str:
        """Return the device key, creating and persisting it on first use."""
        with self._lock:
            if self._key is None:
                key = self._load_or_create_key()
                try:
                    self._fernet = Fernet(key.encode("ascii"))
                except (ValueError, UnicodeEncodeError) as exc:
                    raise DecryptionError(f"stored key at {self.key_path} is not a valid key") from exc
                self._key = key
            return self._key

    def _read_key(self) -> str:
        return self.key_path.read_text(encoding="ascii").strip()

    def _load_or_create_key(self) -> str:
        if self.key_path.exists():
            return self._read_key()

        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.key_path.parent), prefix=".checkkit-key-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(Fernet.generate_key())
            os.chmod(tmp_name, 0o600)
            try:
                # 日本語: link は既存ファイルがあると失敗する / English: link fails when a key was already published
                os.link(tmp_name, self.key_path)
                logger.info("Generated new device encryption key at %s", self.key_path)
            except FileExistsError:
                logger.debug("Device key created concurrently; using the existing one")
        finally:
            os.unlink(tmp_name)
        return self._read_key()

    def _cipher(self) -> Fernet:
        self.get_key()
        return self._fernet

    def encrypt(self, plaintext: str) -> str:
        return self._cipher().encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        if not isinstance(ciphertext, str) or not ciphertext.strip():
            raise DecryptionError("cannot decrypt: empty ciphertext")
        try:
            raw = self._cipher().decrypt(ciphertext.strip().encode("utf-8"))
            return raw.decode("utf-8")
        except (InvalidToken, UnicodeDecodeError, ValueError, TypeError) as exc:
            raise DecryptionError("cannot decrypt: wrong key or corrupted data") from exc

    def encrypt_object(self, obj: Any) -> str:
        return self.encrypt(json.dumps(obj, ensure_ascii=False, separators=(",", ":")))

    def decrypt_object(self, ciphertext: str) -> Any:
        plaintext = self.decrypt(ciphertext)
        try:
            return json.loads(plaintext)
        except json.JSONDecodeError as exc:
            raise DecryptionError("cannot decrypt: payload is not valid JSON") from exc


_services: Dict[str, EncryptionService] = {}
_services_lock = threading.Lock()


def get_encryption_service(key_path: Path | str | None = None) -> EncryptionService:
    """Process-wide service for the configured key path."""
    resolved = str(Path(key_path or os.getenv("CHECKKIT_KEY_PATH", str(KEY_PATH))).resolve())
    with _services_lock:
        service = _services.get(resolved)
        if service is None:
            service = EncryptionService(resolved)
            _services[resolved] = service
        return service


__all__ = ["EncryptionService", "get_encryption_service"]
