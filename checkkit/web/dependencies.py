"""Shared FastAPI dependencies."""

from __future__ import annotations

from checkkit.services.encryption_service import EncryptionService, get_encryption_service


def get_encryption() -> EncryptionService:
    # 日本語: 端末鍵のサービスを供給 / English: Provide the device-key encryption service
    return get_encryption_service()
