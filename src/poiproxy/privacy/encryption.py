"""
Encryption providers for catalog records at rest.

The admin catalog can store each POI record either as plaintext JSON or as a Fernet token.
Which one is active is always visible (`protects_data_at_rest`) in the public settings
endpoint and the admin responses, so a deployment never implies protection it lacks.

Fernet (from `cryptography`) is AES-128-CBC with an HMAC-SHA256 tag; keys are 32 url-safe
base64-encoded bytes (`generate_key()`).
"""

from __future__ import annotations

from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken

from poiproxy.config.settings import EncryptionSettings


class EncryptionError(Exception):
    """A record could not be decrypted (wrong key or tampered data)."""


class EncryptionProvider(Protocol):
    name: str
    protects_data_at_rest: bool

    def encrypt(self, data: bytes) -> bytes: ...

    def decrypt(self, token: bytes) -> bytes: ...


class PlaintextProvider:
    """No-op provider: records are stored exactly as given."""

    name = "none"
    protects_data_at_rest = False

    def encrypt(self, data: bytes) -> bytes:
        return data

    def decrypt(self, token: bytes) -> bytes:
        return token


class FernetProvider:
    """Symmetric authenticated encryption with a single Fernet key."""

    name = "fernet"
    protects_data_at_rest = True

    def __init__(self, key: str | bytes):
        if not key:
            raise ValueError("Fernet encryption requires a key (set POIPROXY_ENCRYPTION_KEY).")
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ValueError("Invalid Fernet key; expected 32 url-safe base64-encoded bytes.") from e

    def encrypt(self, data: bytes) -> bytes:
        return self._fernet.encrypt(data)

    def decrypt(self, token: bytes) -> bytes:
        try:
            return self._fernet.decrypt(token)
        except InvalidToken as e:
            raise EncryptionError("Record could not be decrypted with the configured key.") from e


def generate_key() -> str:
    """Return a new Fernet key as text."""
    return Fernet.generate_key().decode("ascii")


def build_encryption_provider(settings: EncryptionSettings) -> EncryptionProvider:
    if settings.provider == "fernet":
        return FernetProvider(settings.key or "")
    return PlaintextProvider()


def describe_provider(provider: EncryptionProvider) -> dict:
    """Public, secret-free description of the active provider."""
    return {"provider": provider.name, "protects_data_at_rest": bool(provider.protects_data_at_rest)}
