# tests/conftest.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from jwt_auth import AuthService, MemoryTokenStorageManager, PyJWTTokenCodec


@dataclass(frozen=True)
class KeyFiles:
    private_path: Path
    public_path: Path
    private_pem: bytes
    public_pem: bytes


def _write_keypair(directory: Path) -> KeyFiles:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    private_path = directory / "server.pem"
    public_path = directory / "server.pub"
    private_path.write_bytes(private_pem)
    public_path.write_bytes(public_pem)
    return KeyFiles(private_path, public_path, private_pem, public_pem)


@pytest.fixture(scope="session")
def keys(tmp_path_factory) -> KeyFiles:
    """RSA keypair written to disk once per test session."""
    return _write_keypair(tmp_path_factory.mktemp("keys"))


@pytest.fixture(scope="session")
def other_keys(tmp_path_factory) -> KeyFiles:
    """A second, unrelated keypair."""
    return _write_keypair(tmp_path_factory.mktemp("other-keys"))


@pytest.fixture
def storage() -> MemoryTokenStorageManager:
    return MemoryTokenStorageManager()


@pytest_asyncio.fixture
async def service(keys, storage) -> AuthService:
    """AuthService with both keys loaded and an in-memory used-token store."""
    svc = AuthService(codec=PyJWTTokenCodec(), storage=storage)
    await svc.load_keys(keys.private_path, keys.public_path)
    return svc


@pytest.fixture
def payload() -> dict:
    return {"userID": 34, "admin": True}
