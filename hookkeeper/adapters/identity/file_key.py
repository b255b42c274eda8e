"""File-backed instance identity adapter.

Implements IdentityPort with an RSA key pair stored as PEM on disk. The key
is generated on first start and reused afterwards, so the fingerprint stays
stable across restarts of the same installation.
"""

import logging
import os
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from hookkeeper.core.ports import IdentityPort

logger = logging.getLogger(__name__)

KEY_SIZE = 2048


class FileInstanceIdentity(IdentityPort):
    """RSA instance identity persisted as an unencrypted PKCS#8 PEM file."""

    def __init__(self, key_path: str):
        """Initialize the identity.

        The key is loaded (or generated) lazily on first use.

        Args:
            key_path: Path of the PEM private key file.
        """
        self.key_path = Path(key_path).expanduser()
        self._private_key: rsa.RSAPrivateKey | None = None
        self._public_der: bytes | None = None

    def _load_or_create(self) -> rsa.RSAPrivateKey:
        if self.key_path.exists():
            key = serialization.load_pem_private_key(
                self.key_path.read_bytes(), password=None
            )
            if not isinstance(key, rsa.RSAPrivateKey):
                raise ValueError(f"{self.key_path} does not hold an RSA private key")
            logger.info(f"Loaded instance identity from {self.key_path}")
            return key

        key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)
        pem = key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        # Write with restrictive permissions
        fd = os.open(self.key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(pem)
        logger.info(f"Generated new instance identity at {self.key_path}")
        return key

    def public_key(self) -> bytes:
        """Return the DER-encoded SubjectPublicKeyInfo of the instance key."""
        if self._public_der is None:
            if self._private_key is None:
                self._private_key = self._load_or_create()
            self._public_der = self._private_key.public_key().public_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PublicFormat.SubjectPublicKeyInfo,
            )
        return self._public_der
