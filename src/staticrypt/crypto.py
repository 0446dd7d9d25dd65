"""Core cryptographic functions for staticrypt.

Provides PBKDF2-SHA256 password hashing and AES-256-GCM encryption,
compatible with the WebCrypto-based engine in ``assets/lib/cryptoEngine.js``
for browser-side decryption.

Encoded message format (all hex, lowercase):
    signature (64) || iv (24) || ciphertext+tag
where signature is HMAC-SHA256 over ``iv || ciphertext`` keyed with the
hashed password.
"""

import os
import secrets
import string

from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# Cryptographic parameters (must match cryptoEngine.js)
ITERATIONS = 600000
SALT_LENGTH = 16  # 128 bits, 32 hex chars
IV_LENGTH = 12  # 96 bits (standard for GCM)
KEY_LENGTH = 32  # 256 bits
SIGNATURE_HEX_LENGTH = 64

SHARE_FRAGMENT = "#staticrypt_pwd="

_RANDOM_ALPHABET = string.ascii_letters + string.digits


class StaticryptError(Exception):
    """Base exception for staticrypt errors."""

    pass


def generate_random_salt() -> str:
    """Generate a random salt.

    Returns:
        32-character lowercase hex string.
    """
    return os.urandom(SALT_LENGTH).hex()


def generate_random_string(length: int) -> str:
    """Generate a random alphanumeric string, e.g. as a password suggestion."""
    return "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(length))


def hash_password(password: str, salt: str) -> str:
    """Derive the hashed password used as encryption key.

    Args:
        password: The user's password.
        salt: 32-character hex salt.

    Returns:
        64-character hex string (256-bit key).

    Raises:
        StaticryptError: If the salt is not valid hex.
    """
    try:
        salt_bytes = bytes.fromhex(salt)
    except ValueError as e:
        raise StaticryptError(f"Invalid hex string for salt: {e}") from e

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt_bytes,
        iterations=ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8")).hex()


def _key_from_hashed_password(hashed_password: str) -> bytes:
    try:
        key = bytes.fromhex(hashed_password)
    except ValueError as e:
        raise StaticryptError(f"Invalid hashed password: {e}") from e
    if len(key) != KEY_LENGTH:
        raise StaticryptError(
            f"Hashed password must be {KEY_LENGTH * 2} hex chars, got {len(key) * 2}"
        )
    return key


def encrypt(msg: str, hashed_password: str) -> str:
    """Encrypt a message with a hashed password.

    Returns:
        Hex string of ``iv || ciphertext`` (the GCM tag is appended to the
        ciphertext, as WebCrypto expects).
    """
    key = _key_from_hashed_password(hashed_password)
    iv = os.urandom(IV_LENGTH)
    ct = AESGCM(key).encrypt(iv, msg.encode("utf-8"), None)
    return iv.hex() + ct.hex()


def decrypt(encrypted: str, hashed_password: str) -> str:
    """Decrypt a message produced by encrypt().

    Raises:
        StaticryptError: If the key is wrong or the data was tampered with.
    """
    key = _key_from_hashed_password(hashed_password)
    try:
        iv = bytes.fromhex(encrypted[: IV_LENGTH * 2])
        ct = bytes.fromhex(encrypted[IV_LENGTH * 2 :])
    except ValueError as e:
        raise StaticryptError(f"Invalid encrypted message: {e}") from e

    try:
        plaintext = AESGCM(key).decrypt(iv, ct, None)
    except InvalidTag:
        raise StaticryptError("Decryption failed: wrong password or tampered data")
    return plaintext.decode("utf-8")


def _sign(hashed_password: str, message: str) -> hmac.HMAC:
    h = hmac.HMAC(_key_from_hashed_password(hashed_password), hashes.SHA256())
    h.update(message.encode("utf-8"))
    return h


def encode(msg: str, hashed_password: str) -> str:
    """Encrypt and sign a message for embedding in the artifact."""
    encrypted = encrypt(msg, hashed_password)
    signature = _sign(hashed_password, encrypted).finalize().hex()
    return signature + encrypted


def decode(signed_msg: str, hashed_password: str) -> str:
    """Verify and decrypt a message produced by encode().

    Raises:
        StaticryptError: On signature mismatch or decryption failure.
    """
    signature = signed_msg[:SIGNATURE_HEX_LENGTH]
    encrypted = signed_msg[SIGNATURE_HEX_LENGTH:]

    try:
        _sign(hashed_password, encrypted).verify(bytes.fromhex(signature))
    except (InvalidSignature, ValueError):
        raise StaticryptError("Signature mismatch")

    return decrypt(encrypted, hashed_password)


def share_link(url: str, hashed_password: str) -> str:
    """Build a link that auto-decrypts the page with the hashed password."""
    return url + SHARE_FRAGMENT + hashed_password
