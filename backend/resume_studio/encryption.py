"""
Symmetric obfuscation for the stored AI API key.

The AES-GCM master key is kept as a JWK in the same key-value namespace as the
ciphertext, so this only keeps the key out of casual view of the settings
record; it is not a security boundary.
"""
import base64
import json
import logging
import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from sqlalchemy.orm import Session

from . import kv

logger = logging.getLogger(__name__)

IV_LENGTH = 12


class EncryptionError(Exception):
    pass


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _export_jwk(key: bytes) -> str:
    return json.dumps({
        "kty": "oct",
        "k": _b64url_encode(key),
        "alg": "A256GCM",
        "ext": True,
        "key_ops": ["encrypt", "decrypt"],
    })


def _import_jwk(key_data: str) -> bytes:
    jwk = json.loads(key_data)
    if not isinstance(jwk, dict) or jwk.get("kty") != "oct":
        raise ValueError("not a symmetric JWK")
    key = _b64url_decode(jwk["k"])
    if len(key) not in (16, 24, 32):
        raise ValueError(f"bad AES key length {len(key)}")
    return key


def get_master_key(db: Session) -> bytes:
    """Return the stored master key, generating and storing one on first use."""
    key_data = kv.get_item(db, kv.MASTER_KEY)
    if not key_data:
        key = AESGCM.generate_key(bit_length=256)
        kv.set_item(db, kv.MASTER_KEY, _export_jwk(key))
        return key
    try:
        return _import_jwk(key_data)
    except (ValueError, KeyError, TypeError):
        # Regenerating invalidates anything encrypted with the old key
        logger.error("Encryption key corrupted, regenerating...")
        kv.remove_item(db, kv.MASTER_KEY)
        return get_master_key(db)


def encrypt_data(db: Session, plain_text: str) -> str:
    """Encrypt to the JSON package {"iv": [...], "data": [...]}."""
    if not plain_text:
        return ""
    try:
        key = get_master_key(db)
        iv = os.urandom(IV_LENGTH)
        encrypted = AESGCM(key).encrypt(iv, plain_text.encode("utf-8"), None)
        return json.dumps({"iv": list(iv), "data": list(encrypted)})
    except Exception as e:
        logger.error(f"Encryption failed: {e}")
        raise EncryptionError("Failed to encrypt data") from e


def _present(value) -> bool:
    """False only for null, false, 0 and "". Empty arrays count as present."""
    return value is not None and value is not False and value != 0 and value != ""


def decrypt_data(db: Session, cipher_text: str) -> str:
    """Decrypt a package written by encrypt_data.

    Values that are not such a package (legacy plaintext keys) are returned
    unchanged. A package that fails to decrypt yields "".
    """
    if not cipher_text:
        return ""
    try:
        parsed = json.loads(cipher_text)
    except ValueError:
        return cipher_text
    if parsed is None:
        return ""
    if not isinstance(parsed, dict) or not _present(parsed.get("iv")) or not _present(parsed.get("data")):
        return cipher_text

    try:
        key = get_master_key(db)
        iv = bytes(parsed["iv"])
        data = bytes(parsed["data"])
        return AESGCM(key).decrypt(iv, data, None).decode("utf-8")
    except Exception as e:
        logger.error(f"Decryption failed: {e}")
        return ""
