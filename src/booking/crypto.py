"""Passphrase AES in the OpenSSL "Salted__" format.

This is the format produced by ``CryptoJS.AES.encrypt(text, passphrase)`` in
the website bundle: base64("Salted__" + 8-byte salt + AES-256-CBC ciphertext),
with key and IV derived from the passphrase by EVP_BytesToKey (MD5, one
round). The passphrase ships inside the client, so this hides the payload from
casual inspection only.
"""

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from src.booking.errors import DecodeError

SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16
BLOCK_SIZE = 16


def derive_key_iv(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration."""
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE:KEY_SIZE + IV_SIZE]


def encrypt(plaintext: str, passphrase: str) -> str:
    salt = os.urandom(SALT_SIZE)
    key, iv = derive_key_iv(passphrase.encode("utf-8"), salt)

    padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    return base64.b64encode(SALT_HEADER + salt + ciphertext).decode("ascii")


def decrypt(token: str, passphrase: str) -> str:
    """Decrypt a "Salted__" token back to text.

    Raises:
        DecodeError: token is not valid base64, lacks the salt header,
            has a bad length or padding, or does not decode as UTF-8
    """
    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Encrypted payload is not valid base64") from e

    header_size = len(SALT_HEADER) + SALT_SIZE
    if not raw.startswith(SALT_HEADER) or len(raw) <= header_size:
        raise DecodeError("Encrypted payload has no salt header")

    salt = raw[len(SALT_HEADER):header_size]
    ciphertext = raw[header_size:]
    if len(ciphertext) % BLOCK_SIZE:
        raise DecodeError("Encrypted payload has a truncated block")

    key, iv = derive_key_iv(passphrase.encode("utf-8"), salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    try:
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except ValueError as e:
        raise DecodeError("Encrypted payload could not be decrypted") from e
