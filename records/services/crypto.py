import hashlib
from functools import lru_cache

from Crypto.Cipher import AES
from django.conf import settings


@lru_cache(maxsize=4)
def _key_for(passphrase: str) -> bytes:
    return hashlib.sha256(passphrase.encode('utf-8')).digest()


class FieldCipher:
    """AES-256-ECB with PKCS#7 padding, hex encoded.

    ECB is deterministic: the same plaintext always yields the same
    ciphertext, which keeps exact-match lookups on encrypted columns
    (document numbers) possible.
    """

    def __init__(self, passphrase: str):
        self.key = _key_for(passphrase)

    @staticmethod
    def _pad(raw: bytes) -> bytes:
        pad = AES.block_size - len(raw) % AES.block_size
        return raw + bytes([pad]) * pad

    @staticmethod
    def _unpad(raw: bytes) -> bytes:
        pad = raw[-1]
        if pad < 1 or pad > AES.block_size or raw[-pad:] != bytes([pad]) * pad:
            raise ValueError('bad padding')
        return raw[:-pad]

    def encrypt(self, text: str) -> str:
        cipher = AES.new(self.key, AES.MODE_ECB)
        return cipher.encrypt(self._pad(text.encode('utf-8'))).hex()

    def decrypt(self, value: str) -> str:
        cipher = AES.new(self.key, AES.MODE_ECB)
        raw = cipher.decrypt(bytes.fromhex(value))
        return self._unpad(raw).decode('utf-8')


def get_cipher() -> FieldCipher:
    return FieldCipher(settings.ENCRYPTION_KEY)


def encrypt_value(text):
    if text is None or text == '':
        return text
    return get_cipher().encrypt(str(text))


def decrypt_value(value):
    if value is None or value == '':
        return value
    return get_cipher().decrypt(value)
