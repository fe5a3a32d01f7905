import os
from functools import lru_cache
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken


class EncryptionError(Exception):
    pass


def _load_key() -> bytes:
    key = os.environ.get('ENCRYPTION_KEY')
    if not key:
        # ephemeral key; secrets stored by a previous process become unreadable
        if os.environ.get('DEV_ALLOW_WEAK', 'false').lower() in ('1', 'true', 'on'):
            return Fernet.generate_key()
        raise RuntimeError('ENCRYPTION_KEY environment variable is required to store API keys')
    if key == 'GENERATE':
        generated = Fernet.generate_key()
        raise RuntimeError(f"Generate and set ENCRYPTION_KEY (example): {generated.decode()}")
    return key.encode('utf-8')


@lru_cache(maxsize=1)
def _cipher() -> Fernet:
    return Fernet(_load_key())


def encrypt_secret(plaintext: Optional[str]) -> str:
    """Encrypt an API key for storage; empty input stays empty."""
    if not plaintext:
        return ''
    return _cipher().encrypt(plaintext.encode('utf-8')).decode('utf-8')


def decrypt_secret(token: Optional[str]) -> str:
    if not token:
        return ''
    try:
        return _cipher().decrypt(token.encode('utf-8'), ttl=None).decode('utf-8')
    except InvalidToken:
        raise EncryptionError('Stored API key could not be decrypted (InvalidToken)')
    except Exception as e:
        raise EncryptionError(f'Stored API key could not be decrypted: {e}')
