"""Database module for the public key registry"""
from .models import Base, PublicKey
from .connection import get_db, init_db, create_tables
from .repository import PublicKeyRepository, KeyAlreadyExistsError

__all__ = [
    'Base',
    'PublicKey',
    'get_db',
    'init_db',
    'create_tables',
    'PublicKeyRepository',
    'KeyAlreadyExistsError',
]
