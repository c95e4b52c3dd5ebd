"""
Secret store implementations.

EncryptedVault: Fernet-encrypted directory, safe to commit.
DotenvVault: plaintext local overrides in a dotenv file.
MemoryVault: in-process dict, for embedding and tests.
"""

from .base import SecretStore, validate_name
from .dotenv_vault import DotenvVault
from .encrypted import EncryptedVault
from .memory import MemoryVault

__all__ = [
    "DotenvVault",
    "EncryptedVault",
    "MemoryVault",
    "SecretStore",
    "validate_name",
]
