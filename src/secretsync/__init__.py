"""
SecretSync -- copy encrypted vault secrets into a local vault.

Decrypt once, read everywhere. The vault stays encrypted and committed;
the local vault holds plaintext overrides for this machine only.
"""

import os

__version__ = "0.1.0"

SECRETSYNC_HOME = os.environ.get("SECRETSYNC_HOME", "~/.secretsync")
