"""Security helpers: key derivation, envelopes and master-password gating.

This package provides:
- PBKDF2-SHA256 key derivation from the master password
- AES-256-GCM envelopes (salt || nonce || ciphertext+tag) for single secrets
- the canary-based master password gate and the session it opens
- per-record encryption bound to an unlocked session
"""

from .kdf import derive_key, generate_salt
from .envelope import encrypt, decrypt
from .gate import GateState, MasterPasswordGate
from .session import VaultSession
from .service import CredentialEncryptionService
from .generator import generate_password

__all__ = [
    "derive_key",
    "generate_salt",
    "encrypt",
    "decrypt",
    "GateState",
    "MasterPasswordGate",
    "VaultSession",
    "CredentialEncryptionService",
    "generate_password",
]
