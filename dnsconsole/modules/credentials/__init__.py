"""
Credentials Module - Black Box Interface

Purpose: Durable custody of Cloudflare account API tokens
Interface: add(), remove(), get(), list()
Hidden: File format, atomic write strategy, locking

Tokens are write-only from the outside: list() never returns them.
"""

from .store import CredentialRecord, CredentialStore, validate_account_id

__all__ = ["CredentialRecord", "CredentialStore", "validate_account_id"]
