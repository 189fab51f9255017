"""Token vault contract and adapters."""

from userstore.infrastructure.vault.token_vault import (
    CallableTokenVault,
    ReadableTokenVault,
    TokenVault,
)

__all__ = ["CallableTokenVault", "ReadableTokenVault", "TokenVault"]
