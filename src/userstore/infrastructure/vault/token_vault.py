"""Token vault contract.

The vault owns sensitive values and their tokens; the store only ever
holds token references. All writes go through a single bulk reconcile call
so a vault failure can abort a user write before the primary table is
touched.
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

from userstore.core.exceptions import VaultError

ReconcileFunc = Callable[
    [dict[str, str], dict[str, str], list[str]], Awaitable[dict[str, str]]
]
ReadFunc = Callable[[list[str]], Awaitable[dict[str, str]]]


@runtime_checkable
class TokenVault(Protocol):
    """Bulk token operations consumed by the tokenization service."""

    async def reconcile(
        self,
        creates: dict[str, str],
        updates: dict[str, str],
        deletes: list[str],
    ) -> dict[str, str]:
        """Create, update and delete tokens in one call.

        Args:
            creates: Column name -> raw value for tokens to mint.
            updates: Existing token -> new raw value.
            deletes: Tokens to release.

        Returns:
            Column name -> token for every entry in creates.
        """
        ...


@runtime_checkable
class ReadableTokenVault(TokenVault, Protocol):
    """A vault that can also resolve tokens back to their values."""

    async def read(self, tokens: list[str]) -> dict[str, str]:
        """Return token -> raw value for the given tokens."""
        ...


class CallableTokenVault:
    """Adapts plain coroutine functions to the TokenVault contract.

    Example:
        async def tokens_bulk(creates, updates, deletes):
            return await vault_client.bulk(creates, updates, deletes)

        vault = CallableTokenVault(tokens_bulk)
    """

    def __init__(self, reconcile_func: ReconcileFunc, read_func: ReadFunc | None = None) -> None:
        self._reconcile = reconcile_func
        self._read = read_func

    async def reconcile(
        self,
        creates: dict[str, str],
        updates: dict[str, str],
        deletes: list[str],
    ) -> dict[str, str]:
        return await self._reconcile(creates, updates, deletes)

    async def read(self, tokens: list[str]) -> dict[str, str]:
        if self._read is None:
            raise VaultError("Token vault does not support reading tokens")
        return await self._read(tokens)
