"""Tokenization of sensitive user columns.

Before a user is written, every configured sensitive column is reconciled
against the token vault:

* a raw value in a column whose stored value is a token updates that token
  in place (the column keeps the same reference);
* a raw value in a column with no stored token mints a new token;
* a cleared column releases its stored token;
* a token reference stored in a column that is not a sensitive column any
  more is orphaned and released. Store-managed columns and the free-text
  memo are never scanned, whatever their values look like.

All vault operations for one write go out in a single bulk call. If that
call fails the user is left untouched and VaultError is raised, so nothing
reaches the primary table. If the vault call succeeds and the primary
write then fails, the vault changes are not rolled back; the repository
logs the orphaned tokens so they can be collected out of band.
"""

from dataclasses import dataclass, field

from userstore.core.config import RESERVED_COLUMNS, StoreOptions
from userstore.core.exceptions import VaultError
from userstore.core.logging import get_logger
from userstore.domain.entities.user import COLUMN_MEMO, User
from userstore.infrastructure.vault.token_vault import TokenVault

logger = get_logger(__name__)

# Columns that never hold a token unless configured as sensitive
PLAIN_COLUMNS = RESERVED_COLUMNS | {COLUMN_MEMO}


@dataclass
class TokenPlan:
    """Vault operations needed to persist one user.

    Attributes:
        creates: Column -> raw value for tokens to mint.
        updates: Token -> new raw value.
        deletes: Tokens to release.
        keep: Column -> existing token the column must point at after the write.
        clear: Columns to blank because their token was released.
    """

    creates: dict[str, str] = field(default_factory=dict)
    updates: dict[str, str] = field(default_factory=dict)
    deletes: list[str] = field(default_factory=list)
    keep: dict[str, str] = field(default_factory=dict)
    clear: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    @property
    def vault_write_count(self) -> int:
        return len(self.creates) + len(self.updates)


class TokenizationService:
    """Plans and applies token vault operations for sensitive columns."""

    def __init__(self, vault: TokenVault, options: StoreOptions) -> None:
        """Initialize the service.

        Args:
            vault: The token vault.
            options: Store options naming the sensitive columns and token prefix.
        """
        self.vault = vault
        self.options = options

    def partition(self, changes: dict[str, str]) -> tuple[dict[str, str], dict[str, str]]:
        """Split proposed column changes into tokenized and regular columns."""
        tokenized: dict[str, str] = {}
        regular: dict[str, str] = {}
        for column, value in changes.items():
            if self.options.is_tokenized(column):
                tokenized[column] = value
            else:
                regular[column] = value
        return tokenized, regular

    def proposed_values(self, user: User) -> dict[str, str]:
        """The user's current values for every sensitive column it carries."""
        tokenized, _ = self.partition(user.data())
        return tokenized

    def plan(self, user: User, proposed: dict[str, str]) -> TokenPlan:
        """Compute the vault operations for a proposed set of sensitive values.

        The stored value of a column is its value as last persisted; a value
        equal to it is unchanged and needs no vault call.

        Args:
            user: The user being written.
            proposed: Sensitive column -> proposed value.

        Returns:
            TokenPlan (may be empty).
        """
        plan = TokenPlan()

        for column, new_value in proposed.items():
            stored = user.get_original(column)

            if new_value == stored:
                continue

            if self.options.is_token(new_value):
                # Pointed at another token; the stored one is no longer referenced
                if self.options.is_token(stored):
                    plan.deletes.append(stored)
                continue

            if self.options.is_token(stored):
                if new_value:
                    plan.updates[stored] = new_value
                    plan.keep[column] = stored
                else:
                    plan.deletes.append(stored)
                    plan.clear.append(column)
            elif new_value:
                plan.creates[column] = new_value
            else:
                plan.clear.append(column)

        for column, value in user.data().items():
            if column in proposed or column in PLAIN_COLUMNS:
                continue
            # Only a reference this row actually stored is ours to release
            if value != user.get_original(column) or not self.options.is_token(value):
                continue
            plan.deletes.append(value)
            plan.clear.append(column)

        return plan

    async def apply(self, user: User, proposed: dict[str, str] | None = None) -> TokenPlan:
        """Reconcile sensitive columns with the vault and rewrite them to tokens.

        Args:
            user: The user about to be written. Mutated only if the vault call succeeds.
            proposed: Sensitive column -> proposed value. Defaults to the user's
                current values for all sensitive columns.

        Returns:
            The executed TokenPlan.

        Raises:
            VaultError: If the vault call fails or returns no token for a create.
        """
        if proposed is None:
            proposed = self.proposed_values(user)

        plan = self.plan(user, proposed)

        created_tokens: dict[str, str] = {}
        if not plan.is_empty():
            logger.debug(
                "Reconciling tokens",
                user_id=user.id,
                creates=len(plan.creates),
                updates=len(plan.updates),
                deletes=len(plan.deletes),
            )
            try:
                created_tokens = await self.vault.reconcile(
                    dict(plan.creates), dict(plan.updates), list(plan.deletes)
                )
            except Exception as e:
                logger.error(
                    "Token vault reconcile failed",
                    user_id=user.id,
                    error=str(e),
                )
                raise VaultError(f"Token vault reconcile failed: {e}") from e

            missing = [column for column in plan.creates if not created_tokens.get(column)]
            if missing:
                logger.error(
                    "Token vault returned no token for created columns",
                    user_id=user.id,
                    columns=missing,
                )
                raise VaultError(f"Token vault returned no token for columns: {missing}")

        for column in plan.creates:
            user.set(column, created_tokens[column])
        for column, token in plan.keep.items():
            user.set(column, token)
        for column in plan.clear:
            user.set(column, "")

        return plan

    async def untokenize(self, user: User) -> dict[str, str]:
        """Resolve the user's sensitive columns to their raw values.

        Columns that do not hold a token are returned as stored.

        Raises:
            VaultError: If the vault cannot read tokens or the read fails.
        """
        values = self.proposed_values(user)
        tokens = [value for value in values.values() if self.options.is_token(value)]
        if not tokens:
            return values

        read = getattr(self.vault, "read", None)
        if read is None:
            raise VaultError("Token vault does not support reading tokens")

        try:
            resolved = await read(tokens)
        except VaultError:
            raise
        except Exception as e:
            logger.error("Token vault read failed", user_id=user.id, error=str(e))
            raise VaultError(f"Token vault read failed: {e}") from e

        return {
            column: resolved.get(value, "") if self.options.is_token(value) else value
            for column, value in values.items()
        }
