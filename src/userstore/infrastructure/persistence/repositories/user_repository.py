"""User repository: persistence operations for user records.

Uses raw SQL built by the query compiler, since the table name and the set
of sensitive columns are configured per store rather than mapped to an ORM
model. Every write touches only changed columns, and sensitive columns are
run through the tokenization service before anything reaches the table.
"""

from userstore.core.clock import now_string
from userstore.core.config import StoreOptions
from userstore.core.exceptions import (
    InvalidArgumentError,
    QueryError,
    StorageUnavailableError,
)
from userstore.core.logging import get_logger
from userstore.core.query import QueryCompiler, Statement
from userstore.domain.entities.user import COLUMN_EMAIL, COLUMN_ID, COLUMN_UPDATED_AT, User
from userstore.domain.entities.user_query import UserQuery
from userstore.domain.services.tokenization_service import TokenizationService, TokenPlan
from userstore.infrastructure.persistence.backend import StorageBackend
from userstore.infrastructure.persistence.table_builder import UserTableBuilder
from userstore.infrastructure.vault.token_vault import TokenVault

logger = get_logger(__name__)


class UserRepository:
    """Repository for user database operations.

    Not-found is reported as None (lookups) or False (by-id soft delete),
    never as an exception.
    """

    def __init__(
        self,
        backend: StorageBackend | None,
        options: StoreOptions | None = None,
        vault: TokenVault | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            backend: Storage backend. May be None; operations that need it
                raise StorageUnavailableError.
            options: Store options. Defaults to a "users" table with no
                sensitive columns.
            vault: Token vault. Required for writes when sensitive columns are
                configured; reads and provisioning work without one.
        """
        self.backend = backend
        self.options = options or StoreOptions()
        self.tokenizer: TokenizationService | None = None

        if self.options.tokenized_columns and vault is not None:
            self.tokenizer = TokenizationService(vault, self.options)

    @classmethod
    async def open(
        cls,
        backend: StorageBackend | None,
        options: StoreOptions | None = None,
        vault: TokenVault | None = None,
    ) -> "UserRepository":
        """Create a repository and run auto-migration if it is enabled."""
        repository = cls(backend, options, vault)
        if repository.options.automigrate_enabled:
            await repository.auto_migrate()
        return repository

    @property
    def table_name(self) -> str:
        return self.options.user_table_name

    # Provisioning -------------------------------------------------------

    async def auto_migrate(self) -> None:
        """Create the user table and its indexes if they do not exist."""
        backend = self._require_backend()

        statements = [
            UserTableBuilder.build_create_table_ddl(
                self.table_name, self.options.tokenized_columns
            ),
            *UserTableBuilder.build_index_ddl(self.table_name),
        ]
        for sql in statements:
            self._log_sql(sql)
            await backend.execute(sql, {})

        logger.info("User table ensured", table_name=self.table_name)

    # Reads --------------------------------------------------------------

    async def count(self, query: UserQuery | None = None) -> int:
        """Count users matching the query.

        Limit, offset and ordering on the query are ignored.

        Raises:
            InvalidArgumentError: If the query filters on a tokenized email column.
            StorageUnavailableError: If no backend is configured.
            QueryError: If the backend returns no rows or a non-numeric count.
        """
        backend = self._require_backend()
        query = (query or UserQuery()).set_count_only(True)
        self._check_filters(query)

        compiler = self._compiler()
        statement = compiler.render(compiler.compile(query, self.table_name))
        self._log_sql(statement.sql)

        rows = await backend.query(statement.sql, statement.params)
        if not rows:
            raise QueryError("Count query returned no rows")

        value = rows[0].get("count", "")
        try:
            return int(value)
        except ValueError as e:
            raise QueryError(f"Count query returned a non-numeric value: {value!r}") from e

    async def list_users(self, query: UserQuery | None = None) -> list[User]:
        """List users matching the query.

        Returns:
            Clean User records; an empty list when nothing matches.
        """
        backend = self._require_backend()
        query = query or UserQuery()
        self._check_filters(query)

        compiler = self._compiler()
        statement = compiler.render(compiler.compile(query, self.table_name))
        self._log_sql(statement.sql)

        rows = await backend.query(statement.sql, statement.params)
        return [User.from_existing_data(row) for row in rows]

    async def find_by_id(self, id: str) -> User | None:
        """Find a user by id.

        Returns:
            The user, or None if there is no such user.

        Raises:
            InvalidArgumentError: If id is empty.
        """
        if not id:
            raise InvalidArgumentError("user id is empty")

        users = await self.list_users(UserQuery().set_id(id).set_limit(1))
        return users[0] if users else None

    async def find_by_email(self, email: str) -> User | None:
        """Find a user by the value stored in the email column.

        Raises:
            InvalidArgumentError: If email is empty, or the email column is
                tokenized (stored values are tokens, not addresses).
        """
        if not email:
            raise InvalidArgumentError("user email is empty")

        users = await self.list_users(UserQuery().set_email(email).set_limit(1))
        return users[0] if users else None

    async def find_by_email_or_create(self, email: str, create_status: str) -> User:
        """Find a user by email, creating one with the given status if absent.

        This is a read followed by a write with no atomicity: concurrent
        callers may both create a user for the same email unless the table
        has a unique constraint on email.
        """
        existing = await self.find_by_email(email)
        if existing is not None:
            return existing

        user = User.new().set_email(email).set_status(create_status)
        await self.create(user)
        return user

    # Writes -------------------------------------------------------------

    async def create(self, user: User | None) -> None:
        """Insert a user with all of its current columns.

        Raises:
            InvalidArgumentError: If user is None.
            StorageUnavailableError: If no backend is configured.
            QueryError: If the insert statement cannot be built.
            VaultError: If tokenizing sensitive columns fails (nothing is written).
        """
        if user is None:
            raise InvalidArgumentError("user is required")

        backend = self._require_backend()

        now = now_string()
        user.set_created_at(now)
        user.set_updated_at(now)

        plan = await self._tokenize(user)
        statement = self._compiler().insert(self.table_name, user.data())

        await self._execute_write(backend, statement, user, plan)
        user.mark_as_not_dirty()

        logger.info("User created", user_id=user.id, table_name=self.table_name)

    async def update(self, user: User | None) -> None:
        """Write the user's changed columns.

        The id column is never updated. When nothing has changed no
        statement is issued.

        Raises:
            InvalidArgumentError: If user is None.
            StorageUnavailableError: If no backend is configured.
            VaultError: If tokenizing sensitive columns fails (nothing is written).
        """
        if user is None:
            raise InvalidArgumentError("user is required")

        backend = self._require_backend()

        plan = await self._tokenize(user)

        changed = user.data_changed()
        changed.pop(COLUMN_ID, None)
        # A token updated in place still counts as an edit
        if not changed and not (plan and plan.updates):
            return

        user.set_updated_at(now_string())
        changed = user.data_changed()
        changed.pop(COLUMN_ID, None)
        changed[COLUMN_UPDATED_AT] = user.updated_at

        statement = self._compiler().update(self.table_name, changed, user.id)

        await self._execute_write(backend, statement, user, plan)
        user.mark_as_not_dirty()

        logger.info(
            "User updated",
            user_id=user.id,
            columns=sorted(changed),
            table_name=self.table_name,
        )

    async def soft_delete(self, user: User | None) -> None:
        """Mark a user as deleted by stamping soft_deleted_at."""
        if user is None:
            raise InvalidArgumentError("user is required")

        user.set_soft_deleted_at(now_string())
        await self.update(user)

        logger.info("User soft deleted", user_id=user.id)

    async def soft_delete_by_id(self, id: str) -> bool:
        """Soft delete a user by id.

        Returns:
            True if the user was found and soft deleted, False if not found.
        """
        user = await self.find_by_id(id)
        if user is None:
            return False

        await self.soft_delete(user)
        return True

    async def delete(self, user: User | None) -> None:
        """Permanently delete a user."""
        if user is None:
            raise InvalidArgumentError("user is required")

        await self.delete_by_id(user.id)

    async def delete_by_id(self, id: str) -> None:
        """Permanently delete a user by id.

        Tokens referenced by the deleted row are not released.

        Raises:
            InvalidArgumentError: If id is empty.
        """
        if not id:
            raise InvalidArgumentError("user id is empty")

        backend = self._require_backend()

        statement = self._compiler().delete(self.table_name, id)
        self._log_sql(statement.sql)
        await backend.execute(statement.sql, statement.params)

        logger.info("User deleted", user_id=id, table_name=self.table_name)

    # Tokens -------------------------------------------------------------

    async def untokenize(self, user: User) -> dict[str, str]:
        """Resolve a user's sensitive columns to raw values via the vault."""
        if self.tokenizer is None:
            return {}
        return await self.tokenizer.untokenize(user)

    # Helpers ------------------------------------------------------------

    def _require_backend(self) -> StorageBackend:
        if self.backend is None:
            raise StorageUnavailableError("No database backend configured")
        return self.backend

    def _check_filters(self, query: UserQuery) -> None:
        if query.email and self.options.is_tokenized(COLUMN_EMAIL):
            raise InvalidArgumentError(
                "Cannot filter by email: the email column is tokenized"
            )

    def _compiler(self) -> QueryCompiler:
        dialect = getattr(self.backend, "dialect", "sqlite")
        return QueryCompiler(dialect if isinstance(dialect, str) else "sqlite")

    async def _tokenize(self, user: User) -> TokenPlan | None:
        if not self.options.tokenized_columns:
            return None
        if self.tokenizer is None:
            raise InvalidArgumentError(
                "A token vault is required to write tokenized columns"
            )
        return await self.tokenizer.apply(user)

    async def _execute_write(
        self,
        backend: StorageBackend,
        statement: Statement,
        user: User,
        plan: TokenPlan | None,
    ) -> None:
        self._log_sql(statement.sql)
        try:
            await backend.execute(statement.sql, statement.params)
        except Exception as e:
            if plan is not None and plan.vault_write_count:
                logger.warning(
                    "User write failed after token vault changes; tokens left orphaned",
                    user_id=user.id,
                    created_tokens=len(plan.creates),
                    updated_tokens=len(plan.updates),
                    error=str(e),
                )
            raise

    def _log_sql(self, sql: str) -> None:
        if self.options.debug_enabled:
            logger.debug("Executing SQL", sql=sql)
