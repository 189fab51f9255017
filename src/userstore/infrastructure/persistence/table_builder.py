"""DDL for the user table.

Timestamps are stored as fixed-width UTC strings so that predicates bound
as strings compare correctly on every backend.
"""

from userstore.core.query import quote_identifier
from userstore.domain.entities.user import (
    COLUMN_CREATED_AT,
    COLUMN_EMAIL,
    COLUMN_FIRST_NAME,
    COLUMN_ID,
    COLUMN_LAST_NAME,
    COLUMN_MEMO,
    COLUMN_SOFT_DELETED_AT,
    COLUMN_STATUS,
    COLUMN_UPDATED_AT,
)

USER_COLUMN_DEFS = [
    (COLUMN_ID, "VARCHAR(40) PRIMARY KEY NOT NULL"),
    (COLUMN_STATUS, "VARCHAR(40) NOT NULL"),
    (COLUMN_FIRST_NAME, "VARCHAR(255) NOT NULL DEFAULT ''"),
    (COLUMN_LAST_NAME, "VARCHAR(255) NOT NULL DEFAULT ''"),
    (COLUMN_EMAIL, "VARCHAR(255) NOT NULL DEFAULT ''"),
    (COLUMN_MEMO, "TEXT NOT NULL DEFAULT ''"),
]

TIMESTAMP_COLUMN_DEFS = [
    (COLUMN_CREATED_AT, "VARCHAR(19) NOT NULL"),
    (COLUMN_UPDATED_AT, "VARCHAR(19) NOT NULL"),
    (COLUMN_SOFT_DELETED_AT, "VARCHAR(19) NOT NULL"),
]

INDEXED_COLUMNS = (COLUMN_STATUS, COLUMN_EMAIL, COLUMN_CREATED_AT, COLUMN_SOFT_DELETED_AT)


class UserTableBuilder:
    """Builds idempotent DDL for a user table."""

    @classmethod
    def build_create_table_ddl(
        cls, table_name: str, tokenized_columns: tuple[str, ...] = ()
    ) -> str:
        """Build CREATE TABLE IF NOT EXISTS for the user table.

        Tokenized columns that are not part of the base layout are added as
        extra text columns.

        Args:
            table_name: The table name.
            tokenized_columns: Configured sensitive columns.

        Returns:
            The DDL statement.
        """
        base_names = {name for name, _ in USER_COLUMN_DEFS}
        extra_defs = [
            (column, "TEXT NOT NULL DEFAULT ''")
            for column in tokenized_columns
            if column not in base_names
        ]

        column_defs = [
            f"{quote_identifier(name)} {sql_type}"
            for name, sql_type in USER_COLUMN_DEFS + extra_defs + TIMESTAMP_COLUMN_DEFS
        ]

        columns_sql = ",\n    ".join(column_defs)
        return f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} (\n    {columns_sql}\n)"

    @classmethod
    def build_index_ddl(cls, table_name: str) -> list[str]:
        """Build CREATE INDEX IF NOT EXISTS statements for filterable columns."""
        return [
            f"CREATE INDEX IF NOT EXISTS {quote_identifier(f'idx_{table_name}_{column}')} "
            f"ON {quote_identifier(table_name)} ({quote_identifier(column)})"
            for column in INDEXED_COLUMNS
        ]
