import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from userstore.core.config import Settings, StoreOptions, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    settings = Settings(_env_file=None)

    assert settings.environment == "development"
    assert settings.user_table_name == "users"
    assert settings.tokenized_columns == []
    assert settings.token_prefix == "tk_"
    assert settings.automigrate_enabled is False
    assert settings.is_development is True


def test_settings_env_override():
    """Test that environment variables override defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {
        "USERSTORE_ENVIRONMENT": "production",
        "USERSTORE_USER_TABLE_NAME": "members",
        "USERSTORE_AUTOMIGRATE_ENABLED": "true",
    }):
        settings = Settings(_env_file=None)

        assert settings.environment == "production"
        assert settings.user_table_name == "members"
        assert settings.automigrate_enabled is True
        assert settings.is_development is False


def test_tokenized_columns_parsing():
    """Test tokenized columns parsing from a comma-separated string."""
    with patch.dict(os.environ, {"USERSTORE_TOKENIZED_COLUMNS": "email, first_name,,last_name"}):
        settings = Settings(_env_file=None)

    assert settings.tokenized_columns == ["email", "first_name", "last_name"]


def test_store_options_from_settings():
    settings = Settings(
        _env_file=None,
        user_table_name="members",
        tokenized_columns=["email"],
        token_prefix="tok_",
        debug_sql=True,
    )

    options = StoreOptions.from_settings(settings)

    assert options.user_table_name == "members"
    assert options.tokenized_columns == ("email",)
    assert options.token_prefix == "tok_"
    assert options.debug_enabled is True


def test_store_options_are_frozen():
    options = StoreOptions()

    with pytest.raises(ValidationError):
        options.user_table_name = "other"  # type: ignore[misc]


def test_store_options_deduplicate_columns():
    options = StoreOptions(tokenized_columns="email,email,first_name")

    assert options.tokenized_columns == ("email", "first_name")


@pytest.mark.parametrize("table_name", ["", "users; DROP TABLE x", "1users"])
def test_store_options_reject_bad_table_names(table_name):
    with pytest.raises(ValidationError):
        StoreOptions(user_table_name=table_name)


@pytest.mark.parametrize("column", ["id", "status", "created_at", "soft_deleted_at", "bad-name"])
def test_store_options_reject_bad_tokenized_columns(column):
    with pytest.raises(ValidationError):
        StoreOptions(tokenized_columns=(column,))


def test_store_options_reject_empty_prefix():
    with pytest.raises(ValidationError):
        StoreOptions(token_prefix="")


def test_token_helpers():
    options = StoreOptions(tokenized_columns=("email",))

    assert options.is_tokenized("email") is True
    assert options.is_tokenized("memo") is False
    assert options.is_token("tk_abc") is True
    assert options.is_token("a@x.com") is False
    assert options.is_token("") is False
