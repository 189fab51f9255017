"""User update service for business logic.

Applies an admin edit to a stored user: validates the submitted values
and persists them through the repository, which swaps sensitive values
for vault tokens before the write.
"""

from typing import Any

from pydantic import ValidationError

from userstore.core.exceptions import InvalidArgumentError
from userstore.core.logging import get_logger
from userstore.domain.entities.user import User
from userstore.infrastructure.persistence.repositories import UserRepository
from userstore.schemas.users_schemas import UserDetailsResponse, UserUpdateRequest

logger = get_logger(__name__)


class UserUpdateService:
    """Service for editing users."""

    def __init__(self, repository: UserRepository) -> None:
        """Initialize the service.

        Args:
            repository: The user repository to load and persist users with.
        """
        self.repository = repository

    async def update_user(
        self, user_id: str, changes: UserUpdateRequest | dict[str, Any]
    ) -> User | None:
        """Update a user's editable columns.

        Args:
            user_id: ID of the user to update.
            changes: Submitted values, validated against UserUpdateRequest.

        Returns:
            The updated user, or None if no user has this id.

        Raises:
            InvalidArgumentError: If user_id is empty or the values do not validate.
            VaultError: If tokenizing sensitive columns fails (nothing is written).
        """
        request = self._validate(changes)

        user = await self.repository.find_by_id(user_id)
        if user is None:
            logger.info("User to update not found", user_id=user_id)
            return None

        values = request.model_dump()
        for column, value in values.items():
            user.set(column, value)

        await self.repository.update(user)

        logger.info("User edited", user_id=user_id, columns=sorted(values))
        return user

    async def get_user_details(self, user_id: str) -> UserDetailsResponse | None:
        """Load a user with its sensitive columns resolved to raw values.

        Returns:
            The user's details, or None if no user has this id.

        Raises:
            VaultError: If the vault cannot resolve the user's tokens.
        """
        user = await self.repository.find_by_id(user_id)
        if user is None:
            return None

        data = user.data()
        data.update(await self.repository.untokenize(user))
        return UserDetailsResponse.model_validate(data)

    @staticmethod
    def _validate(changes: UserUpdateRequest | dict[str, Any]) -> UserUpdateRequest:
        if isinstance(changes, UserUpdateRequest):
            return changes
        try:
            return UserUpdateRequest.model_validate(changes)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidArgumentError(f"Invalid user update: {errors}") from e
