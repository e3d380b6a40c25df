"""Users endpoints of the Split admin API (v2).

Reference: https://docs.split.io/reference#users-overview
"""

from __future__ import annotations

from contextlib import aclosing
from enum import StrEnum
from typing import Any, AsyncIterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import DecodeError
from ..observability import get_logger
from .client import SplitRestClient

log = get_logger(__name__)

FIND_PAGE_SIZE = 100


class UserStatus(StrEnum):
    ACTIVE = "ACTIVE"
    DEACTIVATED = "DEACTIVATED"
    PENDING = "PENDING"


class Group(BaseModel):
    id: str | None = None
    type: str | None = None


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    type: str | None = None
    name: str | None = None
    email: str | None = None
    status: str | None = None
    tfa: bool | None = Field(default=None, alias="2fa")
    groups: list[Group] | None = None


class UserListResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: list[User] = Field(default_factory=list)
    next_marker: str | None = Field(default=None, alias="nextMarker")
    previous_marker: str | None = Field(default=None, alias="previousMarker")
    limit: int | None = None
    count: int | None = None


class UserListOptions(BaseModel):
    """Query parameters for listing users.

    ``limit`` accepts 1-200 server side (default 50); it is passed through
    as given. ``before``/``after`` take the ``previousMarker``/``nextMarker``
    of an earlier page. ``group_id`` returns active members of a group.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: UserStatus | str | None = None
    limit: int | None = None
    before: str | None = None
    after: str | None = None
    group_id: str | None = Field(default=None, alias="groupId")

    def to_params(self) -> dict[str, str]:
        dumped = self.model_dump(by_alias=True, exclude_none=True)
        return {key: str(value) for key, value in dumped.items() if value != ""}


class UserCreateRequest(BaseModel):
    email: str
    groups: list[Group] | None = None


class UserUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    tfa: bool | None = Field(default=None, alias="2fa")
    status: UserStatus | str | None = None


def _body(request: BaseModel) -> dict[str, Any]:
    return request.model_dump(mode="json", by_alias=True, exclude_none=True)


def _parse(model: type[BaseModel], payload: Any, what: str):  # type: ignore[no-untyped-def]
    if payload is None:
        raise DecodeError(f"Empty {what} payload from Split API")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(
            f"Unexpected {what} payload from Split API",
            details={"errors": exc.error_count()},
        ) from exc


class UsersService:
    def __init__(self, client: SplitRestClient) -> None:
        self.client = client

    async def list(self, options: UserListOptions | None = None) -> UserListResult:
        """List active, deactivated and pending users in the organization.

        By default, pending users are not returned by this endpoint.
        """
        params = (options or UserListOptions()).to_params()
        payload = await self.client.get_json("/users", params=params or None)
        return _parse(UserListResult, payload, "user list")

    async def get(self, user_id: str) -> User:
        payload = await self.client.get_json(f"/users/{user_id}")
        return _parse(User, payload, "user")

    async def iter_users(
        self, options: UserListOptions | None = None
    ) -> AsyncIterator[User]:
        next_options = options or UserListOptions()
        pages = 0
        while True:
            page = await self.list(next_options)
            pages += 1
            log.debug(
                "split.users.page",
                page=pages,
                count=len(page.data),
                after=next_options.after,
            )
            for user in page.data:
                yield user
            if page.next_marker is None:
                return
            next_options = next_options.model_copy(update={"after": page.next_marker})

    async def find_by_email(self, email: str) -> User:
        """Scan every page of users for an exact email match.

        Returns an empty ``User`` when no record matches.
        """
        users = self.iter_users(UserListOptions(limit=FIND_PAGE_SIZE))
        async with aclosing(users):
            async for user in users:
                if user.email is not None and user.email == email:
                    return user

        log.debug("split.users.find.exhausted", email=email)
        return User()

    async def invite(self, request: UserCreateRequest) -> User:
        """Invite a new user; it is created with PENDING status."""
        payload = await self.client.post_json("/users", _body(request))
        return _parse(User, payload, "user")

    async def update(self, user_id: str, request: UserUpdateRequest) -> User:
        """Update display name, email, 2FA and activation state of a user."""
        payload = await self.client.put_json(f"/users/{user_id}", _body(request))
        return _parse(User, payload, "user")

    async def delete_pending_user(self, user_id: str) -> None:
        """Delete a user who has not accepted the invite yet.

        Once a user is active, it can only be deactivated through ``update``.
        """
        await self.client.delete(f"/users/{user_id}")
