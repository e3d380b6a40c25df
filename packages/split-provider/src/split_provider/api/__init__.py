from .client import SplitResponse, SplitRestClient
from .users import (
    Group,
    User,
    UserCreateRequest,
    UserListOptions,
    UserListResult,
    UsersService,
    UserStatus,
    UserUpdateRequest,
)

__all__ = [
    "SplitRestClient",
    "SplitResponse",
    "Group",
    "User",
    "UserCreateRequest",
    "UserListOptions",
    "UserListResult",
    "UsersService",
    "UserStatus",
    "UserUpdateRequest",
]
