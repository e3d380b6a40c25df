from __future__ import annotations

from ..api.optional import bool_value, str_value
from ..api.users import UsersService
from ..errors import SplitError
from ..observability import get_logger
from .diagnostics import Diagnostics, diagnostics_from_error
from .schema import Attribute, AttributeType, ResourceData, Schema

log = get_logger(__name__)

USER_SCHEMA: Schema = {
    "email": Attribute(type=AttributeType.string, required=True),
    "name": Attribute(type=AttributeType.string, computed=True),
    "2fa": Attribute(type=AttributeType.boolean, computed=True),
    "status": Attribute(type=AttributeType.string, computed=True),
}


class UserDataSource:
    """Read-only ``split_user`` data source, looked up by email."""

    name = "split_user"
    schema = USER_SCHEMA

    def __init__(self, users: UsersService) -> None:
        self.users = users

    async def read(self, data: ResourceData) -> Diagnostics:
        email = data.get("email")

        try:
            user = await self.users.find_by_email(email)
        except SplitError as exc:
            log.debug("split.user.read.failed", email=email, error=str(exc))
            return diagnostics_from_error(exc)

        if user.id is None:
            log.warning("split.user.read.no_match", email=email)

        data.set_id(str_value(user.id))
        data.set("name", str_value(user.name))
        data.set("email", str_value(user.email))
        data.set("2fa", bool_value(user.tfa))
        data.set("status", str_value(user.status))
        return []
