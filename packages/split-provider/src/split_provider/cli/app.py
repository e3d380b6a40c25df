import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, NoReturn, TypeVar

import typer
from rich import print, print_json
from rich.markup import escape

from ..api.client import SplitRestClient
from ..api.users import (
    Group,
    UserCreateRequest,
    UserListOptions,
    UsersService,
    UserStatus,
    UserUpdateRequest,
)
from ..config import API_KEY_ENV, BASE_URL_ENV, LOG_LEVEL_ENV, ProviderConfig, load_config
from ..errors import SplitError
from ..observability import configure_logging
from ..provider.provider import DATA_SOURCES, Provider

T = TypeVar("T")

app = typer.Typer(add_completion=False, pretty_exceptions_show_locals=False)
users_app = typer.Typer(add_completion=False, help="Manage organization users.")
data_app = typer.Typer(add_completion=False, help="Read declarative data sources.")
app.add_typer(users_app, name="users")
app.add_typer(data_app, name="data")


@dataclass(frozen=True)
class CliState:
    api_key: str | None
    base_url: str | None


def build_client(config: ProviderConfig) -> SplitRestClient:
    return SplitRestClient.from_config(config)


@app.callback()
def main(
    ctx: typer.Context,
    api_key: str | None = typer.Option(
        None, envvar=API_KEY_ENV, help="Split admin API key", show_default=False
    ),
    base_url: str | None = typer.Option(
        None, envvar=BASE_URL_ENV, help="Admin API base URL", show_default=False
    ),
    log_level: str = typer.Option("WARNING", envvar=LOG_LEVEL_ENV, help="Log level"),
):
    """Split.io admin API users and data sources."""
    configure_logging(log_level)
    ctx.obj = CliState(api_key=api_key, base_url=base_url)


def _fail(exc: Exception) -> NoReturn:
    print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


def _run_users(ctx: typer.Context, operation: Callable[[UsersService], Awaitable[T]]) -> T:
    state: CliState = ctx.obj

    async def runner() -> T:
        config = load_config(api_key=state.api_key, base_url=state.base_url)
        async with build_client(config) as client:
            return await operation(UsersService(client))

    try:
        return asyncio.run(runner())
    except SplitError as exc:
        _fail(exc)


def _dump(model: Any) -> None:
    print_json(data=model.model_dump(mode="json", by_alias=True, exclude_none=True))


def _parse_group(value: str) -> Group:
    group_id, sep, group_type = value.partition(":")
    if not sep or not group_id or not group_type:
        raise typer.BadParameter(f"expected ID:TYPE, got {value!r}", param_hint="--group")
    return Group(id=group_id, type=group_type)


@users_app.command("list")
def list_users(
    ctx: typer.Context,
    status: UserStatus | None = typer.Option(None, help="Filter by status"),
    limit: int | None = typer.Option(None, help="Page size (1-200, server default 50)"),
    before: str | None = typer.Option(None, help="previousMarker of an earlier page"),
    after: str | None = typer.Option(None, help="nextMarker of an earlier page"),
    group_id: str | None = typer.Option(None, help="Only active members of this group"),
):
    """List one page of users."""
    options = UserListOptions(
        status=status, limit=limit, before=before, after=after, group_id=group_id
    )
    _dump(_run_users(ctx, lambda users: users.list(options)))


@users_app.command("get")
def get_user(ctx: typer.Context, user_id: str = typer.Argument(..., help="User id")):
    """Fetch a user by id."""
    _dump(_run_users(ctx, lambda users: users.get(user_id)))


@users_app.command("find")
def find_user(ctx: typer.Context, email: str = typer.Argument(..., help="Exact email")):
    """Scan all users for an exact email match."""
    _dump(_run_users(ctx, lambda users: users.find_by_email(email)))


@users_app.command("invite")
def invite_user(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Email to invite"),
    group: list[str] = typer.Option([], "--group", help="Group as ID:TYPE, repeatable"),
):
    """Invite a new user; it starts in PENDING status."""
    groups = [_parse_group(value) for value in group] or None
    request = UserCreateRequest(email=email, groups=groups)
    _dump(_run_users(ctx, lambda users: users.invite(request)))


@users_app.command("update")
def update_user(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="User id"),
    name: str | None = typer.Option(None, help="Display name"),
    email: str | None = typer.Option(None, help="Email"),
    tfa: bool | None = typer.Option(None, "--2fa/--no-2fa", help="Two-factor auth"),
    status: UserStatus | None = typer.Option(None, help="ACTIVE or DEACTIVATED"),
):
    """Replace the mutable fields of a user."""
    request = UserUpdateRequest(name=name, email=email, tfa=tfa, status=status)
    _dump(_run_users(ctx, lambda users: users.update(user_id, request)))


@users_app.command("delete")
def delete_user(ctx: typer.Context, user_id: str = typer.Argument(..., help="User id")):
    """Delete a user that has not accepted the invite yet."""
    _run_users(ctx, lambda users: users.delete_pending_user(user_id))
    print(f"[bold]Deleted[/bold] pending user {user_id}")


@data_app.command("list")
def list_data_sources():
    """List registered data sources."""
    for name in sorted(DATA_SOURCES):
        print(name)


@data_app.command("read")
def read_data_source(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Data source name, e.g. split_user"),
    attr: list[str] = typer.Option([], "--attr", help="KEY=VALUE, repeatable"),
):
    """Read a data source and print its observed state."""
    state: CliState = ctx.obj
    settings = {
        key: value
        for key, value in {"api_key": state.api_key, "base_url": state.base_url}.items()
        if value
    }
    pairs = []
    for item in attr:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--attr")
        pairs.append((key, value))

    async def runner():
        async with Provider.configure(settings, client_factory=build_client) as provider:
            schema = provider.data_source(name).schema
            config = {}
            for key, value in pairs:
                attribute = schema.get(key)
                config[key] = attribute.parse(value) if attribute else value
            return await provider.read_data_source(name, config)

    try:
        result = asyncio.run(runner())
    except SplitError as exc:
        _fail(exc)

    if not result.ok:
        for diagnostic in result.diagnostics:
            print(f"[bold red]{diagnostic.severity}:[/bold red] {escape(diagnostic.summary)}")
        raise typer.Exit(code=1)
    print_json(data=result.state)
