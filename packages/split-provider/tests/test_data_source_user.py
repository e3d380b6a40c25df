import pytest

from split_provider.api.users import User, UsersService
from split_provider.errors import DecodeError, SchemaError, TransportError
from split_provider.provider.data_source_user import USER_SCHEMA, UserDataSource
from split_provider.provider.diagnostics import Severity, has_errors
from split_provider.provider.provider import Provider
from split_provider.provider.schema import ResourceData

from .fixtures.fake_split import FakeSplitApi, make_user


class StubUsers:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def find_by_email(self, email):
        self.calls.append(email)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.asyncio
async def test_read_populates_state_from_matching_user():
    api = FakeSplitApi(
        [
            make_user("u1", "bob@example.com"),
            make_user("u2", "alice@example.com", status="ACTIVE", tfa=True),
        ]
    )
    data = ResourceData(USER_SCHEMA, {"email": "alice@example.com"})

    async with api.client() as client:
        diagnostics = await UserDataSource(UsersService(client)).read(data)

    assert diagnostics == []
    assert data.id == "u2"
    assert data.state() == {
        "id": "u2",
        "email": "alice@example.com",
        "name": "alice",
        "2fa": True,
        "status": "ACTIVE",
    }


@pytest.mark.asyncio
async def test_read_overwrites_previous_values():
    users = StubUsers(
        result=User(id="u9", name="New", email="n@example.com", status="PENDING", tfa=False)
    )
    data = ResourceData(USER_SCHEMA, {"email": "n@example.com"})
    data.set_id("old")
    data.set("name", "Old")

    diagnostics = await UserDataSource(users).read(data)

    assert diagnostics == []
    assert data.id == "u9"
    assert data.get("name") == "New"
    assert data.get("status") == "PENDING"
    assert users.calls == ["n@example.com"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        TransportError("GET /users failed with HTTP 503", status_code=503),
        DecodeError("GET /users returned malformed JSON"),
    ],
)
async def test_read_error_becomes_diagnostic_without_partial_write(error):
    data = ResourceData(USER_SCHEMA, {"email": "alice@example.com"})

    diagnostics = await UserDataSource(StubUsers(error=error)).read(data)

    assert has_errors(diagnostics)
    assert diagnostics[0].severity == Severity.error
    assert diagnostics[0].summary == error.message
    assert diagnostics[0].detail == type(error).__name__
    assert data.id is None
    assert not data.is_populated
    assert data.state() == {
        "id": None,
        "email": "alice@example.com",
        "name": None,
        "2fa": None,
        "status": None,
    }


@pytest.mark.asyncio
async def test_read_without_match_writes_empty_values():
    # No-match is reported by the client as an empty record, not an error.
    data = ResourceData(USER_SCHEMA, {"email": "nobody@nowhere.test"})

    diagnostics = await UserDataSource(StubUsers(result=User())).read(data)

    assert diagnostics == []
    assert data.state() == {"id": "", "email": "", "name": "", "2fa": False, "status": ""}


def test_schema_requires_email():
    with pytest.raises(SchemaError) as excinfo:
        ResourceData(USER_SCHEMA, {})
    assert excinfo.value.attribute == "email"


def test_schema_rejects_null_required_attribute():
    with pytest.raises(SchemaError) as excinfo:
        ResourceData(USER_SCHEMA, {"email": None})
    assert excinfo.value.attribute == "email"


@pytest.mark.asyncio
async def test_null_email_never_reaches_the_api():
    users = StubUsers(result=User())
    provider = Provider(
        client=FakeSplitApi().client(),
        data_sources={"split_user": lambda _service: UserDataSource(users)},
    )
    async with provider:
        result = await provider.read_data_source("split_user", {"email": None})

    assert not result.ok
    assert result.state is None
    assert users.calls == []


def test_schema_rejects_computed_and_unknown_attributes():
    with pytest.raises(SchemaError):
        ResourceData(USER_SCHEMA, {"email": "a@example.com", "status": "ACTIVE"})
    with pytest.raises(SchemaError):
        ResourceData(USER_SCHEMA, {"email": "a@example.com", "color": "blue"})


def test_schema_checks_value_types():
    with pytest.raises(SchemaError):
        ResourceData(USER_SCHEMA, {"email": 42})

    data = ResourceData(USER_SCHEMA, {"email": "a@example.com"})
    with pytest.raises(SchemaError):
        data.set("2fa", "yes")
    with pytest.raises(SchemaError):
        data.set("name", True)
