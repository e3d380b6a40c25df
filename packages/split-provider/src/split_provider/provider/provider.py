from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Protocol

from pydantic import BaseModel, Field

from ..api.client import SplitRestClient
from ..api.users import UsersService
from ..config import ProviderConfig, load_config
from ..errors import SplitError
from ..observability import get_logger
from .data_source_user import UserDataSource
from .diagnostics import Diagnostic, Diagnostics, diagnostics_from_error, has_errors
from .schema import Attribute, AttributeType, ResourceData, Schema

log = get_logger(__name__)

PROVIDER_SCHEMA: Schema = {
    "api_key": Attribute(
        type=AttributeType.string,
        optional=True,
        sensitive=True,
        description="Split admin API key. Defaults to SPLIT_API_KEY.",
    ),
    "base_url": Attribute(
        type=AttributeType.string,
        optional=True,
        description="Admin API base URL. Defaults to SPLIT_BASE_URL or the public v2 API.",
    ),
}


class DataSource(Protocol):
    name: str
    schema: Schema

    def read(self, data: ResourceData) -> Awaitable[Diagnostics]: ...


DataSourceFactory = Callable[[UsersService], DataSource]

DATA_SOURCES: dict[str, DataSourceFactory] = {
    UserDataSource.name: UserDataSource,
}


class ReadResult(BaseModel):
    state: dict[str, Any] | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not has_errors(self.diagnostics)


class Provider:
    """Wires a configured Split client into the registered data sources.

    Use as an async context manager so the underlying HTTP client is closed.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        client: SplitRestClient | None = None,
        data_sources: Mapping[str, DataSourceFactory] | None = None,
    ) -> None:
        if client is None:
            if config is None:
                raise ValueError("Provider needs a config or a client")
            client = SplitRestClient.from_config(config)
        self.client = client
        self.users = UsersService(client)
        self._data_sources = dict(DATA_SOURCES if data_sources is None else data_sources)

    @classmethod
    def configure(
        cls,
        settings: Mapping[str, Any] | None = None,
        *,
        client_factory: Callable[[ProviderConfig], SplitRestClient] = SplitRestClient.from_config,
    ) -> "Provider":
        """Build a provider from provider-block settings.

        Raises SchemaError for malformed settings and ConfigError when no
        API key is configured or found in the environment.
        """
        data = ResourceData(PROVIDER_SCHEMA, settings)
        config = load_config(api_key=data.get("api_key"), base_url=data.get("base_url"))
        return cls(config, client=client_factory(config))

    async def __aenter__(self) -> "Provider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.client.aclose()

    def data_sources(self) -> list[str]:
        return sorted(self._data_sources)

    def data_source(self, name: str) -> DataSource:
        try:
            factory = self._data_sources[name]
        except KeyError:
            raise SplitError(f"unknown data source {name!r}") from None
        return factory(self.users)

    async def read_data_source(
        self, name: str, config: Mapping[str, Any]
    ) -> ReadResult:
        try:
            source = self.data_source(name)
            data = ResourceData(source.schema, config)
        except SplitError as exc:
            return ReadResult(diagnostics=diagnostics_from_error(exc))

        log.info("split.data_source.read", data_source=name)
        diagnostics = await source.read(data)
        if has_errors(diagnostics) or not data.is_populated:
            return ReadResult(diagnostics=diagnostics)
        return ReadResult(state=data.state(), diagnostics=diagnostics)
