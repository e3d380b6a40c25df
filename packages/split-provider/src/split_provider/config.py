from __future__ import annotations

import os

from pydantic import BaseModel, Field, SecretStr, field_validator

from .errors import ConfigError

DEFAULT_BASE_URL = "https://api.split.io/internal/api/v2"

API_KEY_ENV = "SPLIT_API_KEY"
BASE_URL_ENV = "SPLIT_BASE_URL"
LOG_LEVEL_ENV = "SPLIT_LOG_LEVEL"


class ProviderConfig(BaseModel):
    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


def select_api_key(api_key: str | None = None) -> str:
    if api_key:
        return api_key

    api_key = os.getenv(API_KEY_ENV)
    if api_key:
        return api_key

    raise ConfigError(
        f"No Split admin API key found. Pass --api-key or set {API_KEY_ENV}.",
        config_key="api_key",
    )


def load_config(
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> ProviderConfig:
    """Build a ProviderConfig from explicit values with environment fallbacks.

    Explicit arguments win over ``SPLIT_API_KEY`` and ``SPLIT_BASE_URL``;
    anything still unset takes the model default. Log level is a CLI concern
    and is not part of the provider configuration.
    """

    values: dict[str, object] = {"api_key": select_api_key(api_key)}
    base_url = base_url or os.getenv(BASE_URL_ENV)
    if base_url:
        values["base_url"] = base_url
    if timeout is not None:
        values["timeout"] = timeout
    try:
        return ProviderConfig.model_validate(values)
    except ValueError as exc:
        raise ConfigError(f"Invalid provider configuration: {exc}") from exc
