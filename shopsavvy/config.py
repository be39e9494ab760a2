"""
Client configuration for the ShopSavvy Data API SDK.

``ShopSavvyConfig`` validates the API key once, at construction, and is frozen
afterwards. Every validation failure is reported as ``ShopSavvyConfigError``
so a client can never be built from a bad configuration.
"""
import os
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ShopSavvyConfigError

DEFAULT_BASE_URL = "https://api.shopsavvy.com/v1"
DEFAULT_TIMEOUT_MS = 30000

API_KEY_PATTERN = re.compile(r"^ss_(live|test)_[a-zA-Z0-9]+$")


class ShopSavvyConfig(BaseModel):
    """Immutable client settings.

    Attributes
    ----------
    api_key: ``ss_live_...`` or ``ss_test_...`` key.
    base_url: API root, trailing slash removed.
    timeout_ms: Per-request timeout in milliseconds.
    """
    model_config = ConfigDict(frozen=True)

    api_key: str = Field(default=None, validate_default=True)
    base_url: str = Field(default=DEFAULT_BASE_URL, validate_default=True)
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __init__(self, **data: Any):
        with _config_errors():
            super().__init__(**data)

    @classmethod
    def model_validate(cls, obj: Any, **kwargs: Any) -> "ShopSavvyConfig":
        with _config_errors():
            return super().model_validate(obj, **kwargs)

    @classmethod
    def model_validate_json(cls, json_data: Any, **kwargs: Any) -> "ShopSavvyConfig":
        with _config_errors():
            return super().model_validate_json(json_data, **kwargs)

    @field_validator("api_key", mode="before")
    @classmethod
    def _check_api_key(cls, value: Any) -> Any:
        if not value:
            raise ValueError("API key is required. Get one at https://shopsavvy.com/data")
        if not isinstance(value, str) or not API_KEY_PATTERN.fullmatch(value):
            raise ValueError(
                "Invalid API key format. API keys should start with ss_live_ or ss_test_"
            )
        return value

    @field_validator("base_url", mode="before")
    @classmethod
    def _default_base_url(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_BASE_URL
        if isinstance(value, str):
            return value.rstrip("/")
        return value

    @field_validator("timeout_ms")
    @classmethod
    def _check_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Timeout must be a positive number of milliseconds")
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls, prefix: str = "SHOPSAVVY_") -> "ShopSavvyConfig":
        """Build a config from ``{prefix}API_KEY``, ``{prefix}BASE_URL`` and ``{prefix}TIMEOUT_MS``."""
        data = {
            "api_key": os.getenv(f"{prefix}API_KEY"),
            "base_url": os.getenv(f"{prefix}BASE_URL"),
        }
        timeout = os.getenv(f"{prefix}TIMEOUT_MS")
        if timeout:
            data["timeout_ms"] = timeout
        return cls(**data)


def _first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    cause: Optional[BaseException] = error.get("ctx", {}).get("error")
    if cause is not None:
        return str(cause)
    return f"{error['loc'][0]}: {error['msg']}"


@contextmanager
def _config_errors() -> Iterator[None]:
    try:
        yield
    except PydanticValidationError as exc:
        raise ShopSavvyConfigError(_first_error_message(exc)) from exc
