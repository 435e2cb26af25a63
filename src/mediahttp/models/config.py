"""Pydantic configuration models for mediahttp clients."""

import base64
import os
import re
from enum import Enum
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .. import __version__


class AuthType(str, Enum):
    """Authentication schemes applied as default request headers."""

    NONE = "none"
    BEARER = "bearer"
    BASIC = "basic"
    HEADER = "header"


_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def _expand_env_var(value: Optional[str]) -> Optional[str]:
    """Expand environment variable references in a string.

    Supports $VAR and ${VAR} syntax. Unset variables are left as written.
    """
    if value is None:
        return None

    def replace(match: re.Match) -> str:
        var_name = match.group(1) or match.group(2)
        return os.environ.get(var_name, match.group(0))

    return _ENV_VAR_PATTERN.sub(replace, value)


class AuthConfig(BaseModel):
    """Credentials sent with every request.

    Sensitive fields accept $VAR or ${VAR} references, expanded from the
    environment when the config is created:
        token: '$API_TOKEN'
        password: '${API_PASSWORD}'
    """

    type: AuthType = Field(AuthType.NONE, description="Authentication type")
    token: Optional[str] = Field(None, description="Bearer token")
    username: Optional[str] = Field(None, description="Username for basic auth")
    password: Optional[str] = Field(None, description="Password for basic auth")
    header_name: Optional[str] = Field(None, description="Custom header name for header auth")
    header_value: Optional[str] = Field(None, description="Custom header value for header auth")

    model_config = {"extra": "forbid"}

    def model_post_init(self, __context: object) -> None:
        """Expand environment variables in sensitive fields after init."""
        if self.token:
            object.__setattr__(self, "token", _expand_env_var(self.token))
        if self.password:
            object.__setattr__(self, "password", _expand_env_var(self.password))
        if self.header_value:
            object.__setattr__(self, "header_value", _expand_env_var(self.header_value))

    def headers(self) -> dict[str, str]:
        """Headers carrying these credentials.

        Raises:
            ValueError: If a field required by the auth type is missing
        """
        if self.type == AuthType.NONE:
            return {}
        if self.type == AuthType.BEARER:
            if not self.token:
                raise ValueError("Bearer auth requires a token")
            return {"Authorization": f"Bearer {self.token}"}
        if self.type == AuthType.BASIC:
            if self.username is None or self.password is None:
                raise ValueError("Basic auth requires username and password")
            credentials = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
            return {"Authorization": f"Basic {credentials}"}
        if not self.header_name or self.header_value is None:
            raise ValueError("Header auth requires header_name and header_value")
        return {self.header_name: self.header_value}


class NetworkConfig(BaseModel):
    """Settings handed to the transport."""

    user_agent: Optional[str] = Field(None, description="Custom User-Agent header")
    timeout: Optional[float] = Field(30.0, gt=0, description="Request timeout in seconds (None = no timeout)")
    proxy: Optional[str] = Field(None, description="HTTP/HTTPS proxy URL")

    model_config = {"extra": "forbid"}


class ClientConfig(BaseModel):
    """
    Root configuration model for a mediahttp Client.

    Example:
        config = ClientConfig(
            base_url="https://api.github.com",
            accept="application/vnd.github.v3+json",
            auth=AuthConfig(type=AuthType.BEARER, token="$GITHUB_TOKEN"),
        )

    YAML format:
        base_url: https://api.github.com
        accept: application/vnd.github.v3+json
        network:
          timeout: 10
        auth:
          type: bearer
          token: $GITHUB_TOKEN
    """

    base_url: str = Field(..., description="URL that request paths resolve against")
    accept: Optional[str] = Field(None, description="Default Accept header")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra headers for every request")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not re.match(r"^https?://[^/]", value):
            raise ValueError("base_url must be an absolute http(s) URL")
        return value

    @field_validator("accept")
    @classmethod
    def _check_accept(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            from ..mediatype import parse

            parse(value)
        return value

    def default_headers(self) -> dict[str, str]:
        """Headers every request from this config starts with."""
        headers = {"User-Agent": self.network.user_agent or f"mediahttp/{__version__}"}
        if self.accept:
            headers["Accept"] = self.accept
        headers.update(self.headers)
        headers.update(self.auth.headers())
        return headers

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        return yaml.safe_dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClientConfig":
        """Load config from YAML string."""
        data = yaml.safe_load(yaml_str)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClientConfig":
        """Load config from YAML file."""
        return cls.from_yaml(path.read_text())
