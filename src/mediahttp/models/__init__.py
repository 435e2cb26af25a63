"""Configuration models for mediahttp."""

from .config import AuthConfig, AuthType, ClientConfig, NetworkConfig

__all__ = [
    "AuthConfig",
    "AuthType",
    "ClientConfig",
    "NetworkConfig",
]
