"""
Base class for boto3-backed connections.
"""

from __future__ import annotations

from typing import Any, Optional

from lakesweep.utils.logging import get_logger

logger = get_logger("lakesweep.connections.base")


class BaseAwsConnection:
    """
    Lazily-initialized boto3 client with credential management.

    Supports AWS credentials from config, environment, or IAM role. A
    pre-built client may be injected (tests, or a Lambda reusing one client
    across invocations).

    Config example:
        config:
          region: eu-west-2
          access_key_id: AKIA...   # Optional, uses env/IAM if not set
          secret_access_key: ...   # Optional
          session_token: ...       # Optional (for temp creds)
          endpoint_url: ...        # Optional (for local emulators)
    """

    service_name: str = ""

    def __init__(self, name: str, config: dict[str, Any] | None = None, *, client: Any = None):
        self.name = name
        self.config = config or {}
        self._client = client

    @property
    def _cfg(self) -> dict[str, Any]:
        """Get nested config dict."""
        return self.config.get("config", {})

    @property
    def region(self) -> Optional[str]:
        """Get AWS region from config."""
        return self._cfg.get("region")

    @property
    def endpoint_url(self) -> Optional[str]:
        """Get custom endpoint URL."""
        return self._cfg.get("endpoint_url")

    def _get_client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for boto3 client initialization."""
        kwargs: dict[str, Any] = {}

        if self.region:
            kwargs["region_name"] = self.region

        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        # Explicit credentials from config (override env/IAM)
        access_key = self._cfg.get("access_key_id")
        secret_key = self._cfg.get("secret_access_key")
        session_token = self._cfg.get("session_token")

        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
            if session_token:
                kwargs["aws_session_token"] = session_token

        return kwargs

    @property
    def client(self):
        """
        Get the boto3 client (lazy initialization).

        Returns:
            boto3.client(service_name) instance
        """
        if self._client is None:
            import boto3

            logger.debug(f"Creating boto3 '{self.service_name}' client for connection '{self.name}'")
            self._client = boto3.client(self.service_name, **self._get_client_kwargs())
        return self._client

    def close(self) -> None:
        """Drop the cached client."""
        # boto3 clients don't require explicit closing
        self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        """String representation."""
        return f"{self.__class__.__name__}(name='{self.name}')"
