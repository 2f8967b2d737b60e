"""
Redshift Data API connection.

Thin synchronous wrapper over ``boto3.client("redshift-data")`` that knows
which warehouse to target; polling and batching live in the gateway.
"""

from __future__ import annotations

from typing import Any

from lakesweep.config.settings import WarehouseSettings
from lakesweep.connections.base import BaseAwsConnection


class RedshiftDataConnection(BaseAwsConnection):
    """
    Statement-execution service client for one Redshift cluster or
    serverless workgroup.

    Config example:
        config:
          region: eu-west-2
    """

    service_name = "redshift-data"

    def __init__(
        self,
        name: str,
        warehouse: WarehouseSettings,
        config: dict[str, Any] | None = None,
        *,
        client: Any = None,
    ):
        config = dict(config or {})
        nested = dict(config.get("config", {}))
        nested.setdefault("region", warehouse.region)
        config["config"] = nested
        super().__init__(name, config, client=client)
        self.warehouse = warehouse

    def execute_statement(self, sql: str) -> str:
        """
        Submit one SQL string.

        Returns:
            Statement id assigned by the service
        """
        response = self.client.execute_statement(Sql=sql, **self.warehouse.statement_target())
        return response["Id"]

    def describe_statement(self, statement_id: str) -> dict[str, Any]:
        """Get the raw status description of a statement."""
        return self.client.describe_statement(Id=statement_id)

    def get_statement_result(self, statement_id: str, next_token: str | None = None) -> dict[str, Any]:
        """Get one page of a statement's result set."""
        kwargs: dict[str, Any] = {"Id": statement_id}
        if next_token:
            kwargs["NextToken"] = next_token
        return self.client.get_statement_result(**kwargs)
