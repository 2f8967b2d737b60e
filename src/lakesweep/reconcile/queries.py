"""
SQL for classifying and reconciling external table definitions.

The catalog stores each table's last DDL time in the ``transient_lastDdlTime``
table parameter as epoch seconds. Only digit-only values count as recorded
timestamps; anything else is treated as missing.
"""

from __future__ import annotations

from lakesweep.utils.sql_escape import escape_qualified_name, escape_sql_string

LAST_DDL_TIME_PARAMETER = "transient_lastDdlTime"

_LAST_DDL_TIME = f"json_extract_path_text(parameters, '{LAST_DDL_TIME_PARAMETER}', TRUE)"
_IS_EPOCH = f"{_LAST_DDL_TIME} ~ '^[0-9]+$'"


def expired_tables_query(schema: str, expiry_seconds: int) -> str:
    """Names of tables whose recorded timestamp is older than ``expiry_seconds``."""
    return (
        "SELECT tablename "
        "FROM SVV_EXTERNAL_TABLES "
        f"WHERE schemaname = {escape_sql_string(schema)} "
        f"AND CASE WHEN {_IS_EPOCH} THEN {_LAST_DDL_TIME}::bigint END "
        f"< (EXTRACT(EPOCH FROM GETDATE()) - {int(expiry_seconds)})"
    )


def invalid_tables_query(schema: str) -> str:
    """(name, location) of tables whose recorded timestamp is absent or unparsable."""
    return (
        "SELECT tablename, location "
        "FROM SVV_EXTERNAL_TABLES "
        f"WHERE schemaname = {escape_sql_string(schema)} "
        f"AND ({_LAST_DDL_TIME} IS NULL OR NOT {_IS_EPOCH})"
    )


def drop_table_statement(schema: str, table_name: str) -> str:
    return f"DROP TABLE IF EXISTS {escape_qualified_name(schema, table_name)};"


def set_last_ddl_time_statement(schema: str, table_name: str, created_epoch_millis: int) -> str:
    """
    Record the backing data's timestamp on the table definition.

    The parameter is written in epoch seconds, the unit the expiry query
    compares against.
    """
    seconds = created_epoch_millis // 1000
    return (
        f"ALTER TABLE {escape_qualified_name(schema, table_name)} "
        f"SET TABLE PROPERTIES ({escape_sql_string(LAST_DDL_TIME_PARAMETER)}={escape_sql_string(seconds)});"
    )
