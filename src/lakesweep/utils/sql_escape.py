"""
SQL identifier and value escaping utilities.

Table names come back from the catalog and are interpolated into DDL, so
they are always quoted rather than trusted.
"""


def escape_identifier(identifier: str) -> str:
    """
    Escape SQL identifier (table name, schema name).

    Wraps identifier in double quotes and escapes any double quotes within.

    Args:
        identifier: SQL identifier to escape

    Returns:
        Escaped identifier wrapped in double quotes

    Example:
        >>> escape_identifier("user_table")
        '"user_table"'
        >>> escape_identifier('table"name')
        '"table""name"'
    """
    if not identifier:
        raise ValueError("Identifier cannot be empty")

    escaped = identifier.replace('"', '""')
    return f'"{escaped}"'


def escape_qualified_name(schema: str, table: str) -> str:
    """
    Escape qualified table name (schema.table).

    Args:
        schema: Schema name
        table: Table name

    Returns:
        Escaped qualified name: "schema"."table"
    """
    return f"{escape_identifier(schema)}.{escape_identifier(table)}"


def escape_sql_string(value: str | int | None) -> str:
    """
    Escape SQL string literal.

    Escapes single quotes by doubling them, which is the SQL standard.

    Example:
        >>> escape_sql_string("O'Brien")
        "'O''Brien'"
    """
    if value is None:
        return "NULL"

    escaped = str(value).replace("'", "''")
    return f"'{escaped}'"
