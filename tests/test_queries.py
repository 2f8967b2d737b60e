"""
Tests for reconciliation SQL and identifier escaping.
"""

import pytest

from lakesweep.reconcile.queries import (
    drop_table_statement,
    expired_tables_query,
    invalid_tables_query,
    set_last_ddl_time_statement,
)
from lakesweep.utils.sql_escape import escape_identifier, escape_qualified_name, escape_sql_string


class TestClassificationQueries:
    def test_expired_query_filters_schema_and_age(self):
        sql = expired_tables_query("reports", 86400)
        assert sql.startswith("SELECT tablename FROM SVV_EXTERNAL_TABLES")
        assert "schemaname = 'reports'" in sql
        assert "(EXTRACT(EPOCH FROM GETDATE()) - 86400)" in sql
        assert "'transient_lastDdlTime'" in sql

    def test_expired_query_only_casts_numeric_timestamps(self):
        sql = expired_tables_query("reports", 10)
        assert "CASE WHEN" in sql
        assert "::bigint END" in sql

    def test_invalid_query_selects_name_and_location(self):
        sql = invalid_tables_query("reports")
        assert sql.startswith("SELECT tablename, location FROM SVV_EXTERNAL_TABLES")
        assert "IS NULL OR NOT" in sql

    def test_schema_literal_is_escaped(self):
        assert "schemaname = 'o''brien'" in invalid_tables_query("o'brien")


class TestStatements:
    def test_drop_statement(self):
        assert drop_table_statement("reports", "t1") == 'DROP TABLE IF EXISTS "reports"."t1";'

    def test_set_last_ddl_time_writes_seconds(self):
        sql = set_last_ddl_time_statement("reports", "t2", 1_700_000_000_999)
        assert sql == (
            'ALTER TABLE "reports"."t2" SET TABLE PROPERTIES '
            "('transient_lastDdlTime'='1700000000');"
        )

    def test_table_name_cannot_break_out(self):
        sql = drop_table_statement("reports", 'x"; DROP SCHEMA reports; --')
        assert sql == 'DROP TABLE IF EXISTS "reports"."x""; DROP SCHEMA reports; --";'


class TestEscaping:
    def test_escape_identifier(self):
        assert escape_identifier("user_table") == '"user_table"'
        assert escape_identifier('table"name') == '"table""name"'

    def test_escape_identifier_empty(self):
        with pytest.raises(ValueError, match="empty"):
            escape_identifier("")

    def test_escape_qualified_name(self):
        assert escape_qualified_name("reports", "t") == '"reports"."t"'

    def test_escape_sql_string(self):
        assert escape_sql_string("O'Brien") == "'O''Brien'"
        assert escape_sql_string(5) == "'5'"
        assert escape_sql_string(None) == "NULL"
