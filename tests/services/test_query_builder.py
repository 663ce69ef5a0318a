# tests/services/test_query_builder.py
from __future__ import annotations

from decimal import Decimal

import pytest

from core.exceptions import InvalidArgumentError
from services.entity_services.query_builder import QueryBuilder, SelectQuery


@pytest.fixture
def builder(db) -> QueryBuilder:
    return QueryBuilder(db)


class TestBuildWhereConditions:
    def test_and_with_int_and_string(self, builder):
        result = builder.build_where_conditions("AND", {"a": 1, "b": "x"})
        assert result == "\"a\" = 1 AND \"b\" = 'x'"

    def test_or_combinator(self, builder):
        result = builder.build_where_conditions("OR", {"a": 1, "b": 2})
        assert result == '"a" = 1 OR "b" = 2'

    def test_combinator_is_case_insensitive(self, builder):
        assert builder.build_where_conditions("and", {"a": 1}) == '"a" = 1'

    def test_empty_conditions_raise(self, builder):
        with pytest.raises(InvalidArgumentError, match="пустым"):
            builder.build_where_conditions("AND", {})

    def test_unknown_combinator_raises(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.build_where_conditions("XOR", {"a": 1})

    def test_string_value_is_escaped(self, builder):
        result = builder.build_where_conditions("AND", {"name": "O'Reilly'; DROP TABLE x; --"})
        assert result == "\"name\" = 'O''Reilly''; DROP TABLE x; --'"

    def test_identifier_is_escaped(self, builder):
        result = builder.build_where_conditions("AND", {'bad"col': 1})
        assert result == '"bad""col" = 1'

    def test_qualified_identifier(self, builder):
        assert builder.build_where_conditions("AND", {"a.id_cms": 3}) == '"a"."id_cms" = 3'

    def test_none_becomes_is_null(self, builder):
        assert builder.build_where_conditions("AND", {"deleted_at": None}) == '"deleted_at" IS NULL'

    def test_sequence_becomes_in(self, builder):
        result = builder.build_where_conditions("AND", {"id": [1, 2, "3"]})
        assert result == "\"id\" IN (1, 2, '3')"

    def test_empty_sequence_raises(self, builder):
        with pytest.raises(InvalidArgumentError):
            builder.build_where_conditions("AND", {"id": []})

    def test_unsupported_value_type_raises(self, builder):
        with pytest.raises(InvalidArgumentError, match="dict"):
            builder.build_where_conditions("AND", {"id": {"nested": 1}})


class TestQuote:
    def test_bool(self, builder):
        assert builder.quote(True) == "TRUE"
        assert builder.quote(False) == "FALSE"

    def test_decimal_and_float(self, builder):
        assert builder.quote(Decimal("9.99")) == "9.99"
        assert builder.quote(1.5) == "1.5"


class TestSelectQuery:
    def test_plain_select(self):
        assert SelectQuery().from_table('"tb_tag"').build() == 'SELECT * FROM "tb_tag"'

    def test_joins_and_wheres(self):
        query = (
            SelectQuery()
            .from_table('"tb_cms"', "a")
            .left_join('"tb_cms_lang"', "b", "a.id_cms = b.id_cms")
            .where("a.id_cms = 1")
            .where("b.id_shop = 2")
            .limit(1)
        )
        assert str(query) == (
            'SELECT * FROM "tb_cms" a LEFT JOIN "tb_cms_lang" b ON a.id_cms = b.id_cms '
            "WHERE (a.id_cms = 1) AND (b.id_shop = 2) LIMIT 1"
        )

    def test_missing_table_raises(self):
        with pytest.raises(InvalidArgumentError):
            SelectQuery().build()
