# tests/services/test_entity_loader.py
from __future__ import annotations

import pytest

from core.exceptions import DataAccessError
from core.metadata import MetadataResolver
from helpers.sample_entities import Cms, Product, Tag
from services.entity_services.entity_loader import EntityLoader


@pytest.fixture
def loader(db, cache) -> EntityLoader:
    return EntityLoader(db, cache, table_prefix="tb_")


def metadata_for(entity_class):
    return MetadataResolver().resolve(entity_class)


class TestCacheKey:
    def test_key_shape(self):
        key = EntityLoader.build_cache_key(metadata_for(Cms), 7, 2, 1)
        assert key == "objectmodel_Cms_7_2_1"

    def test_absent_scopes_render_as_zero(self):
        key = EntityLoader.build_cache_key(metadata_for(Tag), "5", None, None)
        assert key == "objectmodel_Tag_5_0_0"


class TestPlainEntity:
    def test_loads_row(self, loader, db):
        db.row_results = [{"id": 5, "name": "Foo"}]
        tag = Tag()

        loader.load(5, None, tag, metadata_for(Tag), None, False)

        assert tag.id == 5
        assert tag.name == "Foo"
        assert db.queries == ['SELECT * FROM "tb_tag" a WHERE (a."id" = 5)']

    def test_not_found_leaves_entity_untouched(self, loader, db, cache):
        tag = Tag()

        loader.load(404, None, tag, metadata_for(Tag), None, True)

        assert tag.id is None
        assert tag.name is None
        assert len(cache) == 0

    def test_unknown_columns_are_dropped(self, loader, db):
        db.row_results = [{"id": 5, "name": "Foo", "date_upd": "2017-05-01"}]
        tag = Tag()

        loader.load(5, None, tag, metadata_for(Tag), None, False)

        assert not hasattr(tag, "date_upd")


class TestCache:
    def test_cached_and_uncached_paths_agree(self, loader, db, cache):
        db.row_results = [{"id": 5, "name": "Foo", "legacy": 1}]
        fresh = Tag()
        loader.load(5, None, fresh, metadata_for(Tag), None, True)

        key = EntityLoader.build_cache_key(metadata_for(Tag), 5, None, None)
        assert cache.retrieve(key) == {"id": 5, "name": "Foo"}

        cached = Tag()
        loader.load(5, None, cached, metadata_for(Tag), None, True)

        assert cached.to_dict() == fresh.to_dict()
        assert len(db.queries) == 1

    def test_prepopulated_cache_skips_database(self, loader, db, cache):
        cache.store("objectmodel_Tag_5_0_0", {"name": "Foo"})
        tag = Tag()

        loader.load(5, None, tag, metadata_for(Tag), None, True)

        assert tag.id == 5
        assert tag.name == "Foo"
        assert db.queries == []

    def test_cache_ignored_when_disabled(self, loader, db, cache):
        cache.store("objectmodel_Tag_5_0_0", {"name": "Cached"})
        db.row_results = [{"id": 5, "name": "Fresh"}]
        tag = Tag()

        loader.load(5, None, tag, metadata_for(Tag), None, False)

        assert tag.name == "Fresh"

    def test_loader_without_cache_service(self, db):
        db.row_results = [{"id": 5, "name": "Foo"}]
        tag = Tag()

        EntityLoader(db).load(5, None, tag, metadata_for(Tag), None, True)

        assert db.queries == ['SELECT * FROM "tag" a WHERE (a."id" = 5)']
        assert tag.name == "Foo"


class TestTranslations:
    def test_all_languages_fold_into_mapping(self, loader, db):
        db.row_results = [{"id_cms": 7}]
        db.statement_results = [[
            {"id_cms": 7, "id_lang": 1, "meta_title": "A"},
            {"id_cms": 7, "id_lang": 2, "meta_title": "B"},
        ]]
        cms = Cms()

        loader.load(7, 0, cms, metadata_for(Cms), None, False)

        assert cms.id == 7
        assert cms.meta_title == {1: "A", 2: "B"}
        assert db.queries[1] == 'SELECT * FROM "tb_cms_lang" WHERE "id_cms" = 7'

    def test_single_language_is_scalar(self, loader, db):
        db.row_results = [{"id_cms": 7, "id_lang": 1, "meta_title": "A"}]
        cms = Cms()

        loader.load(7, 1, cms, metadata_for(Cms), None, False)

        assert cms.meta_title == "A"
        assert len(db.queries) == 1
        assert 'LEFT JOIN "tb_cms_lang" b ON a."id_cms" = b."id_cms" AND b.id_lang = 1' in db.queries[0]

    def test_language_join_ignores_shop_when_not_shop_scoped(self, loader, db):
        db.row_results = [{"id_cms": 7, "meta_title": "A"}]

        loader.load(7, 1, Cms(), metadata_for(Cms), 3, False)

        assert "b.id_shop" not in db.queries[0]

    def test_shop_scoped_translations_and_shop_table(self, loader, db):
        db.row_results = [{"id_product": 9, "price": 10, "name": "Mug"}]
        product = Product()

        loader.load(9, 1, product, metadata_for(Product), 2, False)

        sql = db.queries[0]
        assert "(b.id_shop = 2)" in sql
        assert 'LEFT JOIN "tb_product_shop" c ON a."id_product" = c."id_product" AND c.id_shop = 2' in sql
        assert product.name == "Mug"
        assert product.price == 10

    def test_all_languages_filtered_by_shop(self, loader, db):
        db.row_results = [{"id_product": 9}]
        db.statement_results = [[{"id_product": 9, "id_lang": 1, "id_shop": 2, "name": "Mug"}]]
        product = Product()

        loader.load(9, None, product, metadata_for(Product), 2, False)

        assert db.queries[1] == 'SELECT * FROM "tb_product_lang" WHERE "id_product" = 9 AND id_shop = 2'
        assert product.name == {1: "Mug"}

    def test_cached_translations_keep_language_keys(self, loader, db, cache):
        db.row_results = [{"id_cms": 7}]
        db.statement_results = [[{"id_cms": 7, "id_lang": 1, "meta_title": "A"}]]
        loader.load(7, None, Cms(), metadata_for(Cms), None, True)

        cached = Cms()
        loader.load(7, None, cached, metadata_for(Cms), None, True)

        assert cached.meta_title == {1: "A"}
        assert len(db.queries) == 2


class TestErrors:
    def test_driver_error_becomes_data_access_error(self, loader, db):
        boom = RuntimeError("connection reset")
        db.error = boom

        with pytest.raises(DataAccessError) as exc_info:
            loader.load(5, None, Tag(), metadata_for(Tag), None, False)

        assert exc_info.value.original_error is boom

    def test_data_access_error_propagates_unchanged(self, loader, db):
        error = DataAccessError("syntax error")
        db.error = error

        with pytest.raises(DataAccessError) as exc_info:
            loader.load(5, None, Tag(), metadata_for(Tag), None, False)

        assert exc_info.value is error
