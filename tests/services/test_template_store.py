"""
Tests for contract template configuration.
"""

import pytest

from contracts_api.exceptions import NotFoundError
from contracts_api.repositories.templates import TemplateRepository
from contracts_api.schemas.template import TemplateConfig
from contracts_api.services.template_store import ContractTemplateStore, DEFAULT_TEMPLATES


@pytest.fixture
def store(test_db):
    return ContractTemplateStore(test_db)


class TestListTemplates:
    @pytest.mark.asyncio
    async def test_defaults_when_nothing_saved(self, store):
        entries = await store.list_templates()

        assert [e.key for e in entries] == ["template1", "template2", "template3"]
        assert all(e.is_default for e in entries)
        assert entries[0].fields == ["productName", "quantity", "totalPrice"]

    @pytest.mark.asyncio
    async def test_saved_template_overrides_default(self, store):
        await store.update_template("template2", TemplateConfig(name="현장용", fields=["space", "productName"]))

        entries = await store.list_templates()

        assert [e.key for e in entries] == ["template1", "template2", "template3"]
        assert entries[1].name == "현장용"
        assert entries[1].fields == ["space", "productName"]
        assert entries[1].is_default is True

    @pytest.mark.asyncio
    async def test_seeded_custom_keys_listed_after_defaults(self, store, test_db):
        await TemplateRepository(test_db).put("office", TemplateConfig(name="사무실용", fields=["brand"]))
        await test_db.commit()

        entries = await store.list_templates()

        assert entries[-1].key == "office"
        assert entries[-1].is_default is False


class TestSelectTemplate:
    @pytest.mark.asyncio
    async def test_select_default(self, store):
        entry = await store.select_template("template3")

        assert entry.name == DEFAULT_TEMPLATES["template3"].name
        assert len(entry.fields) == 18

    @pytest.mark.asyncio
    async def test_select_unknown_key(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.select_template("template9")

        assert exc_info.value.operation == "select_template"
        assert exc_info.value.resource_id == "template9"


class TestUpdateTemplate:
    @pytest.mark.asyncio
    async def test_round_trip(self, store):
        config = TemplateConfig(
            name="간단 템플릿",
            fields=["totalPrice", "productName", "colorCode"],
            show_company_info=False,
            show_signature=False,
        )

        await store.update_template("template1", config)
        entry = await store.select_template("template1")

        # Field order and unknown keys are kept verbatim
        assert entry.fields == ["totalPrice", "productName", "colorCode"]
        assert entry.show_company_info is False
        assert entry.show_signature is False
        assert entry.show_header is True

    @pytest.mark.asyncio
    async def test_update_persists_across_sessions(self, store, test_db):
        await store.update_template("template1", TemplateConfig(name="기본", fields=["brand"]))

        fresh = ContractTemplateStore(test_db)
        entry = await fresh.select_template("template1")

        assert entry.fields == ["brand"]

    @pytest.mark.asyncio
    async def test_update_unknown_key(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            await store.update_template("template9", TemplateConfig(name="x"))

        assert exc_info.value.operation == "update_template"
