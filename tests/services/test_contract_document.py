"""
Tests for contract document rendering.
"""

from datetime import date

import pytest

from contracts_api.models.contract import Contract
from contracts_api.schemas.template import CompanyProfile, TemplateConfig, TemplateEntry
from contracts_api.services.contract_document import ContractDocumentService, build_sections
from contracts_api.services.contract_fields import SERVICE_ITEM_LABEL
from contracts_api.services.contract_settings import ContractSettingsService, DEFAULT_NOTICE_TEXT
from contracts_api.services.template_store import ContractTemplateStore


def make_contract(**overrides) -> Contract:
    values = dict(
        id=1735700400000,
        contract_number="C20250101-001",
        estimate_no="E20250101-001",
        contract_date=date(2025, 1, 1),
        customer_name="김민수",
        contact="010-1234-5678",
        address="서울특별시 강남구 역삼동 래미안아파트 101동 1203호",
        project_name="김민수님 댁 커튼 시공",
        total_amount=1000000.0,
        discounted_amount=1000000.0,
        deposit_amount=300000.0,
        remaining_amount=700000.0,
        status="signed",
        signature_data="data:image/png;base64,AAAA",
        rows=[
            {"productName": "나비주름 암막커튼", "quantity": 2, "totalPrice": 1000000},
            {"productName": "레일 설치", "quantity": 1, "totalPrice": 0},
        ],
    )
    values.update(overrides)
    return Contract(**values)


def template(**toggles) -> TemplateEntry:
    return TemplateEntry(key="template1", name="기본 템플릿", fields=["productName", "quantity", "totalPrice"], **toggles)


def section_keys(sections):
    return [s.key for s in sections]


class TestBuildSections:
    """Tests for section composition."""

    def test_all_sections_in_order(self):
        sections = build_sections(make_contract(), template(), CompanyProfile(), "안내")

        assert section_keys(sections) == [
            "header", "customer_info", "company_info", "line_items", "footer", "signature",
        ]

    def test_disabled_sections_are_absent(self):
        sections = build_sections(
            make_contract(),
            template(show_company_info=False, show_footer=False),
            CompanyProfile(),
            "안내",
        )

        assert section_keys(sections) == ["header", "customer_info", "line_items", "signature"]

    def test_signature_needs_payload(self):
        sections = build_sections(make_contract(signature_data=None), template(), CompanyProfile(), "안내")

        assert "signature" not in section_keys(sections)

    def test_signature_toggle_off(self):
        sections = build_sections(make_contract(), template(show_signature=False), CompanyProfile(), "안내")

        assert "signature" not in section_keys(sections)

    def test_line_items_follow_template_fields(self):
        sections = build_sections(make_contract(), template(), CompanyProfile(), "안내")
        items = next(s for s in sections if s.key == "line_items")

        assert [c["label"] for c in items.content["columns"]] == ["제품명", "수량", "금액"]
        assert items.content["rows"][0] == ["나비주름 암막커튼", "2", "1,000,000원"]
        assert items.content["rows"][1][2] == SERVICE_ITEM_LABEL

    def test_no_rows_no_line_items(self):
        sections = build_sections(make_contract(rows=[]), template(), CompanyProfile(), "안내")

        assert "line_items" not in section_keys(sections)

    def test_customer_info_amounts_formatted(self):
        sections = build_sections(make_contract(), template(), CompanyProfile(), "안내")
        info = next(s for s in sections if s.key == "customer_info")

        contract_lines = {line["label"]: line["value"] for line in info.content["contract"]}
        customer_lines = {line["label"]: line["value"] for line in info.content["customer"]}
        assert contract_lines["잔금"] == "700,000원"
        assert contract_lines["계약일자"] == "2025-01-01"
        assert customer_lines["상태"] == "계약완료"
        assert customer_lines["시공일자"] == "-"


class TestContractDocumentService:
    @pytest.mark.asyncio
    async def test_render_with_defaults(self, test_db):
        document = await ContractDocumentService(test_db).render(make_contract())

        footer = next(s for s in document.sections if s.key == "footer")
        company = next(s for s in document.sections if s.key == "company_info")
        assert document.template_key == "template1"
        assert footer.content["text"] == DEFAULT_NOTICE_TEXT
        assert company.content["name"] == "[회사명]"

    @pytest.mark.asyncio
    async def test_render_uses_saved_settings(self, test_db):
        await ContractSettingsService(test_db).update_company_profile(CompanyProfile(name="커튼나라"))
        await ContractSettingsService(test_db).update_notice_text("설치 후 7일 이내 교환 가능")
        await ContractTemplateStore(test_db).update_template(
            "template2", TemplateConfig(name="상세", fields=["productName"], show_header=False)
        )

        document = await ContractDocumentService(test_db).render(make_contract(), template_key="template2")

        assert document.template_name == "상세"
        assert section_keys(document.sections)[0] == "customer_info"
        assert document.sections[1].content["name"] == "커튼나라"
        assert next(s for s in document.sections if s.key == "footer").content["text"] == "설치 후 7일 이내 교환 가능"
