"""
Tests for template, contract-settings and awaiting-estimate endpoints.
"""
import pytest
from httpx import AsyncClient

from tests.factories import EstimateFactory

TEMPLATES_PREFIX = "/api/v2/contract-templates"
SETTINGS_PREFIX = "/api/v2/contract-settings"
ESTIMATES_PREFIX = "/api/v2/estimates"


class TestTemplatesAPI:
    """Tests for /contract-templates."""

    @pytest.mark.asyncio
    async def test_list_defaults(self, client: AsyncClient):
        response = await client.get(TEMPLATES_PREFIX)

        assert response.status_code == 200
        assert [t["key"] for t in response.json()["items"]] == ["template1", "template2", "template3"]

    @pytest.mark.asyncio
    async def test_field_catalog(self, client: AsyncClient):
        response = await client.get(f"{TEMPLATES_PREFIX}/fields")

        fields = response.json()
        assert len(fields) == 18
        assert {"key": "totalPrice", "label": "금액"} in fields

    @pytest.mark.asyncio
    async def test_update_and_read_back(self, client: AsyncClient):
        payload = {"name": "현장용", "fields": ["space", "productName", "widthMM"], "show_footer": False}

        response = await client.put(f"{TEMPLATES_PREFIX}/template2", json=payload)
        assert response.status_code == 200

        template = (await client.get(f"{TEMPLATES_PREFIX}/template2")).json()
        assert template["fields"] == ["space", "productName", "widthMM"]
        assert template["show_footer"] is False
        assert template["is_default"] is True

    @pytest.mark.asyncio
    async def test_update_unknown_template(self, client: AsyncClient):
        response = await client.put(f"{TEMPLATES_PREFIX}/template9", json={"name": "x", "fields": []})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, client: AsyncClient):
        response = await client.put(f"{TEMPLATES_PREFIX}/template1", json={"name": "", "fields": []})

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "body.name"


class TestContractSettingsAPI:
    """Tests for /contract-settings."""

    @pytest.mark.asyncio
    async def test_company_profile_round_trip(self, client: AsyncClient):
        assert (await client.get(f"{SETTINGS_PREFIX}/company")).json()["name"] == "[회사명]"

        profile = {"name": "커튼나라", "address": "서울시 강남구", "phone": "02-123-4567", "email": "info@curtain.kr"}
        await client.put(f"{SETTINGS_PREFIX}/company", json=profile)

        assert (await client.get(f"{SETTINGS_PREFIX}/company")).json() == profile

    @pytest.mark.asyncio
    async def test_notice_text(self, client: AsyncClient):
        await client.put(f"{SETTINGS_PREFIX}/notice", json={"text": "설치 후 7일 이내 교환 가능"})

        response = await client.get(f"{SETTINGS_PREFIX}/notice")

        assert response.json() == {"text": "설치 후 7일 이내 교환 가능"}

    @pytest.mark.asyncio
    async def test_agreement_items_drop_blanks(self, client: AsyncClient):
        response = await client.put(
            f"{SETTINGS_PREFIX}/agreement-items",
            json={"items": ["환불 규정에 동의합니다.", "", "  개인정보 수집에 동의합니다. "]},
        )

        assert response.json()["items"] == ["환불 규정에 동의합니다.", "개인정보 수집에 동의합니다."]


class TestAwaitingEstimatesAPI:
    """Tests for /estimates/awaiting."""

    @pytest.mark.asyncio
    async def test_add_list_remove(self, client: AsyncClient):
        response = await client.post(f"{ESTIMATES_PREFIX}/awaiting", json=EstimateFactory(estimateNo="E20250101-001"))
        assert response.status_code == 201
        assert response.json()["estimate"]["estimateNo"] == "E20250101-001"

        listing = (await client.get(f"{ESTIMATES_PREFIX}/awaiting")).json()
        assert [item["estimate_no"] for item in listing["items"]] == ["E20250101-001"]

        response = await client.delete(f"{ESTIMATES_PREFIX}/awaiting/E20250101-001")
        assert response.status_code == 204
        assert (await client.get(f"{ESTIMATES_PREFIX}/awaiting")).json()["total"] == 0

    @pytest.mark.asyncio
    async def test_remove_unknown(self, client: AsyncClient):
        response = await client.delete(f"{ESTIMATES_PREFIX}/awaiting/E20250101-404")

        assert response.status_code == 404


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers
