"""
Tests for the awaiting-contract estimate list and the estimate resolver.
"""

import httpx
import pytest

from contracts_api.exceptions import NotFoundError
from contracts_api.repositories.estimates import SavedEstimateRepository
from contracts_api.services.awaiting_estimates import AwaitingEstimateService
from contracts_api.services.estimate_resolver import EstimateResolver, HttpEstimateSource
from contracts_api.utils.dates import business_today
from tests.factories import EstimateFactory, LineItemFactory


class TestAwaitingEstimateService:
    """Tests for AwaitingEstimateService."""

    @pytest.mark.asyncio
    async def test_add_keeps_number_and_local_copy(self, test_db):
        service = AwaitingEstimateService(test_db)

        entry = await service.add(EstimateFactory(estimateNo="E20250101-001"))

        assert entry.estimate_no == "E20250101-001"
        assert entry.approved_at is not None
        saved = await SavedEstimateRepository(test_db).get("E20250101-001")
        assert saved.payload["estimateNo"] == "E20250101-001"

    @pytest.mark.asyncio
    async def test_add_generates_missing_number(self, test_db):
        service = AwaitingEstimateService(test_db)
        base = f"E{business_today().strftime('%Y%m%d')}-"

        first = await service.add(EstimateFactory(estimateNo=None))
        second = await service.add(EstimateFactory(estimateNo=None))

        assert first.estimate_no == f"{base}001"
        assert second.estimate_no == f"{base}002"

    @pytest.mark.asyncio
    async def test_totals_default_from_rows(self, test_db):
        rows = [LineItemFactory(totalPrice=300000), LineItemFactory(totalPrice=200000)]
        document = EstimateFactory(rows=rows, totalAmount=None, discountedAmount=None)

        entry = await AwaitingEstimateService(test_db).add(document)

        assert entry.payload["totalAmount"] == 500000
        assert entry.payload["discountedAmount"] == 500000

    @pytest.mark.asyncio
    async def test_resubmission_replaces_entry(self, test_db):
        service = AwaitingEstimateService(test_db)
        await service.add(EstimateFactory(estimateNo="E20250101-001", customerName="김민수"))
        await service.add(EstimateFactory(estimateNo="E20250101-001", customerName="김민수 (수정)"))

        entries = await service.list()

        assert len(entries) == 1
        assert entries[0].payload["customerName"] == "김민수 (수정)"

    @pytest.mark.asyncio
    async def test_remove(self, test_db):
        service = AwaitingEstimateService(test_db)
        await service.add(EstimateFactory(estimateNo="E20250101-001"))

        await service.remove("E20250101-001")

        assert await service.list() == []
        # Local copy stays available to the resolver
        assert await EstimateResolver(test_db).resolve("E20250101-001") is not None

    @pytest.mark.asyncio
    async def test_remove_unknown(self, test_db):
        with pytest.raises(NotFoundError):
            await AwaitingEstimateService(test_db).remove("E20250101-404")


class TestEstimateResolver:
    """Tests for the estimate API / local copy fallback chain."""

    @pytest.mark.asyncio
    async def test_api_result_preferred(self, test_db):
        await SavedEstimateRepository(test_db).put("E20250101-001", EstimateFactory(estimateNo="E20250101-001", customerName="로컬"))
        await test_db.commit()

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["estimateNo"] == "E20250101-001"
            return httpx.Response(200, json=[EstimateFactory(estimateNo="E20250101-001", customerName="원격")])

        source = HttpEstimateSource("http://estimates.test", transport=httpx.MockTransport(handler))
        estimate = await EstimateResolver(test_db, http_source=source).resolve("E20250101-001")

        assert estimate.customer_name == "원격"

    @pytest.mark.asyncio
    async def test_falls_back_to_local_copy_when_api_fails(self, test_db):
        await SavedEstimateRepository(test_db).put("E20250101-001", EstimateFactory(estimateNo="E20250101-001", customerName="로컬"))
        await test_db.commit()

        source = HttpEstimateSource(
            "http://estimates.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        estimate = await EstimateResolver(test_db, http_source=source).resolve("E20250101-001")

        assert estimate.customer_name == "로컬"

    @pytest.mark.asyncio
    async def test_unknown_estimate(self, test_db):
        assert await EstimateResolver(test_db).resolve("E20250101-404") is None

    @pytest.mark.asyncio
    async def test_mark_contracted_without_local_copy(self, test_db):
        assert await EstimateResolver(test_db).mark_contracted("E20250101-404") is False
