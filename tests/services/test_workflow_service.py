"""
Tests for persisted workflow sessions and finalization.
"""

import pytest

from contracts_api.exceptions import ConflictError, NotFoundError
from contracts_api.models.estimate import CONTRACTED_STATUS
from contracts_api.repositories.contracts import ContractRepository
from contracts_api.repositories.estimates import AwaitingEstimateRepository, SavedEstimateRepository
from contracts_api.schemas.workflow import PaymentInput, WorkflowStartRequest
from contracts_api.services.payment_workflow import AWAITING_AGREEMENT, ContractWorkflowService
from contracts_api.services.contract_settings import ContractSettingsService, DEFAULT_AGREEMENT_ITEMS
from tests.factories import EstimateFactory


@pytest.fixture
def service(test_db):
    return ContractWorkflowService(test_db)


class TestWorkflowService:
    """Tests for ContractWorkflowService."""

    @pytest.mark.asyncio
    async def test_start_from_awaiting_entry(self, service, test_db):
        await AwaitingEstimateRepository(test_db).put("E20250101-001", EstimateFactory(estimateNo="E20250101-001"))
        await test_db.commit()

        workflow = await service.start(WorkflowStartRequest(estimate_no="E20250101-001"))

        assert workflow.estimate.estimate_no == "E20250101-001"

    @pytest.mark.asyncio
    async def test_start_from_local_copy(self, service, test_db):
        await SavedEstimateRepository(test_db).put("E20250101-001", EstimateFactory(estimateNo="E20250101-001"))
        await test_db.commit()

        workflow = await service.start(WorkflowStartRequest(estimate_no="E20250101-001"))

        assert workflow.estimate.estimate_no == "E20250101-001"

    @pytest.mark.asyncio
    async def test_start_unknown_estimate(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            await service.start(WorkflowStartRequest(estimate_no="E20250101-404"))

        assert exc_info.value.operation == "start_workflow"

    @pytest.mark.asyncio
    async def test_state_survives_reload(self, service, test_db):
        workflow = await service.start(WorkflowStartRequest(estimate=EstimateFactory(totalAmount=1000000, discountedAmount=None)))
        await service.submit_payment(workflow.workflow_id, PaymentInput(deposit_amount=250000))

        reloaded = await ContractWorkflowService(test_db).get(workflow.workflow_id)

        assert reloaded.state == AWAITING_AGREEMENT
        assert reloaded.payment.remaining_amount == 750000

    @pytest.mark.asyncio
    async def test_finalize_creates_contract_and_closes_estimate(self, service, test_db):
        document = EstimateFactory(estimateNo="E20250101-001")
        await AwaitingEstimateRepository(test_db).put("E20250101-001", document)
        await SavedEstimateRepository(test_db).put("E20250101-001", document)
        await test_db.commit()

        workflow = await service.start(WorkflowStartRequest(estimate_no="E20250101-001"))
        await service.submit_payment(workflow.workflow_id, PaymentInput(deposit_amount=100000))
        await service.submit_agreement(workflow.workflow_id, "signature", "data:image/png;base64,AAAA")

        finished, contract = await service.finalize(workflow.workflow_id)

        assert finished.contract_id == contract.id
        assert contract.signature_data == "data:image/png;base64,AAAA"
        assert contract.agreement_confirmed is True
        assert await AwaitingEstimateRepository(test_db).get("E20250101-001") is None
        assert (await SavedEstimateRepository(test_db).get("E20250101-001")).status == CONTRACTED_STATUS

        with pytest.raises(ConflictError):
            await service.finalize(workflow.workflow_id)
        assert len(await ContractRepository(test_db).list()) == 1

    @pytest.mark.asyncio
    async def test_describe_includes_agreement_items(self, service, test_db):
        await ContractSettingsService(test_db).update_agreement_items(["환불 규정에 동의합니다.", "  "])
        workflow = await service.start(WorkflowStartRequest(estimate=EstimateFactory()))

        response = await service.describe(workflow)

        assert response.agreement_items == ["환불 규정에 동의합니다."]
        assert response.payment is None
        assert response.payment_draft.deposit_amount == 0


class TestContractSettingsService:
    @pytest.mark.asyncio
    async def test_defaults(self, test_db):
        service = ContractSettingsService(test_db)

        assert (await service.get_company_profile()).name == "[회사명]"
        assert await service.get_agreement_items() == DEFAULT_AGREEMENT_ITEMS

    @pytest.mark.asyncio
    async def test_empty_notice_is_kept(self, test_db):
        service = ContractSettingsService(test_db)

        await service.update_notice_text("")

        assert await service.get_notice_text() == ""
