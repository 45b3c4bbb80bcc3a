from contracts_api.schemas.estimate import (
    Estimate,
    AwaitingEstimateResponse,
    AwaitingEstimateListResponse,
)
from contracts_api.schemas.workflow import (
    PaymentMethod,
    AgreementMethod,
    PaymentRecord,
    AgreementRecord,
    PaymentInput,
    AgreementInput,
    WorkflowStartRequest,
    WorkflowResponse,
)
from contracts_api.schemas.contract import (
    ContractUpdate,
    ContractResponse,
    ContractListResponse,
    ContractMutationResponse,
)
from contracts_api.schemas.schedule import ScheduleSyncResult
from contracts_api.schemas.template import (
    TemplateConfig,
    TemplateEntry,
    TemplateListResponse,
    CompanyProfile,
    NoticeText,
    AgreementItems,
    DocumentSection,
    ContractDocument,
)
