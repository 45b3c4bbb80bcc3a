from contracts_api.models.contract import Contract
from contracts_api.models.contract_template import ContractTemplate
from contracts_api.models.estimate import AwaitingEstimate, SavedEstimate
from contracts_api.models.system_settings import SystemSettingStore
from contracts_api.models.workflow_session import WorkflowSession

__all__ = [
    "Contract",
    "ContractTemplate",
    "AwaitingEstimate",
    "SavedEstimate",
    "SystemSettingStore",
    "WorkflowSession",
]
