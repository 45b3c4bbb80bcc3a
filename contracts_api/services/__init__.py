# Services module
from contracts_api.services.contract_lifecycle import ContractLifecycleManager
from contracts_api.services.payment_workflow import ContractWorkflow, ContractWorkflowService
from contracts_api.services.schedule_reconciler import ScheduleReconciler, sync_contract_schedule
from contracts_api.services.template_store import ContractTemplateStore

__all__ = [
    "ContractLifecycleManager",
    "ContractWorkflow",
    "ContractWorkflowService",
    # Measurement schedules
    "ScheduleReconciler",
    "sync_contract_schedule",
    "ContractTemplateStore",
]
