"""Repositories wrap the async session per entity. Services own the commit."""

from contracts_api.repositories.contracts import ContractRepository
from contracts_api.repositories.estimates import AwaitingEstimateRepository, SavedEstimateRepository
from contracts_api.repositories.templates import TemplateRepository
from contracts_api.repositories.settings import SettingsRepository
from contracts_api.repositories.workflows import WorkflowRepository

__all__ = [
    "ContractRepository",
    "AwaitingEstimateRepository",
    "SavedEstimateRepository",
    "TemplateRepository",
    "SettingsRepository",
    "WorkflowRepository",
]
