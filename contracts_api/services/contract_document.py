"""
Contract document rendering.

Builds the ordered, renderable sections of a contract under a template.
The export layer (print, PDF, image) consumes these sections as-is.

Section order: header, customer_info, company_info, line_items, footer,
signature. A section whose toggle is off is left out entirely; the line-item
table is left out when the contract has no rows and the signature block when
no signature was captured.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, List, Optional
import logging

from contracts_api.models.contract import Contract
from contracts_api.schemas.template import (
    CompanyProfile,
    ContractDocument,
    DocumentSection,
    TemplateEntry,
)
from contracts_api.services.contract_fields import PLACEHOLDER, field_label, resolve_field_value
from contracts_api.services.contract_settings import ContractSettingsService
from contracts_api.services.template_store import ContractTemplateStore, DEFAULT_TEMPLATE_KEY
from contracts_api.utils.numbers import format_won

logger = logging.getLogger(__name__)


def _line(label: str, value: Any) -> Dict[str, str]:
    if value is None or value == "":
        value = PLACEHOLDER
    return {"label": label, "value": str(value)}


def build_sections(
    contract: Contract,
    template: TemplateEntry,
    company: CompanyProfile,
    notice_text: str,
) -> List[DocumentSection]:
    """Compose the toggled sections for ``contract``. Pure, no I/O."""
    sections: List[DocumentSection] = []

    if template.show_header:
        sections.append(DocumentSection(
            key="header",
            title="계약서",
            content={"subtitle": "CONTRACT"},
        ))

    if template.show_customer_info:
        contract_date = contract.contract_date.isoformat() if contract.contract_date else None
        sections.append(DocumentSection(
            key="customer_info",
            title="계약 정보",
            content={
                "contract": [
                    _line("계약번호", contract.contract_number),
                    _line("계약일자", contract_date),
                    _line("프로젝트", contract.project_name),
                    _line("총금액", format_won(contract.total_amount)),
                    _line("할인후금액", format_won(contract.discounted_amount)),
                    _line("계약금", format_won(contract.deposit_amount)),
                    _line("잔금", format_won(contract.remaining_amount)),
                ],
                "customer": [
                    _line("고객명", contract.customer_name),
                    _line("연락처", contract.contact),
                    _line("주소", contract.address),
                    _line("상태", contract.status_label),
                    _line("시공일자", contract.construction_date),
                ],
            },
        ))

    if template.show_company_info:
        sections.append(DocumentSection(
            key="company_info",
            content=company.model_dump(),
        ))

    rows = contract.rows or []
    if rows:
        sections.append(DocumentSection(
            key="line_items",
            title="계약 상세 내역",
            content={
                "columns": [{"key": key, "label": field_label(key)} for key in template.fields],
                "rows": [
                    [resolve_field_value(row, key) for key in template.fields]
                    for row in rows
                ],
            },
        ))

    if template.show_footer:
        sections.append(DocumentSection(key="footer", content={"text": notice_text}))

    if template.show_signature and contract.signature_data:
        signed_on = contract.contract_date.isoformat() if contract.contract_date else None
        sections.append(DocumentSection(
            key="signature",
            title="서명",
            content={"signature_data": contract.signature_data, "signed_on": signed_on},
        ))

    return sections


class ContractDocumentService:
    """Resolves template and settings, then renders a contract."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.template_store = ContractTemplateStore(db)
        self.contract_settings = ContractSettingsService(db)

    async def render(self, contract: Contract, template_key: Optional[str] = None) -> ContractDocument:
        template = await self.template_store.select_template(template_key or DEFAULT_TEMPLATE_KEY)
        company = await self.contract_settings.get_company_profile()
        notice_text = await self.contract_settings.get_notice_text()

        sections = build_sections(contract, template, company, notice_text)
        logger.debug(f"Rendered contract {contract.contract_number} with {template.key}: {len(sections)} sections")

        return ContractDocument(
            contract_id=contract.id,
            contract_number=contract.contract_number,
            template_key=template.key,
            template_name=template.name,
            sections=sections,
        )
