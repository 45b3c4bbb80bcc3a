from pydantic import BaseModel, Field
from typing import Optional, List, Any, Dict


class TemplateConfig(BaseModel):
    """Selected output fields and section toggles for a contract document."""
    name: str = Field(..., min_length=1, max_length=255)
    fields: List[str] = []
    show_header: bool = True
    show_customer_info: bool = True
    show_company_info: bool = True
    show_footer: bool = True
    show_signature: bool = True


class TemplateEntry(TemplateConfig):
    key: str
    is_default: bool = False


class TemplateListResponse(BaseModel):
    items: List[TemplateEntry]


class OutputField(BaseModel):
    key: str
    label: str


class CompanyProfile(BaseModel):
    name: str = "[회사명]"
    address: str = "[회사주소]"
    phone: str = "[전화번호]"
    email: str = "[이메일]"


class NoticeText(BaseModel):
    text: str


class AgreementItems(BaseModel):
    items: List[str]


class DocumentSection(BaseModel):
    """One renderable block of a contract document."""
    key: str
    title: Optional[str] = None
    content: Dict[str, Any] = {}


class ContractDocument(BaseModel):
    """Ordered renderable sections for a contract under a template."""
    contract_id: int
    contract_number: str
    template_key: str
    template_name: str
    sections: List[DocumentSection]
