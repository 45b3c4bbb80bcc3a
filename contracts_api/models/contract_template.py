"""Contract Template model for saved document layouts."""

from sqlalchemy import Column, String, DateTime, Integer, Boolean, JSON

from contracts_api.database import Base


class ContractTemplate(Base):
    """A named output layout: selected line-item fields and section toggles."""

    __tablename__ = "contract_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Template identification ("template1", "template2", ...)
    key = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    # Ordered output-field keys, stored verbatim
    fields = Column(JSON, nullable=False, default=list)
    # Example: ["productName", "quantity", "totalPrice"]

    # Section toggles
    show_header = Column(Boolean, nullable=False, default=True)
    show_customer_info = Column(Boolean, nullable=False, default=True)
    show_company_info = Column(Boolean, nullable=False, default=True)
    show_footer = Column(Boolean, nullable=False, default=True)
    show_signature = Column(Boolean, nullable=False, default=True)

    # Display order among templates
    position = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<ContractTemplate {self.key} - {self.name}>"
