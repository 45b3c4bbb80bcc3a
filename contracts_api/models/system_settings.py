from sqlalchemy import Column, String, JSON, DateTime, Integer

from contracts_api.database import Base


class SystemSettingStore(Base):
    """Key-value settings store for contract configuration.

    Each row stores one settings category as a JSON blob
    (company profile, notice text, agreement checklist).
    """

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(50), unique=True, nullable=False, index=True)
    settings_data = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<SystemSettingStore category={self.category}>"
