from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from app.core.database import Base
from app.models.shared import MoneyType, UUIDType, generate_uuid


class Plan(Base):
    """Hosting plan in the storefront catalog."""

    __tablename__ = "plans"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cpu = Column(Integer, nullable=False, default=0)
    ram = Column(Integer, nullable=False, default=0)
    disk = Column(Integer, nullable=False, default=0)
    databases = Column(Integer, nullable=False, default=0)
    backups = Column(Integer, nullable=False, default=0)
    price_monthly = Column(MoneyType, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_custom = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
