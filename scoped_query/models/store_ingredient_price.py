import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Numeric
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from scoped_query.db.session import Base
from scoped_query.models.common import SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDMixin


class StoreIngredientPrice(Base, UUIDMixin, TimestampMixin, TenantMixin, SoftDeleteMixin):
    __tablename__ = "store_ingredient_prices"

    grocery_store_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    ingredient_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, index=True)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
