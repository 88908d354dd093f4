import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from scoped_query.db.session import Base
from scoped_query.models.common import SoftDeleteMixin, TenantMixin, TimestampMixin, UUIDMixin, utcnow


class AppointmentWaitlist(Base, UUIDMixin, TimestampMixin, TenantMixin, SoftDeleteMixin):
    __tablename__ = "appointment_waitlists"
    __table_args__ = (
        UniqueConstraint("appointment_id", "patient_id", name="uq_appointment_waitlists_appointment_patient"),
    )

    appointment_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    patient_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    department_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True, default="ACTIVE")
    join_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
