import uuid
from datetime import datetime, timezone
from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship
from shared.core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    space_id = Column(String(50), ForeignKey(
        "parking_spaces.id"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # inclusive
    shift_type = Column(String(20), nullable=False)  # 8:00-14:00 | 14:00-21:00 | 9:30-18:30
    status = Column(String(16), nullable=False, default="pending")

    # {path, filename, size, content_type, uploaded_at}
    schedule_document = Column(
        JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # admin audit
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(UUID(as_uuid=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(UUID(as_uuid=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(UUID(as_uuid=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    admin_updated_by = Column(UUID(as_uuid=True), nullable=True)

    __table_args__ = (
        Index("ix_reservations_space_period",
              "space_id", "start_date", "end_date"),
    )

    space = relationship("ParkingSpace", back_populates="reservations")
    claims = relationship(
        "ReservationClaim",
        back_populates="reservation",
        cascade="all, delete-orphan",
    )
