import uuid
from sqlalchemy import Column, Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from shared.core.database import Base


class ReservationClaim(Base):
    """One (space, date, half-day) slot held by a pending or active reservation.

    The unique constraint is what makes two overlapping reservations
    impossible to commit, whatever order their availability checks ran in.
    """
    __tablename__ = "reservation_claims"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reservation_id = Column(UUID(as_uuid=True), ForeignKey(
        "reservations.id", ondelete="CASCADE"), nullable=False, index=True)
    space_id = Column(String(50), nullable=False)
    claim_date = Column(Date, nullable=False)
    day_part = Column(String(2), nullable=False)  # am | pm

    __table_args__ = (
        UniqueConstraint("space_id", "claim_date", "day_part",
                         name="uq_space_date_day_part"),
    )

    reservation = relationship("Reservation", back_populates="claims")
