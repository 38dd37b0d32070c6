from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class ParkingSpace(Base):
    __tablename__ = "parking_spaces"

    id = Column(String(50), primary_key=True)  # space-1, space-2 ...
    space_number = Column(Integer, unique=True, nullable=False)
    type = Column(String(20), nullable=False, default="standard")
    # standard | disabled | electric
    location = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    reservations = relationship("Reservation", back_populates="space")
