from sqlalchemy import Column, String, DateTime, Enum, func
import enum
import uuid

from bed_tracker.infrastructure.database import Base


def gen_uuid():
    return str(uuid.uuid4())


class BedState(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class Bed(Base):
    __tablename__ = "beds"

    id = Column(String(36), primary_key=True, default=gen_uuid)
    bed_number = Column(String(20), unique=True, nullable=False, index=True)
    state = Column(
        Enum(
            BedState,
            name="bed_state",
            native_enum=False,
            create_constraint=True,
            length=20,
            values_callable=lambda states: [s.value for s in states],
        ),
        nullable=False,
        default=BedState.AVAILABLE,
        index=True,
    )
    patient_name = Column(String(255), nullable=True)
    urgency_level = Column(String(50), nullable=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    discharged_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Bed {self.bed_number} {self.state.value if self.state else None}>"
