from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime
from bed_tracker.domain.beds.models import BedState


class BedCreate(BaseModel):
    bed_number: str = Field(..., min_length=1, max_length=20)


class AssignRequest(BaseModel):
    patient_name: str = Field(..., min_length=1, max_length=255)
    urgency_level: str = Field(..., min_length=1, max_length=50)


class BedResponse(BaseModel):
    id: str
    bed_number: str
    state: BedState
    patient_name: Optional[str] = None
    urgency_level: Optional[str] = None
    assigned_at: Optional[datetime] = None
    discharged_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
