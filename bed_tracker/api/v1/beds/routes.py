from typing import List, Optional
from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bed_tracker.core.exceptions import ErrorResponse
from bed_tracker.infrastructure.database import get_db, get_session_factory
from bed_tracker.domain.beds.models import BedState
from bed_tracker.domain.beds.service import BedService
from bed_tracker.api.v1.beds.export import stream_beds_csv
from bed_tracker.api.v1.beds.schemas import AssignRequest, BedCreate, BedResponse

router = APIRouter(tags=["Beds"])

TRANSITION_ERRORS = {
    404: {"model": ErrorResponse, "description": "Bed not found"},
    422: {"model": ErrorResponse, "description": "Transition not allowed from the current state"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}


@router.get("", response_model=List[BedResponse])
async def list_beds(state: Optional[BedState] = None, db: AsyncSession = Depends(get_db)):
    service = BedService(db)
    beds = await service.list_beds(state=state)
    return [BedResponse.model_validate(b) for b in beds]


@router.post(
    "",
    response_model=BedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Bed number already exists"}},
)
async def create_bed(bed_in: BedCreate, db: AsyncSession = Depends(get_db)):
    service = BedService(db)
    bed = await service.create_bed(bed_in.bed_number)
    return BedResponse.model_validate(bed)


@router.get("/export")
async def export_beds(session_factory: async_sessionmaker = Depends(get_session_factory)):
    return StreamingResponse(
        stream_beds_csv(session_factory),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="beds.csv"'},
    )


@router.get("/{bed_id}", response_model=BedResponse, responses={404: {"model": ErrorResponse}})
async def get_bed(bed_id: str, db: AsyncSession = Depends(get_db)):
    service = BedService(db)
    return BedResponse.model_validate(await service.get_bed(bed_id))


@router.post("/{bed_id}/assign", response_model=BedResponse, responses=TRANSITION_ERRORS)
async def assign_patient(bed_id: str, request: AssignRequest, db: AsyncSession = Depends(get_db)):
    service = BedService(db)
    bed = await service.assign_patient(bed_id, request.patient_name, request.urgency_level)
    return BedResponse.model_validate(bed)


@router.post("/{bed_id}/discharge", response_model=BedResponse, responses=TRANSITION_ERRORS)
async def discharge_patient(bed_id: str, db: AsyncSession = Depends(get_db)):
    service = BedService(db)
    return BedResponse.model_validate(await service.discharge_patient(bed_id))


@router.post("/{bed_id}/clean", response_model=BedResponse, responses=TRANSITION_ERRORS)
async def mark_cleaned(bed_id: str, db: AsyncSession = Depends(get_db)):
    service = BedService(db)
    return BedResponse.model_validate(await service.mark_cleaned(bed_id))
