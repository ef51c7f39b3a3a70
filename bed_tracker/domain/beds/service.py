"""
Bed Lifecycle Service

Records manually requested bed transitions. Every transition on a bed runs
under that bed's exclusive lock, re-reads the row, checks the guard and writes
all of its field changes in one transaction.
"""

import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bed_tracker.core.config import settings
from bed_tracker.core.exceptions import (
    BaseCustomException,
    BedNotFoundError,
    ConflictError,
    InvalidTransitionError,
    OccupancyInvariantError,
    handle_database_error,
)
from bed_tracker.domain.beds.locks import KeyedLock, bed_locks
from bed_tracker.domain.beds.models import Bed, BedState
from bed_tracker.domain.beds.repository import BedRepository
from bed_tracker.domain.beds.state_machine import (
    ASSIGN,
    CLEAN,
    DISCHARGE,
    Transition,
    occupancy_is_consistent,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BedService:
    def __init__(
        self,
        db: AsyncSession,
        locks: KeyedLock = bed_locks,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.repo = BedRepository(db)
        self.locks = locks
        self.clock = clock

    async def create_bed(self, bed_number: str) -> Bed:
        """Provision a new bed in the available state"""
        if await self.repo.get_by_number(bed_number):
            raise ConflictError(
                message=f"Bed number '{bed_number}' already exists",
                details={"bed_number": bed_number},
                error_code="BED_NUMBER_TAKEN"
            )
        try:
            bed = await self.repo.create({"bed_number": bed_number, "state": BedState.AVAILABLE})
        except IntegrityError:
            # Lost a race with another request provisioning the same number
            await self.repo.abort()
            raise ConflictError(
                message=f"Bed number '{bed_number}' already exists",
                details={"bed_number": bed_number},
                error_code="BED_NUMBER_TAKEN"
            )
        except SQLAlchemyError as e:
            await self.repo.abort()
            raise handle_database_error(e, "create bed") from e

        logger.info(f"Provisioned bed {bed.bed_number} ({bed.id})")
        return bed

    async def get_bed(self, bed_id: str) -> Bed:
        bed = await self.repo.get(bed_id)
        if not bed:
            raise BedNotFoundError(bed_id)
        return bed

    async def list_beds(self, state: Optional[BedState] = None) -> List[Bed]:
        return await self.repo.list_ordered(state=state)

    async def export_all(self) -> AsyncIterator[Bed]:
        """Iterate over every bed in bed number order without loading them all"""
        async for bed in self.repo.stream_ordered(batch_size=settings.EXPORT_BATCH_SIZE):
            yield bed

    async def assign_patient(self, bed_id: str, patient_name: str, urgency_level: str) -> Bed:
        return await self._transition(
            bed_id, ASSIGN, patient_name=patient_name, urgency_level=urgency_level
        )

    async def discharge_patient(self, bed_id: str) -> Bed:
        return await self._transition(bed_id, DISCHARGE)

    async def mark_cleaned(self, bed_id: str) -> Bed:
        return await self._transition(bed_id, CLEAN)

    async def _transition(self, bed_id: str, transition: Transition, **params) -> Bed:
        async with self.locks.acquire(bed_id):
            try:
                bed = await self.repo.lock_and_read(bed_id)
                if bed is None:
                    raise BedNotFoundError(bed_id)

                if not transition.allowed_from(bed.state):
                    logger.warning(
                        f"Rejected {transition.name} on bed {bed.bed_number}: "
                        f"state is {bed.state.value}"
                    )
                    raise InvalidTransitionError(
                        transition.rejection,
                        transition=transition.name,
                        current_state=bed.state.value,
                    )

                changes = transition.changes(self.clock(), **params)
                after = {
                    field: changes.get(field, getattr(bed, field))
                    for field in ("state", "patient_name", "urgency_level")
                }
                if not occupancy_is_consistent(**after):
                    raise OccupancyInvariantError(after["state"].value)

                bed = await self.repo.commit(bed, changes)
            except BaseCustomException:
                await self.repo.abort()
                raise
            except SQLAlchemyError as e:
                await self.repo.abort()
                raise handle_database_error(e, f"{transition.name} bed {bed_id}") from e

        logger.info(f"Bed {bed.bed_number} {transition.name}: {transition.source.value} -> {bed.state.value}")
        return bed
