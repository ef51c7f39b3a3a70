from typing import Any, AsyncIterator, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, text
from bed_tracker.domain.beds.models import Bed, BedState


class BedRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: dict) -> Bed:
        bed = Bed(**data)
        self.db.add(bed)
        await self.db.commit()
        await self.db.refresh(bed)
        return bed

    async def get(self, bed_id: str) -> Optional[Bed]:
        result = await self.db.execute(select(Bed).where(Bed.id == bed_id))
        return result.scalar_one_or_none()

    async def get_by_number(self, bed_number: str) -> Optional[Bed]:
        result = await self.db.execute(select(Bed).where(Bed.bed_number == bed_number))
        return result.scalar_one_or_none()

    async def list_ordered(self, state: Optional[BedState] = None) -> List[Bed]:
        query = select(Bed).order_by(Bed.bed_number)
        if state:
            query = query.where(Bed.state == state)
        result = await self.db.execute(query)
        return result.scalars().all()

    async def stream_ordered(self, batch_size: int = 500) -> AsyncIterator[Bed]:
        """Yield every bed in bed number order, batch_size rows per fetch"""
        query = select(Bed).order_by(Bed.bed_number).execution_options(yield_per=batch_size)
        result = await self.db.stream_scalars(query)
        async for bed in result:
            yield bed

    async def lock_and_read(self, bed_id: str) -> Optional[Bed]:
        """Read the bed row under an exclusive row lock.

        The row is always reloaded from the database, overwriting any copy the
        session already holds. The lock lasts until commit() or abort().
        """
        if self.db.get_bind().dialect.name == "sqlite":
            # SQLite ignores FOR UPDATE. A no-op write as the first statement of the
            # transaction takes the database write lock before the row is read, so
            # other processes wait here until this transaction ends.
            await self.db.execute(
                text("UPDATE beds SET bed_number = bed_number WHERE id = :bed_id"), {"bed_id": bed_id}
            )
        result = await self.db.execute(
            select(Bed)
            .where(Bed.id == bed_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def commit(self, bed: Bed, changes: Dict[str, Any]) -> Bed:
        for field, value in changes.items():
            setattr(bed, field, value)
        self.db.add(bed)
        await self.db.commit()
        await self.db.refresh(bed)
        return bed

    async def abort(self) -> None:
        await self.db.rollback()
