import csv
import io
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from bed_tracker.domain.beds.models import Bed
from bed_tracker.domain.beds.service import BedService

CSV_HEADER = ["Bed", "State", "Patient", "Urgency", "Assigned At"]
MISSING = "-"


def _or_missing(value: Optional[str]) -> str:
    return value if value else MISSING


def bed_to_row(bed: Bed) -> list:
    return [
        bed.bed_number,
        bed.state.value,
        _or_missing(bed.patient_name),
        _or_missing(bed.urgency_level),
        bed.assigned_at.isoformat() if bed.assigned_at else MISSING,
    ]


def _encode(row: list) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(row)
    return buffer.getvalue()


async def stream_beds_csv(session_factory: async_sessionmaker) -> AsyncIterator[str]:
    """Yield the CSV export line by line.

    Owns its session so the cursor stays open for as long as the response body
    is being sent.
    """
    yield _encode(CSV_HEADER)
    async with session_factory() as session:
        async for bed in BedService(session).export_all():
            yield _encode(bed_to_row(bed))
