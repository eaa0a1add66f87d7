"""Per-technician workload snapshot read from the store in one statement."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.errors import NoTechniciansRegistered
from helpdesk.models import TechnicianProfile, User, Call, CallStatus, ACTIVE_STATUSES
from helpdesk.schemas.technician import AvailabilityReport, TechnicianAvailability
from helpdesk.services.availability import is_available_now, format_clock


@dataclass(frozen=True)
class TechnicianWorkload:
    technician_id: str
    name: str
    email: str
    availability: tuple[str, ...]
    available: bool
    has_in_progress: bool
    active_calls: int


async def load_workload_snapshot(
    db: AsyncSession, now: datetime, tolerance_minutes: int,
) -> list[TechnicianWorkload]:
    """Roster with availability and open/in-progress call counts.

    Ordered by technician id. Raises NoTechniciansRegistered on an empty roster.
    """
    counts = (
        select(
            Call.technician_id.label("technician_id"),
            func.count(Call.id).label("active_calls"),
            func.sum(case((Call.status == CallStatus.IN_PROGRESS.value, 1), else_=0)).label("in_progress"),
        )
        .where(Call.status.in_(ACTIVE_STATUSES))
        .group_by(Call.technician_id)
        .subquery()
    )
    stmt = (
        select(
            TechnicianProfile.id,
            TechnicianProfile.availability,
            User.name,
            User.email,
            counts.c.active_calls,
            counts.c.in_progress,
        )
        .join(User, TechnicianProfile.user_id == User.id)
        .outerjoin(counts, counts.c.technician_id == TechnicianProfile.id)
        .order_by(TechnicianProfile.id)
    )
    rows = (await db.execute(stmt)).all()
    if not rows:
        raise NoTechniciansRegistered()

    snapshot = []
    for tech_id, slots, name, email, active_calls, in_progress in rows:
        slots = tuple(slots or ())
        snapshot.append(TechnicianWorkload(
            technician_id=tech_id,
            name=name,
            email=email,
            availability=slots,
            available=is_available_now(slots, now, tolerance_minutes),
            has_in_progress=bool(in_progress),
            active_calls=int(active_calls or 0),
        ))
    return snapshot


def build_availability_report(snapshot: list[TechnicianWorkload], now: datetime) -> AvailabilityReport:
    technicians = [
        TechnicianAvailability(
            id=t.technician_id,
            name=t.name,
            email=t.email,
            availability=list(t.availability),
            is_available_now=t.available,
            current_calls=t.active_calls,
            has_call_in_progress=t.has_in_progress,
        )
        for t in snapshot
    ]
    available = sum(1 for t in snapshot if t.available)
    return AvailabilityReport(
        current_time=format_clock(now),
        total_technicians=len(snapshot),
        available_technicians=available,
        unavailable_technicians=len(snapshot) - available,
        technicians=technicians,
        can_create_call=available > 0,
        message=(
            "Technicians are available to take calls."
            if available else
            "No technician is available right now."
        ),
    )


async def availability_report(db: AsyncSession, now: datetime, tolerance_minutes: int) -> AvailabilityReport:
    """Availability overview; an empty roster reports zero technicians instead of failing."""
    try:
        snapshot = await load_workload_snapshot(db, now, tolerance_minutes)
    except NoTechniciansRegistered:
        snapshot = []
    return build_availability_report(snapshot, now)
