"""Technician selection over a workload snapshot. Pure, no I/O."""

from __future__ import annotations

import logging
from typing import Sequence

from helpdesk.errors import NoAvailableTechnician
from helpdesk.services.workload import TechnicianWorkload

logger = logging.getLogger(__name__)


def _least_loaded(pool: Sequence[TechnicianWorkload]) -> TechnicianWorkload:
    # Ties go to the lowest technician id so the result never depends on input order.
    return min(pool, key=lambda t: (t.active_calls, t.technician_id))


def select_technician(snapshot: Sequence[TechnicianWorkload]) -> TechnicianWorkload:
    """Pick one technician for a new call.

    1. keep technicians available now
    2. prefer those without an in-progress call
    3. among the chosen pool, take the fewest open + in-progress calls
    """
    available = [t for t in snapshot if t.available]
    if not available:
        raise NoAvailableTechnician()

    idle = [t for t in available if not t.has_in_progress]
    if idle:
        chosen = _least_loaded(idle)
        logger.info(
            "Selected technician %s (%s) with no call in progress, %d active calls",
            chosen.technician_id, chosen.name, chosen.active_calls,
        )
        return chosen

    chosen = _least_loaded(available)
    logger.info(
        "Selected technician %s (%s) by lowest load, %d active calls",
        chosen.technician_id, chosen.name, chosen.active_calls,
    )
    return chosen
