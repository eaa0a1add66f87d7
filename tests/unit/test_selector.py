from itertools import permutations

import pytest

from helpdesk.errors import NoAvailableTechnician
from helpdesk.services.selector import select_technician
from helpdesk.services.workload import TechnicianWorkload


def _tech(tech_id, available=True, in_progress=False, load=0):
    return TechnicianWorkload(
        technician_id=tech_id,
        name=f"Tech {tech_id}",
        email=f"{tech_id}@example.com",
        availability=("09:00",),
        available=available,
        has_in_progress=in_progress,
        active_calls=load,
    )


def test_empty_snapshot_raises():
    with pytest.raises(NoAvailableTechnician):
        select_technician([])


def test_nobody_available_raises():
    with pytest.raises(NoAvailableTechnician):
        select_technician([_tech("a", available=False), _tech("b", available=False)])


def test_unavailable_technician_never_chosen():
    chosen = select_technician([_tech("a", available=False, load=0), _tech("b", load=7)])
    assert chosen.technician_id == "b"


def test_prefers_technician_without_call_in_progress():
    snapshot = [
        _tech("a", in_progress=True, load=1),
        _tech("b", in_progress=False, load=5),
    ]
    assert select_technician(snapshot).technician_id == "b"


def test_least_loaded_among_idle():
    snapshot = [
        _tech("a", load=3),
        _tech("b", load=1),
        _tech("c", in_progress=True, load=0),
    ]
    assert select_technician(snapshot).technician_id == "b"


def test_falls_back_to_least_loaded_when_all_busy():
    snapshot = [
        _tech("a", in_progress=True, load=4),
        _tech("b", in_progress=True, load=2),
        _tech("c", in_progress=True, load=3),
    ]
    assert select_technician(snapshot).technician_id == "b"


def test_tie_break_does_not_depend_on_input_order():
    snapshot = [_tech("c", load=1), _tech("a", load=1), _tech("b", load=1), _tech("d", load=2)]
    chosen = {select_technician(list(order)).technician_id for order in permutations(snapshot)}
    assert chosen == {"a"}
