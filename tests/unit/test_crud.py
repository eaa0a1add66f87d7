from decimal import Decimal

from helpdesk.db import crud


async def _technician(db, name, email, availability=("09:00",)):
    user = await crud.create_user(db, name, email, "x", "technician")
    return await crud.create_technician(db, user, list(availability))


async def _call(db, tech, client, name="Printer"):
    return await crud.create_call(
        db, name=name, description="Printer is jammed again", status="open",
        client_id=client.id, technician_id=tech.id,
    )


async def test_create_and_get_technician(db):
    tech = await _technician(db, "Ana Tech", "ana@example.com", ["08:00", "09:00"])
    assert tech.id is not None
    assert tech.user.email == "ana@example.com"

    fetched = await crud.get_technician(db, tech.id)
    assert fetched is not None
    assert fetched.availability == ["08:00", "09:00"]

    by_user = await crud.get_technician_by_user(db, tech.user_id)
    assert by_user.id == tech.id


async def test_list_technicians_search_and_paging(db):
    await _technician(db, "Ana Tech", "ana@example.com")
    await _technician(db, "Bruno Tech", "bruno@example.com")
    await _technician(db, "Carla Tech", "carla@example.com")

    found, total = await crud.list_technicians(db, search="BRU")
    assert total == 1
    assert found[0].user.name == "Bruno Tech"

    page, total = await crud.list_technicians(db, offset=1, limit=1)
    assert total == 3
    assert [t.user.name for t in page] == ["Bruno Tech"]


async def test_service_lookup_by_name_and_ids(db):
    a = await crud.create_service(db, "Repair", Decimal("80.00"))
    b = await crud.create_service(db, "Backup", Decimal("40.00"), active=False)

    assert (await crud.get_service_by_name(db, "Repair")).id == a.id
    assert {s.id for s in await crud.get_services_by_ids(db, [a.id, b.id, "missing"])} == {a.id, b.id}
    active, total = await crud.list_services(db, active=True)
    assert [s.name for s in active] == ["Repair"] and total == 1
    everything, _ = await crud.list_services(db)
    assert [s.name for s in everything] == ["Backup", "Repair"]
    found, total = await crud.list_services(db, search="REP")
    assert [s.name for s in found] == ["Repair"] and total == 1
    first, total = await crud.list_services(db, offset=0, limit=1)
    assert [s.name for s in first] == ["Backup"] and total == 2


async def test_associations_keep_position_order(db):
    tech = await _technician(db, "Ana Tech", "ana@example.com")
    client = await crud.create_client(db, await crud.create_user(db, "Carla", "carla@example.com", "x", "client"))
    call = await _call(db, tech, client)
    s1 = await crud.create_service(db, "Repair", Decimal("80.00"))
    s2 = await crud.create_service(db, "Backup", Decimal("40.00"))

    assert await crud.next_position(db, call.id) == 0
    await crud.create_association(db, call.id, s2.id, Decimal("40.00"), 0)
    await crud.create_association(db, call.id, s1.id, Decimal("80.00"), await crud.next_position(db, call.id))

    lines = await crud.list_associations(db, call.id)
    assert [line.service_id for line in lines] == [s2.id, s1.id]
    assert await crud.get_association(db, call.id, s1.id) is not None

    await crud.delete_associations_except(db, call.id, s2.id)
    assert [line.service_id for line in await crud.list_associations(db, call.id)] == [s2.id]
    assert await crud.count_associations_for_service(db, s2.id) == 1
    assert await crud.count_active_calls_using_service(db, s2.id) == 1


async def test_find_other_in_progress_call(db):
    tech = await _technician(db, "Ana Tech", "ana@example.com")
    client = await crud.create_client(db, await crud.create_user(db, "Carla", "carla@example.com", "x", "client"))
    first = await _call(db, tech, client, "First")
    second = await _call(db, tech, client, "Second")

    assert await crud.find_other_in_progress_call(db, tech.id, second.id) is None
    first.status = "in_progress"
    await db.flush()
    assert (await crud.find_other_in_progress_call(db, tech.id, second.id)).id == first.id
    assert await crud.find_other_in_progress_call(db, tech.id, first.id) is None


async def test_list_calls_filters_and_orders_newest_first(db):
    tech = await _technician(db, "Ana Tech", "ana@example.com")
    client = await crud.create_client(db, await crud.create_user(db, "Carla", "carla@example.com", "x", "client"))
    first = await _call(db, tech, client, "First")
    second = await _call(db, tech, client, "Second")
    second.status = "closed"
    await db.flush()

    calls, total = await crud.list_calls(db, client_id=client.id)
    assert total == 2
    assert [c.id for c in calls] == [second.id, first.id]

    calls, total = await crud.list_calls(db, status="open", technician_id=tech.id)
    assert total == 1
    assert calls[0].id == first.id
