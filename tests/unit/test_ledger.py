from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
import pytest_asyncio

from helpdesk.db import crud
from helpdesk.errors import (
    AssociationNotFound, BaseServiceProtected, DuplicateAssociation,
    InactiveOrMissingService, ServiceInUse,
)
from helpdesk.models import CallStatus
from helpdesk.schemas import AdditionalServiceItem, CallCreate, ServiceUpdate
from helpdesk.services import calls, catalog
from helpdesk.services.ledger import total_value
from tests.helpers import NOW


def _item(name, value):
    return AdditionalServiceItem(name=name, assigned_value=Decimal(value))


def test_total_value_sums_and_rounds_to_cents():
    lines = [SimpleNamespace(assigned_value=Decimal("10.10")), SimpleNamespace(assigned_value=Decimal("0.205"))]
    assert total_value(lines) == Decimal("10.30")
    assert total_value([]) == Decimal("0.00")


@pytest_asyncio.fixture
async def ctx(database, factory):
    _, tech_ctx = await factory.technician("Ana Tech")
    _, client_ctx = await factory.client()
    repair = await factory.service("Repair", "100.00")
    backup = await factory.service("Backup", "50.00")
    extra = await factory.service("Extra", "20.00")
    payload = CallCreate(
        name="Server down", description="The file server stopped responding",
        service_ids=[repair.id, backup.id],
    )
    call = await database.run(calls.create_call, client_ctx, payload, NOW, 30)
    return SimpleNamespace(
        tech=tech_ctx, client=client_ctx, call=call,
        repair=repair, backup=backup, extra=extra,
    )


async def _detail(database, ctx):
    return await database.run(calls.get_call, ctx.tech, ctx.call.id)


async def test_assigned_values_survive_catalog_price_changes(database, ctx):
    assert str(ctx.call.total_value) == "150.00"

    await database.run(catalog.update_service, ctx.repair.id, ServiceUpdate(value=Decimal("999.00")))

    detail = await _detail(database, ctx)
    assert [str(line.assigned_value) for line in detail.services] == ["100.00", "50.00"]
    assert str(detail.total_value) == "150.00"


async def test_add_service(database, ctx):
    detail = await database.run(calls.add_service, ctx.tech, ctx.call.id, ctx.extra.id, NOW)
    assert [line.id for line in detail.services] == [ctx.repair.id, ctx.backup.id, ctx.extra.id]
    assert str(detail.total_value) == "170.00"
    assert detail.updated_at is not None


async def test_add_service_rejects_duplicates_and_inactive(database, ctx):
    with pytest.raises(DuplicateAssociation):
        await database.run(calls.add_service, ctx.tech, ctx.call.id, ctx.backup.id, NOW)

    await database.run(catalog.set_service_active, ctx.extra.id, False)
    with pytest.raises(InactiveOrMissingService):
        await database.run(calls.add_service, ctx.tech, ctx.call.id, ctx.extra.id, NOW)
    with pytest.raises(InactiveOrMissingService):
        await database.run(calls.add_service, ctx.tech, ctx.call.id, str(uuid4()), NOW)


async def test_remove_service(database, ctx):
    detail = await database.run(calls.remove_service, ctx.tech, ctx.call.id, ctx.backup.id, NOW)
    assert [line.id for line in detail.services] == [ctx.repair.id]
    assert str(detail.total_value) == "100.00"

    with pytest.raises(AssociationNotFound):
        await database.run(calls.remove_service, ctx.tech, ctx.call.id, ctx.backup.id, NOW)


async def test_base_service_cannot_be_removed(database, ctx):
    with pytest.raises(BaseServiceProtected):
        await database.run(calls.remove_service, ctx.tech, ctx.call.id, ctx.repair.id, NOW)


async def test_replace_additional_services_keeps_base(database, ctx):
    detail = await database.run(
        calls.replace_additional_services, ctx.tech, ctx.call.id,
        [_item("Cabling", "30.00"), _item("Backup", "45.00")], NOW,
    )
    assert [line.name for line in detail.services] == ["Repair", "Cabling", "Backup"]
    assert [str(line.assigned_value) for line in detail.services] == ["100.00", "30.00", "45.00"]
    assert str(detail.total_value) == "175.00"

    # Unknown names become active catalog entries; known ones keep their catalog price.
    async with database.session_factory() as db:
        cabling = await crud.get_service_by_name(db, "Cabling")
        backup = await crud.get_service_by_name(db, "Backup")
    assert cabling.active and cabling.value == Decimal("30.00")
    assert backup.value == Decimal("50.00")


async def test_replace_with_empty_list_leaves_only_base(database, ctx):
    detail = await database.run(calls.replace_additional_services, ctx.tech, ctx.call.id, [], NOW)
    assert [line.id for line in detail.services] == [ctx.repair.id]


async def test_failed_replacement_leaves_lines_untouched(database, ctx):
    with pytest.raises(DuplicateAssociation):
        await database.run(
            calls.replace_additional_services, ctx.tech, ctx.call.id,
            [_item("Cabling", "30.00"), _item("Repair", "10.00")], NOW,
        )
    with pytest.raises(DuplicateAssociation):
        await database.run(
            calls.replace_additional_services, ctx.tech, ctx.call.id,
            [_item("Cabling", "30.00"), _item("Cabling", "35.00")], NOW,
        )

    detail = await _detail(database, ctx)
    assert [line.id for line in detail.services] == [ctx.repair.id, ctx.backup.id]
    assert detail.updated_at is None
    async with database.session_factory() as db:
        assert await crud.get_service_by_name(db, "Cabling") is None


async def test_catalog_guards(database, ctx):
    with pytest.raises(ServiceInUse):
        await database.run(catalog.delete_service, ctx.backup.id)
    with pytest.raises(ServiceInUse):
        await database.run(catalog.set_service_active, ctx.backup.id, False)

    await database.run(calls.update_status, ctx.tech, ctx.call.id, CallStatus.CLOSED, NOW)
    service = await database.run(catalog.set_service_active, ctx.backup.id, False)
    assert service.active is False
    with pytest.raises(ServiceInUse):
        await database.run(catalog.delete_service, ctx.backup.id)

    await database.run(catalog.delete_service, ctx.extra.id)
    page = await database.run(catalog.list_services, None)
    assert [s.name for s in page.services] == ["Backup", "Repair"]
