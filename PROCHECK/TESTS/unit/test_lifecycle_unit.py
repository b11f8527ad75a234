# Руководство к файлу (TESTS/unit/test_lifecycle_unit.py)
# Назначение:
# - Unit-тесты машины состояний проверки (SERVICES/inspection_service.py):
#   создание из шаблона, назначение, старт, отмена, правка и отметка пунктов, выборки,
#   демонстрационная проверка в данных по умолчанию.

from __future__ import annotations

from datetime import datetime

import pytest

from PROCHECK.CORE.errors import InvalidStateError, NotFoundError, UnauthorizedError, ValidationFailedError
from PROCHECK.CORE.types import TERMINAL_STATUSES, CheckItemStatus, InspectionStatus
from PROCHECK.DATABASE.alembic import seed_defaults
from PROCHECK.DATABASE.session import make_session_factory
from PROCHECK.SERVICES import inspection_service, user_service
from PROCHECK.SERVICES.inspection_service import TRANSITIONS, ensure_transition


INSPECTOR_ID = "user-inspector"


def test_transition_table_never_leaves_terminal_or_enters_unreachable_states():
    for status in TERMINAL_STATUSES:
        assert TRANSITIONS[status] == frozenset()
    targets = set().union(*TRANSITIONS.values())
    assert InspectionStatus.DRAFT not in targets
    assert InspectionStatus.APPROVED not in targets
    assert InspectionStatus.PENDING_APPROVAL not in targets
    # Отмена доступна из любого нетерминального статуса
    for status, allowed in TRANSITIONS.items():
        if status not in TERMINAL_STATUSES:
            assert InspectionStatus.CANCELLED in allowed


@pytest.mark.asyncio
async def test_create_stamps_items_from_template(session, actors, make_draft):
    draft = make_draft(check_items=None, template_id="template-fire")

    inspection = await inspection_service.create_inspection(session, actors["customer"], draft)

    assert inspection.status == InspectionStatus.PENDING_APPROVAL.value
    assert inspection.customer_id == actors["customer"].id
    assert inspection.template_id == "template-fire"
    assert inspection.assigned_inspector_id is None
    assert inspection.report_id is None
    assert [item.text for item in inspection.check_items] == [
        "Проверка огнетушителей и их сроков годности",
        "Наличие схем эвакуации на видимых местах",
        "Работоспособность автоматической пожарной сигнализации",
    ]
    assert all(item.status == CheckItemStatus.UNCHECKED.value for item in inspection.check_items)
    assert len({item.id for item in inspection.check_items}) == 3


@pytest.mark.asyncio
async def test_manual_items_win_over_template(session, actors, make_draft):
    draft = make_draft(check_items=["Только этот пункт"], template_id="template-fire")

    inspection = await inspection_service.create_inspection(session, actors["customer"], draft)

    assert [item.text for item in inspection.check_items] == ["Только этот пункт"]


@pytest.mark.asyncio
async def test_create_with_empty_checklist_is_rejected_and_not_stored(session, actors, make_draft):
    with pytest.raises(ValidationFailedError):
        await inspection_service.create_inspection(session, actors["customer"], make_draft(check_items=[]))
    with pytest.raises(ValidationFailedError):
        await inspection_service.create_inspection(session, actors["customer"], make_draft(check_items=["  ", ""]))

    page = await inspection_service.list_inspections(session, actors["customer"])
    assert page["total"] == 0


@pytest.mark.asyncio
async def test_only_customer_creates_inspections(session, actors, make_draft):
    with pytest.raises(UnauthorizedError):
        await inspection_service.create_inspection(session, actors["senior"], make_draft())


@pytest.mark.asyncio
async def test_create_with_unknown_template(session, actors, make_draft):
    with pytest.raises(NotFoundError):
        await inspection_service.create_inspection(
            session, actors["customer"], make_draft(check_items=None, template_id="template-missing")
        )


@pytest.mark.asyncio
async def test_assign_sets_inspector_approver_and_plan_date(session, actors, make_draft):
    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())
    new_plan = datetime(2025, 4, 1, 10, 30)

    assigned = await inspection_service.assign_inspection(
        session, actors["senior"], inspection.id, INSPECTOR_ID, plan_date=new_plan
    )

    assert assigned.status == InspectionStatus.ASSIGNED.value
    assert assigned.assigned_inspector_id == INSPECTOR_ID
    assert assigned.approved_by_id == actors["senior"].id
    assert assigned.approved_at is not None
    assert assigned.plan_date == new_plan


@pytest.mark.asyncio
async def test_assign_requires_senior_and_existing_inspector(session, actors, make_draft):
    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())

    with pytest.raises(UnauthorizedError):
        await inspection_service.assign_inspection(session, actors["admin"], inspection.id, INSPECTOR_ID)
    with pytest.raises(NotFoundError):
        await inspection_service.assign_inspection(session, actors["senior"], inspection.id, "user-nobody")
    with pytest.raises(ValidationFailedError):
        await inspection_service.assign_inspection(session, actors["senior"], inspection.id, actors["customer"].id)

    current = await inspection_service.load_inspection(session, inspection.id)
    assert current.status == InspectionStatus.PENDING_APPROVAL.value
    assert current.assigned_inspector_id is None


@pytest.mark.asyncio
async def test_assign_twice_is_invalid(session, actors, make_draft):
    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())
    await inspection_service.assign_inspection(session, actors["senior"], inspection.id, INSPECTOR_ID)

    with pytest.raises(InvalidStateError):
        await inspection_service.assign_inspection(session, actors["senior"], inspection.id, INSPECTOR_ID)


@pytest.mark.asyncio
async def test_start_only_by_assigned_inspector(session, actors, make_draft):
    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())
    await inspection_service.assign_inspection(session, actors["senior"], inspection.id, INSPECTOR_ID)
    other = await user_service.create_user(
        session, actors["admin"], username="ins2", password="pw", role="inspector", full_name="Пётр Инспектор"
    )

    with pytest.raises(UnauthorizedError):
        await inspection_service.start_inspection(session, other, inspection.id)

    started = await inspection_service.start_inspection(session, actors["inspector"], inspection.id)
    assert started.status == InspectionStatus.IN_PROGRESS.value

    with pytest.raises(InvalidStateError):
        await inspection_service.start_inspection(session, actors["inspector"], inspection.id)


@pytest.mark.asyncio
async def test_cancel_is_terminal(session, actors, in_progress):
    cancelled = await inspection_service.cancel_inspection(session, actors["senior"], in_progress.id)
    assert cancelled.status == InspectionStatus.CANCELLED.value

    with pytest.raises(InvalidStateError):
        await inspection_service.cancel_inspection(session, actors["senior"], in_progress.id)
    with pytest.raises(InvalidStateError):
        ensure_transition(cancelled, InspectionStatus.IN_PROGRESS)


@pytest.mark.asyncio
async def test_customer_edits_only_before_assignment(session, actors, make_draft):
    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())

    edited = await inspection_service.update_inspection(
        session,
        actors["customer"],
        inspection.id,
        fields={"title": "Новое название", "enterprise_address": "Новый адрес"},
        check_items=["Пункт А", "Пункт Б", "Пункт В"],
    )
    assert edited.title == "Новое название"
    assert edited.enterprise_address == "Новый адрес"
    assert [item.text for item in edited.check_items] == ["Пункт А", "Пункт Б", "Пункт В"]
    assert edited.status == InspectionStatus.PENDING_APPROVAL.value

    with pytest.raises(ValidationFailedError):
        await inspection_service.update_inspection(session, actors["customer"], inspection.id, check_items=[])
    with pytest.raises(ValidationFailedError):
        await inspection_service.update_inspection(
            session, actors["customer"], inspection.id, fields={"status": InspectionStatus.COMPLETED.value}
        )

    await inspection_service.assign_inspection(session, actors["senior"], inspection.id, INSPECTOR_ID)
    with pytest.raises(InvalidStateError):
        await inspection_service.update_inspection(
            session, actors["customer"], inspection.id, fields={"title": "Поздно"}
        )


@pytest.mark.asyncio
async def test_check_item_status_leaves_inspection_status(session, actors, in_progress):
    item = in_progress.check_items[0]

    updated = await inspection_service.update_check_item_status(
        session, actors["inspector"], in_progress.id, item.id, CheckItemStatus.NON_COMPLIANT.value
    )

    assert updated.status == CheckItemStatus.NON_COMPLIANT.value
    current = await inspection_service.load_inspection(session, in_progress.id)
    assert current.status == InspectionStatus.IN_PROGRESS.value
    assert current.check_items[1].status == CheckItemStatus.UNCHECKED.value

    with pytest.raises(ValidationFailedError):
        await inspection_service.update_check_item_status(
            session, actors["inspector"], in_progress.id, item.id, "может быть"
        )
    with pytest.raises(NotFoundError):
        await inspection_service.update_check_item_status(
            session, actors["inspector"], in_progress.id, "check-missing", CheckItemStatus.COMPLIANT.value
        )


@pytest.mark.asyncio
async def test_check_items_frozen_after_cancel(session, actors, in_progress):
    await inspection_service.cancel_inspection(session, actors["senior"], in_progress.id)

    with pytest.raises(InvalidStateError):
        await inspection_service.update_check_item_status(
            session,
            actors["inspector"],
            in_progress.id,
            in_progress.check_items[0].id,
            CheckItemStatus.COMPLIANT.value,
        )


@pytest.mark.asyncio
async def test_photos_are_added_and_removed_by_inspector(session, actors, in_progress):
    with_photo = await inspection_service.add_photo(session, actors["inspector"], in_progress.id, "photos/1.jpg")
    assert [p.ref for p in with_photo.photos] == ["photos/1.jpg"]

    without = await inspection_service.remove_photo(session, actors["inspector"], in_progress.id, "photos/1.jpg")
    assert without.photos == []

    with pytest.raises(UnauthorizedError):
        await inspection_service.add_photo(session, actors["customer"], in_progress.id, "photos/2.jpg")


@pytest.mark.asyncio
async def test_listing_is_scoped_grouped_and_sorted(session, actors, make_draft):
    early = await inspection_service.create_inspection(
        session, actors["customer"], make_draft(title="Ранняя", plan_date=datetime(2025, 1, 5))
    )
    late = await inspection_service.create_inspection(
        session, actors["customer"], make_draft(title="Поздняя", plan_date=datetime(2025, 6, 5))
    )
    await inspection_service.assign_inspection(session, actors["senior"], late.id, INSPECTOR_ID)

    mine = await inspection_service.list_inspections(session, actors["customer"])
    assert [i.id for i in mine["items"]] == [early.id, late.id]

    newest_plan_first = await inspection_service.list_inspections(session, actors["senior"], descending=True)
    assert [i.id for i in newest_plan_first["items"]] == [late.id, early.id]

    pending = await inspection_service.list_inspections(session, actors["senior"], group="pending")
    assert [i.id for i in pending["items"]] == [early.id]

    assigned_to_me = await inspection_service.list_inspections(session, actors["inspector"])
    assert [i.id for i in assigned_to_me["items"]] == [late.id]

    await inspection_service.cancel_inspection(session, actors["senior"], early.id)
    active = await inspection_service.list_inspections(session, actors["senior"], active=True)
    assert [i.id for i in active["items"]] == [late.id]
    closed = await inspection_service.list_inspections(session, actors["senior"], active=False)
    assert [i.id for i in closed["items"]] == [early.id]

    with pytest.raises(ValidationFailedError):
        await inspection_service.list_inspections(session, actors["senior"], sort_by="title")
    with pytest.raises(ValidationFailedError):
        await inspection_service.list_inspections(session, actors["senior"], group="archive")


@pytest.mark.asyncio
async def test_customer_cannot_see_foreign_inspection(session, actors, make_draft):
    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())
    other = await user_service.create_user(
        session, actors["admin"], username="zakaz2", password="pw", role="customer", full_name="ООО «Другое»"
    )

    with pytest.raises(UnauthorizedError):
        await inspection_service.get_inspection(session, other, inspection.id)
    with pytest.raises(UnauthorizedError):
        await inspection_service.get_inspection(session, actors["inspector"], inspection.id)
    seen = await inspection_service.get_inspection(session, actors["senior"], inspection.id)
    assert seen.id == inspection.id


@pytest.mark.asyncio
async def test_admin_deletes_inspection_with_children(session, actors, in_progress):
    with pytest.raises(UnauthorizedError):
        await inspection_service.delete_inspection(session, actors["senior"], in_progress.id)

    await inspection_service.delete_inspection(session, actors["admin"], in_progress.id)

    with pytest.raises(NotFoundError):
        await inspection_service.load_inspection(session, in_progress.id)


@pytest.mark.asyncio
async def test_default_seed_includes_pending_sample_inspection(engine):
    factory = make_session_factory(engine)

    assert await seed_defaults(factory) is True
    assert await seed_defaults(factory) is False

    async with factory() as session:
        inspection = await inspection_service.load_inspection(session, "inspection-1")
        assert inspection.status == InspectionStatus.PENDING_APPROVAL.value
        assert inspection.customer_id == "user-customer"
        assert inspection.template_id == "template-fire"
        assert inspection.report_id is None
        assert [i.text for i in inspection.check_items] == [
            "Проверка огнетушителей и их сроков годности",
            "Наличие схем эвакуации на видимых местах",
            "Работоспособность автоматической пожарной сигнализации",
        ]
        assert {i.status for i in inspection.check_items} == {CheckItemStatus.UNCHECKED.value}
        assert inspection.plan_date < inspection.report_due_date
