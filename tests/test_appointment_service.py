import pytest
import pytest_asyncio
from conftest import program_document

from community_sport_api.app.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from community_sport_api.app.services.appointment_service import AppointmentService

ALICE = "alice@example.com"
BOB = "bob@example.com"


@pytest.fixture
def service(ctx):
    return AppointmentService(ctx)


@pytest_asyncio.fixture
async def program_id(ctx):
    return await ctx.store.create("programs", program_document(title="Netball Night"))


@pytest.mark.asyncio
async def test_create_appointment(service, ctx, program_id):
    result = await service.create_appointment(program_id, ALICE, ["mon-6pm"])

    assert result.success is True
    assert result.message == "Appointment booked successfully"
    stored = await ctx.store.get("appointments", result.appointment_id)
    assert stored["status"] == "confirmed"
    assert stored["user_email"] == ALICE
    assert stored["time_slot"] == ["mon-6pm"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "args, message",
    [
        ((None, ALICE, ["mon"]), "Missing required field: program_id"),
        (("p", "", ["mon"]), "Missing required field: user_email"),
        (("p", ALICE, None), "Missing required field: time_slot"),
        (("p", ALICE, []), "At least one time slot must be selected"),
    ],
)
async def test_create_appointment_validation(service, ctx, args, message):
    with pytest.raises(ValidationError) as exc_info:
        await service.create_appointment(*args)
    assert exc_info.value.message == message
    assert await ctx.store.list_all("appointments") == []


@pytest.mark.asyncio
async def test_create_appointment_for_unknown_program(service, ctx):
    with pytest.raises(NotFoundError):
        await service.create_appointment("missing", ALICE, ["mon-6pm"])
    assert await ctx.store.list_all("appointments") == []


@pytest.mark.asyncio
async def test_update_changes_only_time_slot(service, ctx, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])

    result = await service.update_appointment(created.appointment_id, ["wed-6pm", "fri-6pm"], ALICE)

    assert result.message == "Appointment updated successfully"
    stored = await ctx.store.get("appointments", created.appointment_id)
    assert stored["time_slot"] == ["wed-6pm", "fri-6pm"]
    assert stored["program_id"] == program_id
    assert stored["user_email"] == ALICE
    assert stored["status"] == "confirmed"


@pytest.mark.asyncio
async def test_update_by_another_user_is_refused(service, ctx, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])

    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.update_appointment(created.appointment_id, ["wed-6pm"], BOB)

    assert exc_info.value.message == "You do not have permission to update this appointment"
    assert (await ctx.store.get("appointments", created.appointment_id))["time_slot"] == ["mon-6pm"]


@pytest.mark.asyncio
async def test_update_missing_appointment(service):
    with pytest.raises(NotFoundError) as exc_info:
        await service.update_appointment("nope", ["wed-6pm"], ALICE)
    assert exc_info.value.message == "Appointment not found"


@pytest.mark.asyncio
async def test_update_requires_a_slot(service, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])
    with pytest.raises(ValidationError):
        await service.update_appointment(created.appointment_id, [], ALICE)


@pytest.mark.asyncio
async def test_cancel_keeps_the_record(service, ctx, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])

    result = await service.cancel_appointment(created.appointment_id, ALICE)

    assert result.success is True
    assert result.message == "Appointment cancelled successfully"
    assert result.appointment_id == created.appointment_id
    stored = await ctx.store.get("appointments", created.appointment_id)
    assert stored["status"] == "cancelled"
    assert stored["cancelled_at"]


@pytest.mark.asyncio
async def test_cancel_twice_is_a_conflict(service, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])
    await service.cancel_appointment(created.appointment_id, ALICE)

    with pytest.raises(ConflictError) as exc_info:
        await service.cancel_appointment(created.appointment_id, ALICE)
    assert exc_info.value.message == "Appointment is already cancelled"


@pytest.mark.asyncio
async def test_cancelled_appointment_cannot_be_updated(service, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])
    await service.cancel_appointment(created.appointment_id, ALICE)

    with pytest.raises(ConflictError):
        await service.update_appointment(created.appointment_id, ["wed-6pm"], ALICE)


@pytest.mark.asyncio
async def test_cancel_by_another_user_is_refused(service, ctx, program_id):
    created = await service.create_appointment(program_id, ALICE, ["mon-6pm"])

    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.cancel_appointment(created.appointment_id, BOB)

    assert exc_info.value.message == "You do not have permission to cancel this appointment"
    assert (await ctx.store.get("appointments", created.appointment_id))["status"] == "confirmed"


@pytest.mark.asyncio
async def test_list_is_newest_first_without_cancelled(service, ctx, program_id):
    def appointment(created_at, **overrides):
        document = {
            "program_id": program_id,
            "user_email": ALICE,
            "time_slot": ["mon-6pm"],
            "status": "confirmed",
            "created_at": created_at,
            "updated_at": created_at,
        }
        document.update(overrides)
        return document

    older = await ctx.store.create("appointments", appointment("2024-01-01T09:00:00+00:00"))
    newer = await ctx.store.create("appointments", appointment("2024-03-01T09:00:00+00:00"))
    await ctx.store.create("appointments", appointment("2024-04-01T09:00:00+00:00", status="cancelled"))
    await ctx.store.create("appointments", appointment("2024-05-01T09:00:00+00:00", user_email=BOB))

    listing = await service.get_user_appointments(ALICE)

    assert listing.success is True
    assert listing.count == 2
    assert [a.id for a in listing.appointments] == [newer, older]
    assert listing.appointments[0].program["title"] == "Netball Night"
    assert listing.appointments[0].program["ageGroups"] == ["adult"]


@pytest.mark.asyncio
async def test_list_uses_placeholder_for_missing_program(service, ctx):
    await ctx.store.create(
        "appointments",
        {"program_id": "gone", "user_email": ALICE, "time_slot": ["mon"], "status": "confirmed",
         "created_at": "2024-01-01T00:00:00+00:00", "updated_at": "2024-01-01T00:00:00+00:00"},
    )

    listing = await service.get_user_appointments(ALICE)

    assert listing.appointments[0].program == {"id": "gone", "title": "Program not found", "placeholder": True}


@pytest.mark.asyncio
async def test_list_uses_placeholder_when_program_lookup_fails(service, ctx, program_id, monkeypatch):
    await service.create_appointment(program_id, ALICE, ["mon-6pm"])

    async def _broken(program_id):
        raise RuntimeError("catalog unavailable")

    monkeypatch.setattr(ctx.cache, "get_program", _broken)

    listing = await service.get_user_appointments(ALICE)

    assert listing.count == 1
    assert listing.appointments[0].program["title"] == "Error loading program"
    assert listing.appointments[0].program["placeholder"] is True


@pytest.mark.asyncio
async def test_list_for_user_without_appointments(service):
    listing = await service.get_user_appointments("nobody@example.com")
    assert listing.appointments == []
    assert listing.count == 0
