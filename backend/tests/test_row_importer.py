"""Tests for the sequential row importer and import sessions."""
from datetime import datetime, timedelta

import pytest

from wedding_admin.services.csv_import_service import parse_csv_text
from wedding_admin.services.row_importer import (
    ImportSession,
    ImportSessionStore,
    ImportState,
    OutcomeStatus,
    RowImporter,
    percent_complete,
)


def _csv(*names):
    lines = ["name,email"] + [f"{n},{n.lower()}@example.com" for n in names]
    return "\n".join(lines)


# ─── Progress ─────────────────────────────────────────────────────────────────

def test_percent_complete_rounds_half_up():
    assert percent_complete(1, 8) == 13
    assert percent_complete(1, 3) == 33
    assert percent_complete(2, 3) == 67
    assert percent_complete(3, 3) == 100


def test_percent_complete_empty_run():
    assert percent_complete(0, 0) == 100


# ─── Runs ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_one_outcome_per_row_in_input_order(couple_kind, fake_edge):
    rows = parse_csv_text(_csv("Ana", "Ben", "Cy", "Dee", "Eli"), couple_kind.columns)
    session = ImportSession(kind=couple_kind, user_id="u1")

    await RowImporter(couple_kind, fake_edge).run(session, rows)

    assert [o.name for o in session.outcomes] == ["Ana", "Ben", "Cy", "Dee", "Eli"]
    assert [p["name"] for _, p in fake_edge.calls] == ["Ana", "Ben", "Cy", "Dee", "Eli"]
    assert all(fn == "create-couple" for fn, _ in fake_edge.calls)


@pytest.mark.asyncio
async def test_progress_is_non_decreasing_and_ends_at_100(couple_kind, fake_edge):
    rows = parse_csv_text(_csv("Ana", "Ben", "Cy"), couple_kind.columns)
    session = ImportSession(kind=couple_kind, user_id="u1")
    observed = []

    def watch(function_name, payload):
        # Outcome count always matches completed rows while the run is active
        assert len(session.outcomes) == len(observed)
        observed.append(session.progress)

    fake_edge.on_invoke = watch
    await RowImporter(couple_kind, fake_edge).run(session, rows)
    observed.append(session.progress)

    assert observed == [0, 33, 67, 100]
    assert observed == sorted(observed)


@pytest.mark.asyncio
async def test_failed_row_does_not_stop_the_run(couple_kind, fake_edge):
    rows = parse_csv_text(_csv("Ana", "Ben", "Cy"), couple_kind.columns)
    session = ImportSession(kind=couple_kind, user_id="u1")
    fake_edge.fail_names = {"Ben"}

    await RowImporter(couple_kind, fake_edge).run(session, rows)

    assert [o.status for o in session.outcomes] == [
        OutcomeStatus.SUCCESS, OutcomeStatus.FAILED, OutcomeStatus.SUCCESS,
    ]
    assert session.outcomes[1].email == "ben@example.com"
    assert len(fake_edge.calls) == 3


@pytest.mark.asyncio
async def test_raised_error_becomes_failed_outcome(couple_kind, fake_edge):
    rows = parse_csv_text(_csv("Ana", "Ben", "Cy"), couple_kind.columns)
    session = ImportSession(kind=couple_kind, user_id="u1")
    fake_edge.raise_names = {"Ben"}

    await RowImporter(couple_kind, fake_edge).run(session, rows)

    assert [o.status.value for o in session.outcomes] == ["Success", "Failed", "Success"]


@pytest.mark.asyncio
async def test_all_failed_run_still_completes(couple_kind, fake_edge):
    rows = parse_csv_text(_csv("Ana", "Ben"), couple_kind.columns)
    session = ImportSession(kind=couple_kind, user_id="u1")
    fake_edge.fail_names = {"Ana", "Ben"}

    await RowImporter(couple_kind, fake_edge).run(session, rows)

    assert session.state == ImportState.COMPLETED
    assert session.finished is True
    assert session.progress == 100
    assert session.failed_count == 2
    assert session.notifications == [
        {"level": "success", "message": "Couples imported successfully!"}
    ]


@pytest.mark.asyncio
async def test_empty_file_completes_without_requests(couple_kind, fake_edge):
    session = ImportSession(kind=couple_kind, user_id="u1")

    await RowImporter(couple_kind, fake_edge).run(session, [])

    assert fake_edge.calls == []
    assert session.outcomes == []
    assert session.progress == 100
    assert session.state == ImportState.COMPLETED


@pytest.mark.asyncio
async def test_failure_reason_is_not_kept_on_outcome(couple_kind, fake_edge):
    rows = parse_csv_text(_csv("Ana"), couple_kind.columns)
    session = ImportSession(kind=couple_kind, user_id="u1")
    fake_edge.fail_names = {"Ana"}

    await RowImporter(couple_kind, fake_edge).run(session, rows)

    outcome = session.outcomes[0]
    assert outcome.status == OutcomeStatus.FAILED
    assert not hasattr(outcome, "error")


@pytest.mark.asyncio
async def test_vendor_outcome_uses_user_id_as_email(vendor_kind, fake_edge):
    rows = parse_csv_text(vendor_kind.template, vendor_kind.columns)
    session = ImportSession(kind=vendor_kind, user_id="u1")

    await RowImporter(vendor_kind, fake_edge).run(session, rows)

    assert session.outcomes[0].email == "john@example.com"
    assert fake_edge.calls[0][0] == "create-vendor"
    assert session.notifications[0]["message"] == "Vendors imported successfully!"


# ─── Sessions ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_reopened_session_starts_clean(couple_kind, fake_edge):
    store = ImportSessionStore()
    session = store.open(couple_kind, "u1")
    rows = parse_csv_text(_csv("Ana", "Ben"), couple_kind.columns)
    await RowImporter(couple_kind, fake_edge).run(session, rows)

    assert store.close(session.id, "u1") is True
    reopened = store.open(couple_kind, "u1")

    assert reopened.id != session.id
    assert reopened.progress == 0
    assert reopened.outcomes == []
    assert reopened.state == ImportState.IDLE
    assert store.get(session.id, "u1") is None


@pytest.mark.asyncio
async def test_new_file_resets_session(couple_kind, fake_edge):
    session = ImportSession(kind=couple_kind, user_id="u1")
    importer = RowImporter(couple_kind, fake_edge)
    await importer.run(session, parse_csv_text(_csv("Ana", "Ben"), couple_kind.columns))

    session.begin(1, filename="second.csv")

    assert session.state == ImportState.RUNNING
    assert session.progress == 0
    assert session.outcomes == []
    assert session.notifications == []

    await importer.run(session, parse_csv_text(_csv("Cy"), couple_kind.columns))
    assert [o.name for o in session.outcomes] == ["Cy"]


def test_sessions_are_scoped_to_their_owner(couple_kind):
    store = ImportSessionStore()
    session = store.open(couple_kind, "u1")

    assert store.get(session.id, "u2") is None
    assert store.close(session.id, "u2") is False
    assert store.get(session.id, "u1") is session


@pytest.mark.asyncio
async def test_closing_a_running_session_does_not_cancel_the_run(couple_kind, fake_edge):
    store = ImportSessionStore()
    session = store.open(couple_kind, "u1")
    rows = parse_csv_text(_csv("Ana", "Ben", "Cy"), couple_kind.columns)

    def close_after_first(function_name, payload):
        if payload["name"] == "Ana":
            store.close(session.id, "u1")

    fake_edge.on_invoke = close_after_first
    await RowImporter(couple_kind, fake_edge).run(session, rows)

    assert len(fake_edge.calls) == 3
    assert session.state == ImportState.COMPLETED
    assert store.get(session.id, "u1") is None


def test_open_evicts_expired_sessions(couple_kind):
    store = ImportSessionStore(ttl=timedelta(minutes=30))
    abandoned = store.open(couple_kind, "u1")
    finished = store.open(couple_kind, "u1")
    abandoned.created_at -= timedelta(hours=1)
    finished.state = ImportState.COMPLETED
    finished.finished_at = datetime.utcnow() - timedelta(hours=1)

    fresh = store.open(couple_kind, "u1")

    assert store.get(abandoned.id, "u1") is None
    assert store.get(finished.id, "u1") is None
    assert store.get(fresh.id, "u1") is fresh
    assert len(store) == 1


def test_running_sessions_are_never_evicted(couple_kind):
    store = ImportSessionStore(ttl=timedelta(minutes=30))
    running = store.open(couple_kind, "u1")
    running.begin(10)
    running.created_at -= timedelta(days=1)

    assert store.evict_expired() == 0
    assert store.get(running.id, "u1") is running


@pytest.mark.asyncio
async def test_store_stays_bounded_when_sessions_are_never_closed(couple_kind, fake_edge):
    store = ImportSessionStore(ttl=timedelta(minutes=30))
    importer = RowImporter(couple_kind, fake_edge)
    rows = parse_csv_text(_csv("Ana"), couple_kind.columns)

    for _ in range(50):
        session = store.open(couple_kind, "u1")
        await importer.run(session, rows)
        session.finished_at -= timedelta(hours=1)

    assert len(store) == 1


@pytest.mark.asyncio
async def test_finished_at_is_set_on_completion(couple_kind, fake_edge):
    session = ImportSession(kind=couple_kind, user_id="u1")

    await RowImporter(couple_kind, fake_edge).run(session, [])

    assert session.finished_at is not None
    session.begin(0)
    assert session.finished_at is None


# ─── Table imports ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_venue_outside_served_states_fails_without_request(venue_kind, fake_edge, fake_tables):
    text = (
        "name,phone,email,street_address,city,state,zip,region\n"
        "Willow Creek,555,w@x.com,1 Vine St,Portland,MA,01234,North\n"
        "Sunset Hall,555,s@x.com,2 Main St,Napa,CA,94558,West\n"
    )
    session = ImportSession(kind=venue_kind, user_id="u1")

    await RowImporter(venue_kind, fake_edge, fake_tables).run(session, parse_csv_text(text, venue_kind.columns))

    assert [(o.name, o.status.value, o.email) for o in session.outcomes] == [
        ("Willow Creek", "Success", "w@x.com"),
        ("Sunset Hall", "Failed", "s@x.com"),
    ]
    assert [t for t, _ in fake_tables.inserts] == ["venues"]
    assert fake_edge.calls == []
    assert session.notifications == [{"level": "success", "message": "Venues imported successfully!"}]


@pytest.mark.asyncio
async def test_service_package_insert_failure_is_recorded(package_kind, fake_edge, fake_tables):
    session = ImportSession(kind=package_kind, user_id="u1")
    fake_tables.fail_tables = {"service_packages"}

    await RowImporter(package_kind, fake_edge, fake_tables).run(
        session, parse_csv_text(package_kind.template, package_kind.columns)
    )

    assert [o.status for o in session.outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.FAILED]
    assert session.outcomes[0].email is None
    assert session.progress == 100


@pytest.mark.asyncio
async def test_booking_links_couple_and_vendor_and_adds_event(booking_kind, fake_edge, fake_tables):
    fake_tables.records["couples"].append({"id": "c-1", "name": "Smith & Johnson"})
    fake_tables.records["vendors"].append({"id": "v-1", "name": "Floral Co"})
    session = ImportSession(kind=booking_kind, user_id="u1")

    await RowImporter(booking_kind, fake_edge, fake_tables).run(
        session, parse_csv_text(booking_kind.template, booking_kind.columns)
    )

    assert session.outcomes[0].name == "Smith & Johnson"
    assert session.outcomes[0].status == OutcomeStatus.SUCCESS
    (booking_table, booking), (event_table, event) = fake_tables.inserts
    assert booking_table == "bookings"
    assert booking["couple_id"] == "c-1"
    assert booking["vendor_id"] == "v-1"
    assert booking["amount"] == 275000
    assert event_table == "events"
    assert event["title"] == "Smith & Johnson - Floral Arrangement"
    assert event["start_time"] == "2025-06-15T10:00:00"


@pytest.mark.asyncio
async def test_booking_with_unknown_couple_fails(booking_kind, fake_edge, fake_tables):
    fake_tables.records["vendors"].append({"id": "v-1", "name": "Floral Co"})
    session = ImportSession(kind=booking_kind, user_id="u1")

    await RowImporter(booking_kind, fake_edge, fake_tables).run(
        session, parse_csv_text(booking_kind.template, booking_kind.columns)
    )

    assert session.outcomes[0].status == OutcomeStatus.FAILED
    assert fake_tables.inserts == []


@pytest.mark.asyncio
async def test_booking_event_failure_keeps_booking(booking_kind, fake_edge, fake_tables):
    fake_tables.records["couples"].append({"id": "c-1", "name": "Smith & Johnson"})
    fake_tables.records["vendors"].append({"id": "v-1", "name": "Floral Co"})
    fake_tables.fail_tables = {"events"}
    session = ImportSession(kind=booking_kind, user_id="u1")

    await RowImporter(booking_kind, fake_edge, fake_tables).run(
        session, parse_csv_text(booking_kind.template, booking_kind.columns)
    )

    assert session.outcomes[0].status == OutcomeStatus.SUCCESS
    assert [t for t, _ in fake_tables.inserts] == ["bookings"]
