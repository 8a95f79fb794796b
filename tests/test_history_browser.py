"""Tests for the history browser over the local record store."""

import asyncio
import threading
from datetime import datetime, timedelta, timezone

from landrec.capture.context import AuthContext
from landrec.capture.devices import FixedGeolocation, GeolocationOptions
from landrec.capture.history import HistoryBrowser
from landrec.capture.session import CaptureSession, LocalSubmitter
from landrec.errors import NotFoundError, PersistenceError
from landrec.schemas.land import CapturedImage, Coordinate
from landrec.store import AnalysisStore
from landrec.utils.land_classifier import classify

from conftest import ALICE, BOB, jpeg_bytes


class StepClock:
    def __init__(self):
        self.now = datetime(2024, 6, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


def seed(store: AnalysisStore, owner_id: str, lat: float, notes=None):
    coord = Coordinate(latitude=lat, longitude=3.5)
    return store.insert(owner_id, coord, "data:image/jpeg;base64,AAAA", classify(coord), notes)


def browser_for(db, identity=ALICE):
    context = AuthContext()
    context.init(identity, "token")
    store = AnalysisStore(db, clock=StepClock())
    return HistoryBrowser(context, store), store


def test_refresh_loads_newest_first(db) -> None:
    browser, store = browser_for(db)
    old = seed(store, ALICE.id, 10.0)
    new = seed(store, ALICE.id, 52.0)
    seed(store, BOB.id, 70.0)

    assert browser.refresh() is True
    assert [r.id for r in browser.records] == [new.id, old.id]


def test_refresh_replaces_view(db) -> None:
    browser, store = browser_for(db)
    seed(store, ALICE.id, 10.0)
    browser.refresh()
    newest = seed(store, ALICE.id, 30.0)

    browser.refresh()

    assert len(browser.records) == 2
    assert browser.records[0].id == newest.id


def test_select_surfaces_full_record(db) -> None:
    browser, store = browser_for(db)
    record = seed(store, ALICE.id, 52.0, notes="orchard")
    browser.refresh()

    selected = browser.select(record.id)

    assert selected.report.terrain == "Temperate hills"
    assert selected.coordinate.latitude == 52.0
    assert selected.image_url.startswith("data:")
    assert browser.selected == selected


def test_declined_confirmation_deletes_nothing(db) -> None:
    browser, store = browser_for(db)
    record = seed(store, ALICE.id, 10.0)
    browser.refresh()

    assert browser.delete(record.id, confirm=lambda r: False) is False
    assert len(store.list_by_owner(ALICE.id)) == 1
    assert len(browser.records) == 1


def test_delete_removes_locally_without_reload(db) -> None:
    browser, store = browser_for(db)
    keep = seed(store, ALICE.id, 10.0)
    drop = seed(store, ALICE.id, 30.0)
    browser.refresh()
    browser.select(drop.id)

    calls = []
    original = store.list_by_owner
    store.list_by_owner = lambda owner_id: calls.append(owner_id) or original(owner_id)

    assert browser.delete(drop.id, confirm=lambda r: r is not None) is True
    assert [r.id for r in browser.records] == [keep.id]
    assert browser.selected is None
    assert calls == []


def test_delete_store_failure_leaves_view_unchanged(db, monkeypatch) -> None:
    browser, store = browser_for(db)
    record = seed(store, ALICE.id, 10.0)
    browser.refresh()

    def failing_delete(owner_id, analysis_id):
        raise PersistenceError("Could not delete the analysis")

    monkeypatch.setattr(store, "delete_by_id", failing_delete)

    assert browser.delete(record.id, confirm=lambda r: True) is False
    assert isinstance(browser.last_error, PersistenceError)
    assert [r.id for r in browser.records] == [record.id]


def test_delete_of_foreign_record_reports_not_found(db) -> None:
    browser, store = browser_for(db)
    bobs = seed(store, BOB.id, 10.0)

    assert browser.delete(bobs.id, confirm=lambda r: True) is False
    assert isinstance(browser.last_error, NotFoundError)
    assert [r.id for r in store.list_by_owner(BOB.id)] == [bobs.id]


def test_refresh_failure_keeps_previous_view(db, monkeypatch) -> None:
    browser, store = browser_for(db)
    seed(store, ALICE.id, 10.0)
    browser.refresh()

    def failing_list(owner_id):
        raise PersistenceError("Could not load analyses")

    monkeypatch.setattr(store, "list_by_owner", failing_list)

    assert browser.refresh() is False
    assert len(browser.records) == 1
    assert isinstance(browser.last_error, PersistenceError)


def test_summary_line(db) -> None:
    browser, store = browser_for(db)
    record = seed(store, ALICE.id, 10.0, notes="by the well")

    line = HistoryBrowser.summary(record)

    assert line.startswith("10.0000°, 3.5000°")
    assert "Tropical" in line
    assert line.endswith("by the well")


class ThreadRecordingStore:
    def __init__(self, store: AnalysisStore):
        self.store = store
        self.threads = []

    def list_by_owner(self, owner_id):
        self.threads.append(threading.get_ident())
        return self.store.list_by_owner(owner_id)

    def delete_by_id(self, owner_id, analysis_id):
        return self.store.delete_by_id(owner_id, analysis_id)


def test_bound_refresh_runs_off_the_event_loop(db, session_factory) -> None:
    context = AuthContext()
    context.init(ALICE, "token")
    store = AnalysisStore(db, clock=StepClock())
    records = ThreadRecordingStore(store)
    browser = HistoryBrowser(context, records)
    session = CaptureSession(
        context,
        FixedGeolocation(Coordinate(latitude=52.0, longitude=3.5)),
        None,
        LocalSubmitter(session_factory),
        options=GeolocationOptions(timeout=1.0),
    )
    browser.bind(session)
    session.image = CapturedImage(data=jpeg_bytes(), encoding="image/jpeg", width=32, height=24)

    async def scenario():
        await session.start()
        record = await session.submit()
        return record, threading.get_ident()

    record, loop_thread = asyncio.run(scenario())

    assert [r.id for r in browser.records] == [record.id]
    assert len(records.threads) == 1
    assert records.threads[0] != loop_thread
