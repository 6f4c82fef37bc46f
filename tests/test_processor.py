import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine, select
from scout.errors import NotificationError, StoreWriteError, StoreReadError
from scout.logging import report_id_ctx
from scout.memory.processor import MemoryProcessor, build_notification, process_report_memory
from scout.memory.store import SQLMemoryStore
from scout.models.memory import ContentMemory
from scout.models.notification import Notification, NotificationType
from scout.notifications import SQLNotificationSink, get_notifications
from scout.reports import save_report

REPORT = (
    '<div><p>Breaking discovery in quantum computing enables new approaches to error correction.</p>'
    '<a href="https://quantum.example.com/paper">Source</a></div>'
)
FOLLOW_UP = (
    '<div><p>Breaking discovery in quantum computing enables new approaches to error correction.</p>'
    '<p>Two vendors announced roadmaps that target logical qubits before the end of the decade.</p>'
    '<a href="https://quantum.example.com/paper">Source</a></div>'
)


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return SQLMemoryStore(session)


@pytest.fixture
def processor(session, store):
    return MemoryProcessor(store, SQLNotificationSink(session))


def memory_count(session, topic):
    return len(session.exec(select(ContentMemory).where(ContentMemory.topic == topic)).all())


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------
def test_novel_then_duplicate(session, processor):
    first = save_report(session, "Quantum", REPORT)
    result = processor.process("Quantum", first.id, REPORT)
    assert result.is_novel
    assert result.notification_created
    assert result.novel_findings == [
        "Breaking discovery in quantum computing enables new approaches to error correction"
    ]
    assert memory_count(session, "Quantum") == 1

    second = save_report(session, "Quantum", REPORT)
    result = processor.process("Quantum", second.id, REPORT)
    assert not result.is_novel
    assert not result.notification_created
    assert result.novel_findings == []
    # Duplicates are recorded too
    assert memory_count(session, "Quantum") == 2

    notifications = get_notifications(session)
    assert len(notifications) == 1
    assert notifications[0].report_id == first.id
    assert notifications[0].type == NotificationType.NEW_REPORT
    assert notifications[0].title == 'New findings for "Quantum"'
    assert notifications[0].message == "1 new finding detected with 1 new source."


def test_follow_up_report_notifies_only_new_findings(session, processor):
    first = save_report(session, "Quantum", REPORT)
    processor.process("Quantum", first.id, REPORT)

    second = save_report(session, "Quantum", FOLLOW_UP)
    result = processor.process("Quantum", second.id, FOLLOW_UP)
    assert result.is_novel
    assert result.novel_findings == [
        "Two vendors announced roadmaps that target logical qubits before the end of the decade"
    ]
    assert get_notifications(session)[0].message == "1 new finding detected."


def test_memory_saved_with_all_findings(session, processor, store):
    first = save_report(session, "Quantum", REPORT)
    processor.process("Quantum", first.id, REPORT)
    second = save_report(session, "Quantum", FOLLOW_UP)
    processor.process("Quantum", second.id, FOLLOW_UP)

    latest = store.get_content_memory("Quantum", 1)[0]
    assert latest.report_id == second.id
    # The full extraction is stored, not only the novel part
    assert len(latest.key_findings) == 2
    assert latest.source_urls == ["https://quantum.example.com/paper"]


def test_default_and_explicit_user(session, processor):
    report = save_report(session, "Quantum", REPORT)
    processor.process("Quantum", report.id, REPORT)
    other = save_report(session, "Robotics", REPORT)
    processor.process("Robotics", other.id, REPORT, user_id="user-42")

    assert len(get_notifications(session, "anonymous")) == 1
    assert get_notifications(session, "user-42")[0].title == 'New findings for "Robotics"'


def test_module_level_helper(session):
    report = save_report(session, "Quantum", REPORT)
    result = process_report_memory(
        SQLMemoryStore(session), SQLNotificationSink(session), "Quantum", report.id, REPORT
    )
    assert result.notification_created


# ---------------------------------------------------------------------------
# Failure semantics
# ---------------------------------------------------------------------------
def test_notification_failure_keeps_memory(session, store):
    notifier = MagicMock()
    notifier.create_notification.side_effect = NotificationError("sink unavailable")
    report = save_report(session, "Quantum", REPORT)

    result = MemoryProcessor(store, notifier).process("Quantum", report.id, REPORT)

    assert result.is_novel
    assert not result.notification_created
    assert "sink unavailable" in result.notification_error
    assert memory_count(session, "Quantum") == 1


def test_store_write_failure_is_fatal_and_skips_notification():
    store = MagicMock()
    store.has_content_hash.return_value = False
    store.get_recent_source_urls.return_value = set()
    store.get_content_memory.return_value = []
    store.save_content_memory.side_effect = StoreWriteError("Quantum", "r1", "disk full")
    notifier = MagicMock()

    with pytest.raises(StoreWriteError):
        MemoryProcessor(store, notifier).process("Quantum", "r1", REPORT)
    notifier.create_notification.assert_not_called()


def test_store_read_failure_writes_nothing():
    store = MagicMock()
    store.has_content_hash.side_effect = StoreReadError("has_content_hash", "Quantum", "timeout")
    notifier = MagicMock()

    with pytest.raises(StoreReadError):
        MemoryProcessor(store, notifier).process("Quantum", "r1", REPORT)
    store.save_content_memory.assert_not_called()
    notifier.create_notification.assert_not_called()


def test_memory_written_before_notification():
    calls = []
    store = MagicMock()
    store.has_content_hash.return_value = False
    store.get_recent_source_urls.return_value = set()
    store.get_content_memory.return_value = []
    store.save_content_memory.side_effect = lambda *a, **kw: calls.append("save")
    notifier = MagicMock()
    notifier.create_notification.side_effect = lambda *a, **kw: calls.append("notify")

    MemoryProcessor(store, notifier).process("Quantum", "r1", REPORT, user_id="u1")

    assert calls == ["save", "notify"]
    notifier.create_notification.assert_called_once_with(
        "r1", "u1", NotificationType.NEW_REPORT,
        'New findings for "Quantum"', "1 new finding detected with 1 new source.",
    )


def test_report_id_bound_only_while_processing(session):
    seen = []
    notifier = MagicMock()
    notifier.create_notification.side_effect = lambda *a, **kw: seen.append(report_id_ctx.get())
    report = save_report(session, "Quantum", REPORT)

    MemoryProcessor(SQLMemoryStore(session), notifier).process("Quantum", report.id, REPORT)

    assert seen == [report.id]
    assert report_id_ctx.get() is None


# ---------------------------------------------------------------------------
# Notification wording
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("novel_count, url_count, message", [
    (1, 0, "1 new finding detected."),
    (3, 0, "3 new findings detected."),
    (1, 1, "1 new finding detected with 1 new source."),
    (2, 5, "2 new findings detected with 5 new sources."),
    (0, 1, "1 new source found."),
    (0, 4, "4 new sources found."),
])
def test_build_notification(novel_count, url_count, message):
    title, text = build_notification("AI Safety", novel_count, url_count)
    assert title == 'New findings for "AI Safety"'
    assert text == message


def test_sink_translates_db_errors():
    session = MagicMock()
    session.commit.side_effect = OperationalError("INSERT", {}, Exception("database is locked"))
    sink = SQLNotificationSink(session)
    with pytest.raises(NotificationError):
        sink.create_notification("r1", "anonymous", NotificationType.NEW_REPORT, "t", "m")
    session.rollback.assert_called_once()


def test_notification_rows_persist(session):
    sink = SQLNotificationSink(session)
    report = save_report(session, "Quantum", REPORT)
    n = sink.create_notification(report.id, "anonymous", NotificationType.NEW_REPORT, "t", "m")
    assert n.id is not None
    assert session.get(Notification, n.id).read is False
