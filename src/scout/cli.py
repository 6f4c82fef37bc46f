import sys
from typing import Optional
import typer
from pathlib import Path
from sqlmodel import Session
from scout.config import settings
from scout.errors import MemoryStoreError
from scout.logging import logger

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    Research report memory CLI.
    """
    pass

@app.command(name="doctor")
def doctor():
    """
    Check configuration and environment health.
    """
    logger.info("Running doctor check...")

    print("\n🩺 Scout Memory Doctor\n")

    print(f"Python: {sys.version.split()[0]}")
    print(f"Prefix: {sys.prefix}")

    print("\n[Configuration]")
    print(f"DATABASE_URL:             {settings.DATABASE_URL}")
    print(f"MIN_FINDING_LENGTH:       {settings.MIN_FINDING_LENGTH}")
    print(f"MAX_FINDING_LENGTH:       {settings.MAX_FINDING_LENGTH}")
    print(f"MAX_KEY_FINDINGS:         {settings.MAX_KEY_FINDINGS}")
    print(f"RECENT_FINDINGS_LIMIT:    {settings.RECENT_FINDINGS_LIMIT}")
    print(f"RECENT_URL_DAYS:          {settings.RECENT_URL_DAYS}")
    print(f"DEFAULT_USER_ID:          {settings.DEFAULT_USER_ID}")

    print("\nDoctor check complete.")


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")

@db_app.command("init")
def init():
    """Initialize the database tables."""
    from scout.db import init_db
    try:
        init_db()
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)


memory_app = typer.Typer(help="Content memory and novelty commands.")
app.add_typer(memory_app, name="memory")

@memory_app.command("detect")
def detect(topic: str, path: Path):
    """Dry-run novelty detection for a report file. Writes nothing."""
    from scout.db import engine
    from scout.memory import NoveltyDetector, SQLMemoryStore

    # Reports are stored under the trimmed topic
    topic = topic.strip()
    content = path.read_text(encoding="utf-8")
    with Session(engine) as session:
        try:
            verdict = NoveltyDetector(SQLMemoryStore(session)).detect(topic, content)
        except MemoryStoreError as e:
            print(f"❌ Failed: {e}")
            raise typer.Exit(code=1)

    print(f"Novel: {'yes' if verdict.is_novel else 'no'}  (hash {verdict.content_hash[:12]})")
    for finding in verdict.novel_findings:
        print(f"  + {finding}")
    for finding in verdict.known_findings:
        print(f"  = {finding}")
    for url in verdict.novel_urls:
        print(f"  ↗ {url}")

@memory_app.command("process")
def process(topic: str, path: Path, user_id: Optional[str] = typer.Option(None, help="User to notify")):
    """Save a report file and run it through the memory processor."""
    from scout.db import engine
    from scout.memory import MemoryProcessor, SQLMemoryStore
    from scout.notifications import SQLNotificationSink
    from scout.reports import delete_report, save_report

    content = path.read_text(encoding="utf-8")
    with Session(engine) as session:
        try:
            report = save_report(session, topic, content)
        except ValueError as e:
            print(f"❌ Failed: {e}")
            raise typer.Exit(code=1)

        report_id = report.id
        try:
            result = MemoryProcessor(SQLMemoryStore(session), SQLNotificationSink(session)).process(
                report.topic, report_id, content, user_id
            )
        except (MemoryStoreError, ValueError) as e:
            logger.error(f"Processing {path} failed, removing report {report_id}: {e}")
            # Every stored report has a memory record
            session.rollback()
            delete_report(session, report_id)
            print(f"❌ Failed: {e}")
            raise typer.Exit(code=1)

        print(f"Report {report_id}: novel={result.is_novel} notification={result.notification_created}")
        if result.notification_error:
            print(f"⚠️  Notification failed: {result.notification_error}")

@memory_app.command("history")
def history(topic: str, limit: int = typer.Option(10, help="Number of records")):
    """List the most recent content memory records for a topic."""
    from scout.db import engine
    from scout.memory import SQLMemoryStore

    with Session(engine) as session:
        try:
            records = SQLMemoryStore(session).get_content_memory(topic.strip(), limit)
        except MemoryStoreError as e:
            print(f"❌ Failed: {e}")
            raise typer.Exit(code=1)
        if not records:
            print("No history found.")
            return
        for record in records:
            print(f"{record.created_at:%Y-%m-%d %H:%M} {record.content_hash[:12]} "
                  f"report={record.report_id} findings={len(record.key_findings)} urls={len(record.source_urls)}")


notifications_app = typer.Typer(help="Notification commands.")
app.add_typer(notifications_app, name="notifications")

@notifications_app.command("list")
def list_notifications(
    user_id: str = typer.Option(settings.DEFAULT_USER_ID, help="User whose notifications to list"),
    unread: bool = typer.Option(False, help="Only unread notifications"),
):
    """List notifications for a user."""
    from scout.db import engine
    from scout.notifications import get_notifications

    with Session(engine) as session:
        notifications = get_notifications(session, user_id, unread_only=unread)
        if not notifications:
            print("No notifications.")
            return
        for n in notifications:
            marker = " " if n.read else "•"
            print(f"{marker} [{n.id}] {n.title} - {n.message}")

@notifications_app.command("purge")
def purge(days: int = typer.Option(settings.NOTIFICATION_RETENTION_DAYS, help="Age in days")):
    """Delete notifications older than the retention window."""
    from scout.db import engine
    from scout.notifications import delete_old_notifications

    with Session(engine) as session:
        count = delete_old_notifications(session, days)
    print(f"Deleted {count} notifications.")

if __name__ == "__main__":
    app()
