#!/usr/bin/env python3
"""
Database management script for the ClaimFlow backend.
Handles table creation, Alembic migrations and periodic maintenance.
"""

import asyncio
import logging
import sys
from pathlib import Path

from alembic.config import Config
from alembic import command

from claimflow.config import get_settings
from claimflow.infrastructure.auth.sessions import SessionStore
from claimflow.infrastructure.db.database import Database
from claimflow.infrastructure.db.models import drop_all_tables
from claimflow.infrastructure.container import ServiceContainer
from claimflow.main import register_job_handlers

MIGRATIONS_DIR = Path(__file__).resolve().parent / "claimflow" / "infrastructure" / "db" / "migrations"

logger = logging.getLogger("manage_db")


def get_database() -> Database:
    settings = get_settings()
    return Database(settings.effective_database_url, echo=settings.database_echo)


def alembic_config() -> Config:
    """Alembic configuration built in code; no alembic.ini is needed."""
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    alembic_cfg.set_main_option("sqlalchemy.url", get_settings().effective_database_url)
    return alembic_cfg


def create_tables():
    """Create all tables directly from the models (development)."""
    database = get_database()
    database.create_tables()
    database.dispose()
    print("Tables created.")


def drop_tables():
    """Drop all tables - WARNING: This will drop all data!"""
    response = input("This will drop ALL data. Type 'yes' to continue: ")
    if response.lower() != 'yes':
        print("Drop cancelled.")
        return
    database = get_database()
    drop_all_tables(database.engine)
    database.dispose()
    print("Tables dropped.")


def create_migration(message: str = "Auto-generated migration"):
    """Create a new migration."""
    print(f"Creating migration: {message}")
    command.revision(alembic_config(), message=message, autogenerate=True)


def run_migrations():
    """Run pending migrations."""
    print("Running migrations...")
    command.upgrade(alembic_config(), "head")


def rollback_migration():
    """Rollback last migration."""
    print("Rolling back migration...")
    command.downgrade(alembic_config(), "-1")


def show_current_revision():
    """Show current database revision."""
    command.current(alembic_config())


def show_history():
    """Show migration history."""
    command.history(alembic_config())


def purge_sessions():
    """Delete expired user sessions."""
    database = get_database()
    with database.session_scope() as session:
        removed = SessionStore(session).purge_expired()
    database.dispose()
    print(f"Removed {removed} expired sessions.")


def run_jobs():
    """Process every due background job once, then exit."""

    async def _drain() -> int:
        container = ServiceContainer(get_settings())
        register_job_handlers(container)
        try:
            container.job_queue.requeue_interrupted()
            return await container.worker.run_until_idle()
        finally:
            await container.close()

    processed = asyncio.run(_drain())
    print(f"Processed {processed} jobs.")


def main():
    """Main CLI function."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if len(sys.argv) < 2:
        print("Usage: python manage_db.py [command]")
        print("Commands:")
        print("  create-tables  - Create all tables from the models")
        print("  drop-tables    - Drop all tables (WARNING: drops all data)")
        print("  create [msg]   - Create new migration")
        print("  migrate        - Run pending migrations")
        print("  rollback       - Rollback last migration")
        print("  current        - Show current revision")
        print("  history        - Show migration history")
        print("  purge-sessions - Delete expired sessions")
        print("  run-jobs       - Process due background jobs and exit")
        return

    command_name = sys.argv[1]

    if command_name == "create-tables":
        create_tables()
    elif command_name == "drop-tables":
        drop_tables()
    elif command_name == "create":
        message = " ".join(sys.argv[2:]) if len(sys.argv) > 2 else "Auto-generated migration"
        create_migration(message)
    elif command_name == "migrate":
        run_migrations()
    elif command_name == "rollback":
        rollback_migration()
    elif command_name == "current":
        show_current_revision()
    elif command_name == "history":
        show_history()
    elif command_name == "purge-sessions":
        purge_sessions()
    elif command_name == "run-jobs":
        run_jobs()
    else:
        print(f"Unknown command: {command_name}")
        sys.exit(1)


if __name__ == "__main__":
    main()
