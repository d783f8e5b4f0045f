"""CLI entry points for schema migrations (Alembic) and local table creation."""
import logging
import subprocess
import sys
from pathlib import Path

from stock_reports.db.sessions import create_db_engine, init_db

# Project root: .../src/stock_reports/db/cli.py -> project root
_PROJECT_ROOT = Path(__file__).resolve().parents[3]

logger = logging.getLogger(__name__)


def _run_alembic(*args: str) -> None:
    """Run alembic from the project root."""
    subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        cwd=_PROJECT_ROOT,
        check=True,
    )


def generate() -> None:
    """Run alembic revision --autogenerate. Pass -m "message" for the revision message."""
    _run_alembic("revision", "--autogenerate", *sys.argv[1:])


def migrate() -> None:
    """Run alembic upgrade head. Pass a revision as first arg to upgrade to that instead."""
    revision = sys.argv[1] if len(sys.argv) > 1 else "head"
    _run_alembic("upgrade", revision, *sys.argv[2:])


def create_tables() -> None:
    """Create tables directly from the models (SQLite / throwaway databases)."""
    logging.basicConfig(level=logging.INFO)
    engine = create_db_engine(sys.argv[1] if len(sys.argv) > 1 else None)
    init_db(engine)
    logger.info("Tables created on %s", engine.url.render_as_string(hide_password=True))
