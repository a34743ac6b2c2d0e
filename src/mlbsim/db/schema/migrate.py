"""Forward-only migration runner for the prediction schema.

Migrations are ``NNN_description.sql`` files in the ``migrations`` directory
next to this module. Each file is applied once, inside its own transaction,
and recorded in ``schema_migrations``.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional

import asyncpg

from mlbsim.db.models import Table
from mlbsim.db.pool import close_pool, get_pool

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# pg_try_advisory_lock key shared by every migration run
ADVISORY_LOCK_ID = 740_312


async def _ensure_migrations_table(conn: asyncpg.Connection) -> None:
    await conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {Table.SCHEMA_MIGRATIONS} (
            version INTEGER PRIMARY KEY,
            filename TEXT NOT NULL DEFAULT '',
            applied_at TIMESTAMPTZ DEFAULT now()
        )
    """)


def pending_migrations(migrations_dir: Path, applied: set[int]) -> list[tuple[int, Path]]:
    """Return (version, path) pairs not yet applied, lowest version first.

    Files whose name does not start with an integer version are ignored.
    """
    pending = []
    for sql_file in migrations_dir.glob("*.sql"):
        prefix = sql_file.stem.split("_", 1)[0]
        if not prefix.isdigit():
            continue
        version = int(prefix)
        if version not in applied:
            pending.append((version, sql_file))
    return sorted(pending)


def split_statements(sql: str) -> list[str]:
    """Split a migration script on semicolons, dropping comments and blanks.

    The schema files contain no function bodies or string literals with
    semicolons, so a plain split is sufficient.
    """
    sql = re.sub(r"--.*$", "", sql, flags=re.MULTILINE)
    sql = re.sub(r"/\*.*?\*/", "", sql, flags=re.DOTALL)
    return [part.strip() for part in sql.split(";") if part.strip()]


async def migrate() -> int:
    """Apply every pending migration in version order.

    Returns:
        Number of migrations applied by this call (0 when up to date)

    Raises:
        FileNotFoundError: If the migrations directory is missing
        RuntimeError: If another migration run holds the advisory lock
    """
    if not MIGRATIONS_DIR.is_dir():
        raise FileNotFoundError(f"Migrations directory not found: {MIGRATIONS_DIR}")

    pool = await get_pool()
    applied_count = 0

    async with pool.acquire() as conn:
        if not await conn.fetchval("SELECT pg_try_advisory_lock($1)", ADVISORY_LOCK_ID):
            raise RuntimeError("Another migration run is in progress")

        try:
            await _ensure_migrations_table(conn)
            rows = await conn.fetch(f"SELECT version FROM {Table.SCHEMA_MIGRATIONS}")
            applied = {row["version"] for row in rows}

            for version, sql_path in pending_migrations(MIGRATIONS_DIR, applied):
                async with conn.transaction():
                    for statement in split_statements(sql_path.read_text(encoding="utf-8")):
                        await conn.execute(statement)
                    await conn.execute(
                        f"INSERT INTO {Table.SCHEMA_MIGRATIONS} (version, filename) VALUES ($1, $2)",
                        version,
                        sql_path.name,
                    )
                applied_count += 1
                logger.info("Applied migration %03d: %s", version, sql_path.name)
        finally:
            await conn.execute("SELECT pg_advisory_unlock($1)", ADVISORY_LOCK_ID)

    return applied_count


async def schema_version() -> Optional[int]:
    """Highest applied migration version, or None on an empty database."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        await _ensure_migrations_table(conn)
        return await conn.fetchval(f"SELECT MAX(version) FROM {Table.SCHEMA_MIGRATIONS}")


async def run_migrations() -> None:
    """Migrate, report the resulting version, and release the pool."""
    try:
        applied = await migrate()
        version = await schema_version()
        logger.info("Applied %d migration(s); schema version is %s", applied, version)
    finally:
        await close_pool()


def main() -> None:
    """CLI entry point for running migrations."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_migrations())


if __name__ == "__main__":
    main()
