"""Schema bootstrap used by ``AUTO_INIT_DB`` and ``scripts/init_db.py``."""

from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[4] / "database" / "schema.sql"

_CREATE_DB = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _connect(cfg: DBConfig, *, server_only: bool = False):
    return mysql.connector.connect(
        host=cfg.host,
        port=cfg.port,
        user=cfg.user,
        password=cfg.password,
        database=None if server_only else cfg.database,
        use_pure=True,
    )


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside quotes, dropping ``--`` comment lines."""

    buf: list[str] = []
    quote: Optional[str] = None
    escape = False
    body = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))

    for ch in body:
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
        elif ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    cfg = DBConfig.from_mapping(db_config)
    with closing(_connect(cfg, server_only=True)) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{cfg.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    # The configured database wins over whatever the script names.
    sql = _USE_DB.sub("", _CREATE_DB.sub("", Path(schema_path).read_text(encoding="utf-8")))

    with closing(_connect(DBConfig.from_mapping(db_config))) as conn:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    logger.info("Applied schema %s", schema_path)


def list_tables(db_config: dict) -> list[str]:
    with closing(_connect(DBConfig.from_mapping(db_config))) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
