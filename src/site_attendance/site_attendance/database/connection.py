from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import mysql.connector

from ..core.exceptions import StorageError


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, values: Mapping) -> "DBConfig":
        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values.get("password") or ""),
            database=str(values["database"]),
        )


class DatabaseConnection:
    """Hands out a fresh connection per unit of work.

    Connections are never shared between requests; each ledger transition
    owns one connection and one transaction for its whole duration.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def database(self) -> str:
        return self._config.database

    def connect(self):
        cfg = self._config
        try:
            return mysql.connector.connect(
                host=cfg.host,
                port=cfg.port,
                user=cfg.user,
                password=cfg.password,
                database=cfg.database,
                autocommit=False,
            )
        except mysql.connector.Error as exc:
            raise StorageError(f"Database unavailable: {exc}") from exc
