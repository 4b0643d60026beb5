from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import mysql.connector

DEFAULT_DATABASE = "church_checkin"


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = DEFAULT_DATABASE
    connect_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: Dict[str, Any]) -> "DBConfig":
        return cls(
            host=str(db_config.get("host") or "localhost"),
            port=int(db_config.get("port") or 3306),
            user=str(db_config.get("user") or "root"),
            password=str(db_config.get("password") or ""),
            database=str(db_config.get("database") or DEFAULT_DATABASE),
            connect_timeout=int(db_config.get("connect_timeout") or 10),
        )

    def label(self) -> str:
        """``user@host:port/db`` for log lines; never includes the password."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Hands out a fresh MySQL connection per unit of work.

    The check-in API serves one short request at a time per worker, so no
    pool is kept. ``get_instance`` shares one factory per process.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = cls(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        cfg = self._config
        params: Dict[str, Any] = {
            "host": cfg.host,
            "port": cfg.port,
            "user": cfg.user,
            "password": cfg.password,
            "connection_timeout": cfg.connect_timeout,
            "charset": "utf8mb4",
            "autocommit": False,
        }
        if with_database:
            params["database"] = cfg.database
        return mysql.connector.connect(**params)
