from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from mysql.connector import pooling


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 5
    pool_size: int = 10


class DatabaseConnection:
    """Singleton-like pooled connection factory.

    Every fraud evaluation issues several lookups in parallel, each borrowing
    its own pooled connection; closing a connection returns it to the pool.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        with self._lock:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="attendance_guard",
                    pool_size=int(self._config.pool_size),
                    host=self._config.host,
                    port=int(self._config.port),
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    connection_timeout=int(self._config.connection_timeout),
                )
            return self._pool

    def connect(self):
        return self._get_pool().get_connection()
