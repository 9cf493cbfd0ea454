"""
Application settings.

A single frozen Settings object is built once (usually from environment
variables) and handed to create_app(), which derives the database engine
and session factory from it. Nothing else in the package reads the
environment.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.engine import URL, make_url

SQLITE_FALLBACK_URL = "sqlite:///./student_registry.db"

# Driver names accepted in DB_DRIVER, mapped to SQLAlchemy dialect+driver
DRIVERS = {
    "mysql": "mysql+pymysql",
    "postgresql": "postgresql+psycopg2",
    "sqlite": "sqlite",
}

DEFAULT_PORTS = {
    "mysql": 3306,
    "postgresql": 5432,
}


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Connection and runtime settings for the student registry."""

    model_config = ConfigDict(frozen=True)

    app_name: str = "Student Registry"

    # Either a full URL, or the individual components below
    database_url: Optional[str] = None
    db_driver: str = "mysql"
    db_host: Optional[str] = None
    db_port: Optional[int] = None
    db_name: str = "student_registry"
    db_user: str = "root"
    db_password: str = ""
    db_charset: str = "utf8mb4"

    echo_sql: bool = False
    auto_create_tables: bool = True

    # Where GET /insert_student sends the browser
    form_url: str = "/"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from DATABASE_URL / DB_* style environment variables."""
        env = os.environ if environ is None else environ
        port = env.get("DB_PORT")
        return cls(
            database_url=env.get("DATABASE_URL") or None,
            db_driver=env.get("DB_DRIVER", "mysql"),
            db_host=env.get("DB_HOST") or None,
            db_port=int(port) if port else None,
            db_name=env.get("DB_NAME", "student_registry"),
            db_user=env.get("DB_USER", "root"),
            db_password=env.get("DB_PASSWORD", ""),
            db_charset=env.get("DB_CHARSET", "utf8mb4"),
            echo_sql=_as_bool(env.get("DB_ECHO"), False),
            auto_create_tables=_as_bool(env.get("AUTO_CREATE_TABLES"), True),
            form_url=env.get("FORM_URL", "/"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

    def sqlalchemy_url(self) -> URL:
        """
        Resolve the database URL.

        Priority:
        1. database_url, if set
        2. a URL assembled from db_driver/db_host/db_port/db_name/credentials
        3. the local SQLite file
        """
        if self.database_url:
            return make_url(self.database_url)

        if not self.db_host:
            return make_url(SQLITE_FALLBACK_URL)

        if self.db_driver not in DRIVERS:
            raise ValueError("Unsupported DB_DRIVER: {}".format(self.db_driver))

        query = {}
        if self.db_driver == "mysql":
            query["charset"] = self.db_charset

        return URL.create(
            DRIVERS[self.db_driver],
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port or DEFAULT_PORTS.get(self.db_driver),
            database=self.db_name,
            query=query,
        )

    def redacted_url(self) -> str:
        """Database URL safe for log output."""
        return self.sqlalchemy_url().render_as_string(hide_password=True)

    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url().get_backend_name() == "sqlite"
