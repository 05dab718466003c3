"""
auth/store.py -- SQLAlchemy Core persistence layer for companies and users.

Pattern: Repository + Data Mapper. AccountStore is the repository;
_row_to_company / _row_to_user are the mappers. Service and route code never
touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Consistency:
  Company-name and email uniqueness are UNIQUE constraints, not just code
  checks. The service checks first for a friendly error, but two concurrent
  registrations can both pass that check; the constraint is what decides the
  winner and the loser sees IntegrityError from create_company_with_admin().

  create_company_with_admin() runs both inserts inside one engine.begin()
  scope. The block commits on normal exit and rolls back on any exception, so
  a company row without its admin user is never visible to other connections.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text, create_engine, event, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from auth.models import ROLE_ADMIN, Company, User

logger = logging.getLogger("onboarding.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_companies = Table(
    "companies",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("admin_email", String(255), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("company_id", Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default="member"),
    Column("created_at", String(32), nullable=False),
    Column("last_login", String(32)),  # ISO 8601, NULL until first login
)


# ---------------------------------------------------------------------------
# SQLite connection setup
# ---------------------------------------------------------------------------


def _is_memory_url(db_url: str) -> bool:
    return ":memory:" in db_url or "mode=memory" in db_url


def _sqlite_pragmas(wal: bool):
    """Build a connect listener that applies per-connection PRAGMAs.

    SQLite PRAGMAs are not inherited by new connections from the pool, and
    foreign keys are off by default, so both are set on every connect.
    WAL is skipped for in-memory databases, which have no journal file.
    """

    def _on_connect(dbapi_conn, connection_record) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return _on_connect


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Company and User entities.

    Usage:
        store = AccountStore("sqlite:///onboarding.db")
        company_id, user_id = store.create_company_with_admin("Acme", "ops@acme.test", digest)
        user = store.get_user_by_email("ops@acme.test")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        is_sqlite = db_url.startswith("sqlite")
        if is_sqlite:
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if is_sqlite:
            event.listen(self.engine, "connect", _sqlite_pragmas(wal=not _is_memory_url(db_url)))
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True

    # ------------------------------------------------------------------
    # Existence checks
    # ------------------------------------------------------------------

    def company_name_exists(self, name: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_companies.c.id).where(_companies.c.name == name)).first()
        return row is not None

    def email_exists(self, email: str) -> bool:
        with self.engine.connect() as conn:
            row = conn.execute(select(_users.c.id).where(_users.c.email == email)).first()
        return row is not None

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    def create_company_with_admin(self, name: str, admin_email: str, password_hash: str) -> tuple[int, int]:
        """Insert a company and its admin user atomically. Returns (company_id, user_id).

        Raises sqlalchemy.exc.IntegrityError if either row violates a UNIQUE
        constraint (a concurrent registration won the race). The transaction
        has already been rolled back when the exception reaches the caller.
        """
        now = _now_iso()
        with self.engine.begin() as conn:
            company_id = conn.execute(
                _companies.insert().values(name=name, admin_email=admin_email, created_at=now)
            ).inserted_primary_key[0]
            user_id = conn.execute(
                _users.insert().values(
                    company_id=company_id,
                    email=admin_email,
                    password_hash=password_hash,
                    role=ROLE_ADMIN,
                    created_at=now,
                )
            ).inserted_primary_key[0]
        return company_id, user_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_user_by_id(self, user_id: int) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_company(self, company_id: int) -> Company | None:
        with self.engine.connect() as conn:
            row = conn.execute(_companies.select().where(_companies.c.id == company_id)).fetchone()
        return _row_to_company(row) if row is not None else None

    def list_company_users(self, company_id: int) -> list[User]:
        """Return every user of one company, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _users.select().where(_users.c.company_id == company_id).order_by(_users.c.id)
            ).fetchall()
        return [_row_to_user(r) for r in rows]

    def count_rows(self) -> tuple[int, int]:
        """Return (companies, users) row counts. Used by the CLI status output."""
        with self.engine.connect() as conn:
            companies = conn.execute(text("SELECT COUNT(*) FROM companies")).scalar()
            users = conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
        return companies or 0, users or 0

    def update_last_login(self, user_id: int, when: datetime | None = None) -> None:
        """Stamp last_login for the given user (UTC now unless `when` is given)."""
        stamp = when.isoformat() if when is not None else _now_iso()
        with self.engine.begin() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(last_login=stamp))

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_company(row) -> Company:
    return Company(
        id=row.id,
        name=row.name,
        admin_email=row.admin_email,
        created_at=row.created_at,
    )


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        company_id=row.company_id,
        email=row.email,
        password_hash=row.password_hash,
        role=row.role,
        created_at=row.created_at,
        last_login=row.last_login,
    )
