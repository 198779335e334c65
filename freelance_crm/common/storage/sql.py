"""SQLAlchemy 2.0 store for local/offline use and tests.

Two tables, same shape as the hosted schema:
- clients:   one row per client, tags as JSON array
- projects:  one row per project, FK to clients with ON DELETE CASCADE

Amounts are stored as integer cents so sums stay exact on SQLite.

Environment variables:
  DATABASE_URL : any SQLAlchemy URL (default: sqlite:///data/crm.db)
"""
import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Generator, List, Optional

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
    create_engine,
    event,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    sessionmaker,
)

from ..models import Client, ClientDraft, Project, ProjectDraft
from .backend import RecordNotFound, RecordStore, StoreError

logger = logging.getLogger(__name__)

DEFAULT_DB_URL = "sqlite:///data/crm.db"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Money(TypeDecorator):
    """Decimal amount persisted as integer minor units (cents)."""
    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        cents = (Decimal(value) * 100).to_integral_value(rounding=ROUND_HALF_UP)
        return int(cents)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value) / 100


class Base(DeclarativeBase):
    """Shared declarative base for CRM tables."""
    pass


class ClientRow(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    upwork_profile_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    company_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    company_website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    projects: Mapped[list["ProjectRow"]] = relationship(
        back_populates="client",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_clients_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ClientRow(id={self.id}, name='{self.full_name}')>"


class ProjectRow(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    store_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    client: Mapped["ClientRow"] = relationship(back_populates="projects")

    __table_args__ = (
        Index("ix_projects_user_created", "user_id", "created_at"),
        Index("ix_projects_client", "client_id"),
        Index("ix_projects_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProjectRow(id={self.id}, title='{self.title[:40]}', "
            f"status='{self.status}')>"
        )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def get_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create SQLAlchemy engine. SQLite gets WAL and foreign keys."""
    url = url or DEFAULT_DB_URL
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, echo=echo)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def init_db(engine: Engine) -> None:
    """Create all tables (IF NOT EXISTS)."""
    Base.metadata.create_all(engine)
    logger.info("Database tables created.")


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; everything is written in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _columns(row) -> dict:
    data = {c.key: getattr(row, c.key) for c in row.__table__.columns}
    data["created_at"] = _aware(data["created_at"])
    data["updated_at"] = _aware(data["updated_at"])
    return data


def _client_record(row: ClientRow) -> Client:
    return Client.model_validate(_columns(row))


def _project_record(row: ProjectRow) -> Project:
    return Project.model_validate(_columns(row))


def _project_values(draft: ProjectDraft) -> dict:
    values = draft.model_dump()
    values["status"] = draft.status.value
    return values


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class SQLStore(RecordStore):
    """RecordStore on a SQLAlchemy engine. One session per call."""

    def __init__(self, engine: Optional[Engine] = None, url: Optional[str] = None):
        self.engine = engine or get_engine(url)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        init_db(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self, operation: str) -> Generator[Session, None, None]:
        """Session with auto-commit/rollback; driver errors become StoreError."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"{operation} failed: {e}")
            raise StoreError(operation, str(e.__cause__ or e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _get(self, session: Session, model, record_id: str, operation: str):
        row = session.get(model, record_id)
        if row is None:
            raise RecordNotFound(operation, record_id)
        return row

    # --- Clients ---

    def list_clients(self, owner_id: str) -> List[Client]:
        with self._session("list_clients") as session:
            rows = session.scalars(
                select(ClientRow)
                .where(ClientRow.user_id == owner_id)
                .order_by(ClientRow.created_at.desc())
            ).all()
            return [_client_record(r) for r in rows]

    def get_client(self, client_id: str) -> Client:
        with self._session("get_client") as session:
            return _client_record(self._get(session, ClientRow, client_id, "get_client"))

    def insert_client(self, owner_id: str, draft: ClientDraft) -> Client:
        with self._session("insert_client") as session:
            row = ClientRow(user_id=owner_id, **draft.model_dump())
            session.add(row)
            session.flush()
            logger.debug(f"Inserted {row!r}")
            return _client_record(row)

    def update_client(self, client_id: str, draft: ClientDraft) -> Client:
        with self._session("update_client") as session:
            row = self._get(session, ClientRow, client_id, "update_client")
            for key, value in draft.model_dump().items():
                setattr(row, key, value)
            row.updated_at = _utcnow()
            session.flush()
            return _client_record(row)

    def delete_client(self, client_id: str) -> None:
        with self._session("delete_client") as session:
            row = self._get(session, ClientRow, client_id, "delete_client")
            session.delete(row)

    # --- Projects ---

    def list_projects(self, owner_id: str) -> List[Project]:
        with self._session("list_projects") as session:
            rows = session.scalars(
                select(ProjectRow)
                .where(ProjectRow.user_id == owner_id)
                .order_by(ProjectRow.created_at.desc())
            ).all()
            return [_project_record(r) for r in rows]

    def list_client_projects(self, client_id: str) -> List[Project]:
        with self._session("list_client_projects") as session:
            rows = session.scalars(
                select(ProjectRow)
                .where(ProjectRow.client_id == client_id)
                .order_by(ProjectRow.created_at.desc())
            ).all()
            return [_project_record(r) for r in rows]

    def get_project(self, project_id: str) -> Project:
        with self._session("get_project") as session:
            return _project_record(self._get(session, ProjectRow, project_id, "get_project"))

    def insert_project(self, owner_id: str, draft: ProjectDraft) -> Project:
        with self._session("insert_project") as session:
            row = ProjectRow(user_id=owner_id, **_project_values(draft))
            session.add(row)
            session.flush()
            logger.debug(f"Inserted {row!r}")
            return _project_record(row)

    def update_project(self, project_id: str, draft: ProjectDraft) -> Project:
        with self._session("update_project") as session:
            row = self._get(session, ProjectRow, project_id, "update_project")
            for key, value in _project_values(draft).items():
                setattr(row, key, value)
            row.updated_at = _utcnow()
            session.flush()
            return _project_record(row)

    def delete_project(self, project_id: str) -> None:
        with self._session("delete_project") as session:
            row = self._get(session, ProjectRow, project_id, "delete_project")
            session.delete(row)
