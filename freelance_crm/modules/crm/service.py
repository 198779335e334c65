"""CRM service - client/project actions against the record store.

Every action is a single store call. When it fails the user gets a transient
notification ("Failed to create client") and the action is simply not
applied: no retry, no rollback. Reads return a Snapshot that the pure
search/controlling/reporting functions work on.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from ...common.config import CRMConfig
from ...common.models import Client, ClientDraft, Project, ProjectDraft
from ...common.storage import RecordStore, StoreError, create_store
from ..controlling.service import ClientStats, DashboardSnapshot, dashboard, per_client_stats
from ..reporting.emitter import FileEmitter
from ..reporting.export import ExportKind, build_document
from ..search.filters import SearchFilter, filter_clients, filter_projects

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (level, message) → shown to the user; level is "success" or "error"
Notifier = Callable[[str, str], None]

# Owner used by the local SQL store when CRM_OWNER_ID is unset
LOCAL_OWNER = "local"

EXPORT_MESSAGES = {
    ExportKind.CLIENTS: "Clients exported to CSV",
    ExportKind.PROJECTS: "Projects exported to CSV",
    ExportKind.REPORT: "Report exported",
}


def log_notifier(level: str, message: str) -> None:
    """Default notifier: notifications only go to the log."""
    logger.log(logging.WARNING if level == "error" else logging.INFO, message)


@dataclass(frozen=True)
class Snapshot:
    """Clients and projects as fetched in one refresh."""
    clients: List[Client] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)

    @property
    def clients_by_id(self) -> Dict[str, Client]:
        return {c.id: c for c in self.clients}

    def get_client(self, client_id: str) -> Optional[Client]:
        return self.clients_by_id.get(client_id)

    def projects_of(self, client_id: str) -> List[Project]:
        return [p for p in self.projects if p.client_id == client_id]

    def client_of(self, project_id: str) -> Optional[Client]:
        project = next((p for p in self.projects if p.id == project_id), None)
        if project is None:
            return None
        return self.get_client(project.client_id)


@dataclass(frozen=True)
class ClientDetail:
    client: Client
    projects: List[Project]
    stats: ClientStats


class CRMService:
    """Service for managing clients and projects of one owner."""

    def __init__(
        self,
        store: RecordStore,
        owner_id: str,
        notify: Optional[Notifier] = None,
    ):
        self.store = store
        self.owner_id = owner_id
        self.notify = notify if notify is not None else log_notifier

    def _attempt(
        self,
        call: Callable[[], T],
        failure: str,
        success: Optional[str] = None,
    ) -> Optional[T]:
        """Run one store call; report the outcome, swallow StoreError."""
        try:
            result = call()
        except StoreError as e:
            logger.error(f"{failure}: {e}")
            self.notify("error", failure)
            return None
        if success:
            self.notify("success", success)
        return result

    # --- Reads ---

    def load_snapshot(self) -> Optional[Snapshot]:
        def _load():
            return Snapshot(
                clients=self.store.list_clients(self.owner_id),
                projects=self.store.list_projects(self.owner_id),
            )
        return self._attempt(_load, "Failed to load data")

    def client_detail(self, client_id: str) -> Optional[ClientDetail]:
        def _load():
            client = self.store.get_client(client_id)
            projects = self.store.list_client_projects(client_id)
            return ClientDetail(client, projects, per_client_stats(projects, client_id))
        return self._attempt(_load, "Failed to load client")

    def project(self, project_id: str) -> Optional[Project]:
        return self._attempt(
            lambda: self.store.get_project(project_id), "Failed to load project",
        )

    # --- Clients ---

    def create_client(self, draft: ClientDraft) -> Optional[Client]:
        return self._attempt(
            lambda: self.store.insert_client(self.owner_id, draft),
            "Failed to create client", "Client created",
        )

    def update_client(self, client_id: str, draft: ClientDraft) -> Optional[Client]:
        return self._attempt(
            lambda: self.store.update_client(client_id, draft),
            "Failed to update client", "Client updated",
        )

    def delete_client(self, client_id: str) -> bool:
        done = self._attempt(
            lambda: self.store.delete_client(client_id) or True,
            "Failed to delete client", "Client deleted",
        )
        return bool(done)

    # --- Projects ---

    def create_project(self, draft: ProjectDraft) -> Optional[Project]:
        return self._attempt(
            lambda: self.store.insert_project(self.owner_id, draft),
            "Failed to create project", "Project created",
        )

    def update_project(self, project_id: str, draft: ProjectDraft) -> Optional[Project]:
        return self._attempt(
            lambda: self.store.update_project(project_id, draft),
            "Failed to update project", "Project updated",
        )

    def delete_project(self, project_id: str) -> bool:
        done = self._attempt(
            lambda: self.store.delete_project(project_id) or True,
            "Failed to delete project", "Project deleted",
        )
        return bool(done)

    # --- Views over a snapshot ---

    @staticmethod
    def client_cards(
        snapshot: Snapshot,
        search: SearchFilter = SearchFilter(),
    ) -> List[Tuple[Client, ClientStats]]:
        """Filtered clients with their project stats (clients page)."""
        return [
            (c, per_client_stats(snapshot.projects, c.id))
            for c in filter_clients(snapshot.clients, search)
        ]

    @staticmethod
    def project_list(
        snapshot: Snapshot,
        search: SearchFilter = SearchFilter(),
    ) -> List[Project]:
        return filter_projects(snapshot.projects, search, snapshot.clients)

    @staticmethod
    def dashboard(
        snapshot: Snapshot,
        now: Optional[datetime] = None,
        top_n: int = 6,
        recent_n: int = 5,
    ) -> DashboardSnapshot:
        return dashboard(snapshot.clients, snapshot.projects, now, top_n, recent_n)

    # --- Export ---

    def export(
        self,
        kind: str,
        emitter: FileEmitter,
        generated_at: Optional[datetime] = None,
        currency_symbol: str = "$",
    ) -> Optional[Path]:
        """Fetch a fresh, unfiltered snapshot and emit one export."""
        kind = ExportKind(kind)
        snapshot = self.load_snapshot()
        if snapshot is None:
            return None
        document = build_document(
            kind, snapshot.clients, snapshot.projects,
            generated_at=generated_at, currency_symbol=currency_symbol,
        )
        try:
            path = emitter.emit(document)
        except OSError as e:
            logger.error(f"Export of {document.filename} failed: {e}")
            self.notify("error", "Export failed")
            return None
        self.notify("success", EXPORT_MESSAGES[kind])
        return path


def service_from_config(config: CRMConfig, notify: Optional[Notifier] = None) -> CRMService:
    """Create store + service for the configured backend and owner."""
    owner_id = config.profile.owner_id
    if not owner_id:
        if config.store.backend == "supabase":
            raise StoreError("connect", "CRM_OWNER_ID not set")
        owner_id = LOCAL_OWNER
    return CRMService(create_store(config), owner_id, notify)
