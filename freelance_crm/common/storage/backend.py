"""Abstract record store."""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Client, ClientDraft, Project, ProjectDraft


class StoreError(Exception):
    """A store call failed (network, auth, validation, constraint)."""

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation}: {message}")


class RecordNotFound(StoreError):
    """The requested row does not exist (or is not visible to this owner)."""

    def __init__(self, operation: str, record_id: str):
        self.record_id = record_id
        super().__init__(operation, f"no record with id {record_id!r}", status_code=404)


class RecordStore(ABC):
    """Abstract base class for the client/project store.

    Every method maps to exactly one row operation on the backend and may
    raise StoreError. Rows are returned as validated records.
    """

    # --- Clients ---

    @abstractmethod
    def list_clients(self, owner_id: str) -> List[Client]:
        """All clients of an owner, newest first."""
        pass

    @abstractmethod
    def get_client(self, client_id: str) -> Client:
        """Single client; raises RecordNotFound."""
        pass

    @abstractmethod
    def insert_client(self, owner_id: str, draft: ClientDraft) -> Client:
        pass

    @abstractmethod
    def update_client(self, client_id: str, draft: ClientDraft) -> Client:
        pass

    @abstractmethod
    def delete_client(self, client_id: str) -> None:
        """Delete a client. Its projects go with it."""
        pass

    # --- Projects ---

    @abstractmethod
    def list_projects(self, owner_id: str) -> List[Project]:
        """All projects of an owner, newest first."""
        pass

    @abstractmethod
    def list_client_projects(self, client_id: str) -> List[Project]:
        """Projects of one client, newest first."""
        pass

    @abstractmethod
    def get_project(self, project_id: str) -> Project:
        """Single project; raises RecordNotFound."""
        pass

    @abstractmethod
    def insert_project(self, owner_id: str, draft: ProjectDraft) -> Project:
        pass

    @abstractmethod
    def update_project(self, project_id: str, draft: ProjectDraft) -> Project:
        pass

    @abstractmethod
    def delete_project(self, project_id: str) -> None:
        pass

    def close(self) -> None:
        """Release connections. Default: nothing to release."""

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
