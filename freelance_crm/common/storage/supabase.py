"""Hosted store: Supabase / PostgREST over HTTP.

Tables (Supabase schema):
  clients   id, user_id, full_name, email, phone, upwork_profile_url,
            company_name, company_website, notes, tags[], created_at, updated_at
  projects  id, user_id, client_id → clients.id (on delete cascade), title,
            description, price numeric, deadline date, status, store_url,
            notes, created_at, updated_at

Only equality filters and ordering are used; row-level security on the
backend decides what the key may see.
"""

import logging
from typing import List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..models import Client, ClientDraft, Project, ProjectDraft
from .backend import RecordNotFound, RecordStore, StoreError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

NEWEST_FIRST = "created_at.desc"


class SupabaseStore(RecordStore):
    """PostgREST adapter for the `clients` and `projects` tables."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout_s: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not url or not api_key:
            raise StoreError("connect", "SUPABASE_URL and SUPABASE_KEY are required")
        self.base = f"{url.rstrip('/')}/rest/v1"
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }
        self._client = httpx.Client(
            base_url=self.base,
            headers=self.headers,
            timeout=timeout_s,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # --- Plumbing ---

    def _request(
        self,
        operation: str,
        method: str,
        table: str,
        params: Optional[dict] = None,
        payload: Optional[dict] = None,
        returning: bool = False,
    ) -> list:
        headers = {"Prefer": "return=representation"} if returning else {}
        logger.debug(f"{method} /{table} params={params}")
        try:
            resp = self._client.request(
                method, f"/{table}", params=params, json=payload, headers=headers
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"{operation} failed ({e.response.status_code}): {message}")
            raise StoreError(operation, message, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.error(f"{operation} failed: {e}")
            raise StoreError(operation, str(e) or e.__class__.__name__) from e

        if not resp.content:
            return []
        data = resp.json()
        return data if isinstance(data, list) else [data]

    def _validate(self, operation: str, model: Type[M], rows: list) -> List[M]:
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as e:
            logger.error(f"{operation}: store returned invalid rows: {e}")
            raise StoreError(operation, f"invalid {model.__name__} row ({e.error_count()} errors)") from e

    def _single(self, operation: str, model: Type[M], rows: list, record_id: str) -> M:
        if not rows:
            raise RecordNotFound(operation, record_id)
        return self._validate(operation, model, rows[:1])[0]

    # --- Clients ---

    def list_clients(self, owner_id: str) -> List[Client]:
        rows = self._request(
            "list_clients", "GET", "clients",
            params={"select": "*", "user_id": f"eq.{owner_id}", "order": NEWEST_FIRST},
        )
        return self._validate("list_clients", Client, rows)

    def get_client(self, client_id: str) -> Client:
        rows = self._request(
            "get_client", "GET", "clients",
            params={"select": "*", "id": f"eq.{client_id}"},
        )
        return self._single("get_client", Client, rows, client_id)

    def insert_client(self, owner_id: str, draft: ClientDraft) -> Client:
        rows = self._request(
            "insert_client", "POST", "clients",
            payload={**draft.to_row(), "user_id": owner_id},
            returning=True,
        )
        if not rows:
            raise StoreError("insert_client", "insert returned no row")
        return self._validate("insert_client", Client, rows[:1])[0]

    def update_client(self, client_id: str, draft: ClientDraft) -> Client:
        rows = self._request(
            "update_client", "PATCH", "clients",
            params={"id": f"eq.{client_id}"},
            payload=draft.to_row(),
            returning=True,
        )
        return self._single("update_client", Client, rows, client_id)

    def delete_client(self, client_id: str) -> None:
        rows = self._request(
            "delete_client", "DELETE", "clients",
            params={"id": f"eq.{client_id}"},
            returning=True,
        )
        if not rows:
            raise RecordNotFound("delete_client", client_id)

    # --- Projects ---

    def list_projects(self, owner_id: str) -> List[Project]:
        rows = self._request(
            "list_projects", "GET", "projects",
            params={"select": "*", "user_id": f"eq.{owner_id}", "order": NEWEST_FIRST},
        )
        return self._validate("list_projects", Project, rows)

    def list_client_projects(self, client_id: str) -> List[Project]:
        rows = self._request(
            "list_client_projects", "GET", "projects",
            params={"select": "*", "client_id": f"eq.{client_id}", "order": NEWEST_FIRST},
        )
        return self._validate("list_client_projects", Project, rows)

    def get_project(self, project_id: str) -> Project:
        rows = self._request(
            "get_project", "GET", "projects",
            params={"select": "*", "id": f"eq.{project_id}"},
        )
        return self._single("get_project", Project, rows, project_id)

    def insert_project(self, owner_id: str, draft: ProjectDraft) -> Project:
        rows = self._request(
            "insert_project", "POST", "projects",
            payload={**draft.to_row(), "user_id": owner_id},
            returning=True,
        )
        if not rows:
            raise StoreError("insert_project", "insert returned no row")
        return self._validate("insert_project", Project, rows[:1])[0]

    def update_project(self, project_id: str, draft: ProjectDraft) -> Project:
        rows = self._request(
            "update_project", "PATCH", "projects",
            params={"id": f"eq.{project_id}"},
            payload=draft.to_row(),
            returning=True,
        )
        return self._single("update_project", Project, rows, project_id)

    def delete_project(self, project_id: str) -> None:
        rows = self._request(
            "delete_project", "DELETE", "projects",
            params={"id": f"eq.{project_id}"},
            returning=True,
        )
        if not rows:
            raise RecordNotFound("delete_project", project_id)


def _error_message(response: httpx.Response) -> str:
    """PostgREST puts a human-readable message in the JSON body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or str(body)[:200]
    return str(body)[:200]
