"""Tests for the Supabase/PostgREST store (httpx.MockTransport, no network)."""
import json
from decimal import Decimal

import httpx
import pytest

from freelance_crm.common.models import ClientDraft, ProjectDraft
from freelance_crm.common.storage import RecordNotFound, StoreError, SupabaseStore

CLIENT_ROW = {
    "id": "c-ann",
    "user_id": "owner-1",
    "full_name": "Ann Lee",
    "email": "ann@leestudio.com",
    "phone": None,
    "upwork_profile_url": None,
    "company_name": "Lee Studio",
    "company_website": None,
    "notes": None,
    "tags": ["vip"],
    "created_at": "2026-01-05T09:00:00+00:00",
    "updated_at": "2026-01-05T09:00:00+00:00",
}

PROJECT_ROW = {
    "id": "p-store",
    "user_id": "owner-1",
    "client_id": "c-ann",
    "title": "Store redesign",
    "description": None,
    "price": 1200.5,
    "deadline": "2026-10-01",
    "status": "ongoing",
    "store_url": None,
    "notes": None,
    "created_at": "2026-09-01T00:00:00+00:00",
    "updated_at": "2026-09-01T00:00:00+00:00",
}


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_store(handler) -> SupabaseStore:
    return SupabaseStore(
        "https://demo.supabase.co/", "anon-key",
        transport=httpx.MockTransport(handler),
    )


class TestConnection:

    def test_requires_url_and_key(self):
        with pytest.raises(StoreError):
            SupabaseStore("", "key")
        with pytest.raises(StoreError):
            SupabaseStore("https://demo.supabase.co", "")

    def test_auth_headers(self):
        handler = Recorder(body=[])
        make_store(handler).list_clients("owner-1")
        assert handler.last.headers["apikey"] == "anon-key"
        assert handler.last.headers["Authorization"] == "Bearer anon-key"


class TestReads:

    def test_list_clients_query(self):
        handler = Recorder(body=[CLIENT_ROW])
        clients = make_store(handler).list_clients("owner-1")
        url = handler.last.url
        assert url.path == "/rest/v1/clients"
        assert url.params["user_id"] == "eq.owner-1"
        assert url.params["order"] == "created_at.desc"
        assert clients[0].full_name == "Ann Lee"

    def test_numeric_price_becomes_decimal(self):
        handler = Recorder(body=[PROJECT_ROW])
        projects = make_store(handler).list_projects("owner-1")
        assert projects[0].price == Decimal("1200.5")

    def test_list_client_projects_filters_by_client(self):
        handler = Recorder(body=[])
        make_store(handler).list_client_projects("c-ann")
        assert handler.last.url.params["client_id"] == "eq.c-ann"

    def test_get_missing(self):
        with pytest.raises(RecordNotFound):
            make_store(Recorder(body=[])).get_client("nope")

    def test_invalid_row_is_store_error(self):
        bad = dict(PROJECT_ROW, status="cancelled")
        with pytest.raises(StoreError) as exc:
            make_store(Recorder(body=[bad])).list_projects("owner-1")
        assert exc.value.operation == "list_projects"


class TestWrites:

    def test_insert_client_payload(self):
        handler = Recorder(status_code=201, body=[CLIENT_ROW])
        client = make_store(handler).insert_client(
            "owner-1", ClientDraft(full_name="Ann Lee", email="ann@leestudio.com", tags=["VIP"]),
        )
        request = handler.last
        assert request.method == "POST"
        assert request.headers["Prefer"] == "return=representation"
        payload = json.loads(request.content)
        assert payload["user_id"] == "owner-1"
        assert payload["tags"] == ["vip"]
        assert client.id == "c-ann"

    def test_insert_project_sends_decimal_as_string(self):
        handler = Recorder(status_code=201, body=[PROJECT_ROW])
        make_store(handler).insert_project(
            "owner-1", ProjectDraft(client_id="c-ann", title="Store redesign", price="1200.50"),
        )
        payload = json.loads(handler.last.content)
        assert payload["price"] == "1200.50"
        assert payload["status"] == "pending"

    def test_update_targets_id(self):
        handler = Recorder(body=[PROJECT_ROW])
        make_store(handler).update_project(
            "p-store", ProjectDraft(client_id="c-ann", title="Store redesign"),
        )
        assert handler.last.method == "PATCH"
        assert handler.last.url.params["id"] == "eq.p-store"

    def test_delete_missing(self):
        with pytest.raises(RecordNotFound):
            make_store(Recorder(body=[])).delete_client("nope")

    def test_delete(self):
        handler = Recorder(body=[CLIENT_ROW])
        make_store(handler).delete_client("c-ann")
        assert handler.last.method == "DELETE"


class TestErrors:

    def test_http_error_carries_message_and_status(self):
        handler = Recorder(status_code=409, body={"message": "duplicate key value"})
        with pytest.raises(StoreError) as exc:
            make_store(handler).insert_client("owner-1", ClientDraft(full_name="Ann Lee", email="a@b.io"))
        assert exc.value.status_code == 409
        assert "duplicate key value" in str(exc.value)

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreError) as exc:
            make_store(handler).list_clients("owner-1")
        assert exc.value.status_code is None
        assert exc.value.operation == "list_clients"

    def test_empty_insert_response(self):
        handler = Recorder(status_code=201, body=None)
        with pytest.raises(StoreError):
            make_store(handler).insert_client("owner-1", ClientDraft(full_name="Ann Lee", email="a@b.io"))
