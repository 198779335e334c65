"""Clients & projects CLI.

Usage:
    freelance-crm clients list --search acme --tag design
    freelance-crm clients add --name "Ann Lee" --email ann@x.io --tag vip
    freelance-crm projects list --status ongoing
    freelance-crm projects update <id> --status completed
"""
import argparse
import sys
from typing import Optional

from pydantic import ValidationError

from ...common.config import get_config
from ...common.models import ClientDraft, ProjectDraft, ProjectStatus
from ...common.storage import StoreError
from ..reporting.export import format_money
from ..search.filters import SearchFilter, StatusFilter, available_tags
from .service import CRMService, service_from_config

CLIENT_FIELDS = {
    # arg name → draft field
    "name": "full_name",
    "email": "email",
    "phone": "phone",
    "upwork": "upwork_profile_url",
    "company": "company_name",
    "website": "company_website",
    "notes": "notes",
    "tags": "tags",
}

PROJECT_FIELDS = {
    "client": "client_id",
    "title": "title",
    "description": "description",
    "price": "price",
    "deadline": "deadline",
    "status": "status",
    "store_url": "store_url",
    "notes": "notes",
}


def print_notification(level: str, message: str) -> None:
    if level == "error":
        print(f"❌ {message}", file=sys.stderr)
    else:
        print(f"✅ {message}")


def print_validation_error(e: ValidationError) -> None:
    print("❌ Invalid input:", file=sys.stderr)
    for err in e.errors():
        field = ".".join(str(part) for part in err["loc"]) or "input"
        print(f"   {field}: {err['msg']}", file=sys.stderr)


def _changes(args, fields: dict) -> dict:
    """Draft fields given on the command line (None = not given)."""
    return {
        draft_field: getattr(args, arg)
        for arg, draft_field in fields.items()
        if getattr(args, arg, None) is not None
    }


def _merge(current, draft_cls, changes: dict) -> dict:
    """Updates send the full row: current values overlaid with the changes."""
    data = current.model_dump(include=set(draft_cls.model_fields))
    data.update(changes)
    return data


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

def _list_clients(service: CRMService, args, symbol: str) -> int:
    snapshot = service.load_snapshot()
    if snapshot is None:
        return 1
    search = SearchFilter(query=args.search or "", tags=args.tags or ())
    cards = service.client_cards(snapshot, search)

    print(f"\n👥 Clients ({len(cards)} of {len(snapshot.clients)})")
    for client, stats in cards:
        company = client.company_name or ""
        print(
            f"  {client.id[:8]}  {client.full_name[:25]:<25} {company[:20]:<20} "
            f"{stats.project_count:>3} projects  {format_money(stats.total_revenue, symbol)}"
        )
        if client.tags:
            print(f"            🏷  {', '.join(client.tags)}")

    tags = available_tags(snapshot.clients)
    if tags:
        print(f"\n   Tags: {', '.join(tags)}")
    return 0


def _show_client(service: CRMService, args, symbol: str) -> int:
    detail = service.client_detail(args.id)
    if detail is None:
        return 1
    c, stats = detail.client, detail.stats

    print(f"\n👤 {c.full_name}")
    print(f"   Email:    {c.email}")
    for label, value in (
        ("Phone", c.phone),
        ("Company", c.company_name),
        ("Website", c.company_website),
        ("Upwork", c.upwork_profile_url),
        ("Notes", c.notes),
    ):
        if value:
            print(f"   {label + ':':<9} {value}")
    if c.tags:
        print(f"   Tags:     {', '.join(c.tags)}")
    print(f"   Since:    {c.created_at:%b %Y}")

    print(
        f"\n   {stats.project_count} projects · {stats.ongoing_count} ongoing · "
        f"{stats.completed_count} completed · {format_money(stats.total_revenue, symbol)}"
    )
    for p in detail.projects:
        deadline = f"  due {p.deadline}" if p.deadline else ""
        print(f"   - [{p.status.value:<9}] {p.title}  {format_money(p.price, symbol)}{deadline}")
    return 0


def _save_client(service: CRMService, args) -> int:
    changes = _changes(args, CLIENT_FIELDS)
    if args.action == "update":
        detail = service.client_detail(args.id)
        if detail is None:
            return 1
        changes = _merge(detail.client, ClientDraft, changes)

    try:
        draft = ClientDraft(**changes)
    except ValidationError as e:
        print_validation_error(e)
        return 1

    if args.action == "add":
        client = service.create_client(draft)
    else:
        client = service.update_client(args.id, draft)
    if client is None:
        return 1
    print(f"   {client.id}  {client.full_name}")
    return 0


def _add_client_args(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Full name")
    parser.add_argument("--email", required=required)
    parser.add_argument("--phone")
    parser.add_argument("--upwork", help="Upwork profile URL")
    parser.add_argument("--company", help="Company name")
    parser.add_argument("--website", help="Company website")
    parser.add_argument("--notes")
    parser.add_argument("--tag", dest="tags", action="append", help="Tag (repeatable)")


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def _list_projects(service: CRMService, args, symbol: str) -> int:
    snapshot = service.load_snapshot()
    if snapshot is None:
        return 1
    search = SearchFilter(query=args.search or "", status=args.status, tags=args.tags or ())
    projects = service.project_list(snapshot, search)
    clients = snapshot.clients_by_id

    print(f"\n📁 Projects ({len(projects)} of {len(snapshot.projects)})")
    for p in projects:
        client = clients.get(p.client_id)
        deadline = str(p.deadline) if p.deadline else "-"
        print(
            f"  {p.id[:8]}  [{p.status.value:<9}] {p.title[:30]:<30} "
            f"{(client.full_name if client else 'N/A')[:20]:<20} "
            f"{format_money(p.price, symbol):>12}  {deadline}"
        )
    return 0


def _save_project(service: CRMService, args) -> int:
    changes = _changes(args, PROJECT_FIELDS)
    if args.action == "update":
        current = service.project(args.id)
        if current is None:
            return 1
        changes = _merge(current, ProjectDraft, changes)

    try:
        draft = ProjectDraft(**changes)
    except ValidationError as e:
        print_validation_error(e)
        return 1

    if args.action == "add":
        project = service.create_project(draft)
    else:
        project = service.update_project(args.id, draft)
    if project is None:
        return 1
    print(f"   {project.id}  {project.title}")
    return 0


def _add_project_args(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--client", required=required, help="Client ID")
    parser.add_argument("--title", required=required)
    parser.add_argument("--description")
    parser.add_argument("--price", help="Contracted price")
    parser.add_argument("--deadline", help="YYYY-MM-DD")
    parser.add_argument("--status", choices=[s.value for s in ProjectStatus])
    parser.add_argument("--store-url", dest="store_url")
    parser.add_argument("--notes")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Clients & Projects")
    entities = parser.add_subparsers(dest="entity", required=True)

    clients = entities.add_parser("clients", help="Manage clients")
    c_actions = clients.add_subparsers(dest="action", required=True)
    c_list = c_actions.add_parser("list", help="List clients")
    c_list.add_argument("--search", help="Name, email or company contains")
    c_list.add_argument("--tag", dest="tags", action="append", help="Any of these tags")
    c_show = c_actions.add_parser("show", help="Client details with projects")
    c_show.add_argument("id")
    _add_client_args(c_actions.add_parser("add", help="Create a client"), required=True)
    c_update = c_actions.add_parser("update", help="Update a client")
    c_update.add_argument("id")
    _add_client_args(c_update, required=False)
    c_actions.add_parser("delete", help="Delete a client and its projects").add_argument("id")

    projects = entities.add_parser("projects", help="Manage projects")
    p_actions = projects.add_subparsers(dest="action", required=True)
    p_list = p_actions.add_parser("list", help="List projects")
    p_list.add_argument("--search", help="Title, description or client name contains")
    p_list.add_argument(
        "--status", choices=[s.value for s in StatusFilter], default=StatusFilter.ALL.value,
    )
    p_list.add_argument("--tag", dest="tags", action="append", help="Any of the client's tags")
    _add_project_args(p_actions.add_parser("add", help="Create a project"), required=True)
    p_update = p_actions.add_parser("update", help="Update a project")
    p_update.add_argument("id")
    _add_project_args(p_update, required=False)
    p_actions.add_parser("delete", help="Delete a project").add_argument("id")

    return parser


def run(service: CRMService, args, currency_symbol: str = "$") -> int:
    if args.entity == "clients":
        if args.action == "list":
            return _list_clients(service, args, currency_symbol)
        if args.action == "show":
            return _show_client(service, args, currency_symbol)
        if args.action == "delete":
            return 0 if service.delete_client(args.id) else 1
        return _save_client(service, args)

    if args.action == "list":
        return _list_projects(service, args, currency_symbol)
    if args.action == "delete":
        return 0 if service.delete_project(args.id) else 1
    return _save_project(service, args)


def main(argv: Optional[list] = None):
    args = build_parser().parse_args(argv)
    config = get_config()
    try:
        service = service_from_config(config, notify=print_notification)
    except StoreError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    try:
        code = run(service, args, config.profile.currency_symbol)
    finally:
        service.store.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
