"""Export clients/projects as CSV and as a plain-text report.

Nothing here touches the filesystem: every function returns a string (or an
ExportDocument holding one) for the emitter to write.

CSV layout:
  header line with bare column names, then one line per record with every
  field quoted; quotes inside values are doubled (RFC 4180).
"""
import csv
import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from ...common.models import Client, Project
from ..controlling.service import PortfolioStats, portfolio_stats

CLIENT_COLUMNS = ["Name", "Email", "Phone", "Company", "Website", "Tags", "Created"]
PROJECT_COLUMNS = ["Title", "Client", "Price", "Status", "Deadline", "Created"]

RULE = "=" * 80


class ExportKind(str, Enum):
    CLIENTS = "clients"
    PROJECTS = "projects"
    REPORT = "report"


@dataclass(frozen=True)
class ExportDocument:
    """Content plus the filename/MIME type the download should carry."""
    content: str
    filename: str
    mime_type: str


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_amount(amount: Decimal) -> str:
    """Plain number: 1200, 300.5 (no exponent, no trailing zeros)."""
    if amount == amount.to_integral_value():
        return format(amount.quantize(Decimal(1)), "f")
    return format(amount.normalize(), "f")


def format_money(amount: Decimal, symbol: str = "$") -> str:
    """Grouped amount with currency symbol: $1,500 / $1,200.5"""
    if amount == amount.to_integral_value():
        return f"{symbol}{amount.quantize(Decimal(1)):,}"
    return f"{symbol}{amount.normalize():,f}"


def _iso(value: Optional[date]) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime("%Y-%m-%d")


def _long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def _short_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _month_year(value: datetime) -> str:
    return f"{value:%b %Y}"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def _client_row(client: Client) -> List[str]:
    return [
        client.full_name,
        client.email,
        client.phone or "",
        client.company_name or "",
        client.company_website or "",
        ", ".join(client.tags),
        _iso(client.created_at),
    ]


def _project_row(project: Project, client_names: dict) -> List[str]:
    return [
        project.title,
        client_names.get(project.client_id, ""),
        format_amount(project.price),
        project.status.value,
        _iso(project.deadline),
        _iso(project.created_at),
    ]


def to_tabular(
    records: Sequence,
    kind: str,
    clients: Iterable[Client] = (),
) -> str:
    """CSV text for clients or projects.

    Projects show their client's name, looked up in `clients`.
    """
    kind = ExportKind(kind)
    if kind == ExportKind.CLIENTS:
        columns = CLIENT_COLUMNS
        rows = [_client_row(c) for c in records]
    elif kind == ExportKind.PROJECTS:
        client_names = {c.id: c.full_name for c in clients}
        columns = PROJECT_COLUMNS
        rows = [_project_row(p, client_names) for p in records]
    else:
        raise ValueError(f"No tabular export for {kind.value!r}")

    buf = io.StringIO()
    buf.write(",".join(columns) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Narrative report
# ---------------------------------------------------------------------------

def _section(title: str) -> List[str]:
    return ["", RULE, title, RULE]


def to_narrative(
    clients: Sequence[Client],
    projects: Sequence[Project],
    stats: Optional[PortfolioStats] = None,
    generated_at: Optional[datetime] = None,
    currency_symbol: str = "$",
) -> str:
    """Plain-text client management report."""
    generated_at = generated_at or datetime.now(timezone.utc)
    stats = stats or portfolio_stats(clients, projects, generated_at)
    client_names = {c.id: c.full_name for c in clients}

    lines = [
        "CLIENT MANAGEMENT REPORT",
        f"Generated: {_long_date(generated_at)}",
    ]

    lines += _section("SUMMARY")
    lines += [
        f"Total Clients: {stats.total_clients}",
        f"Total Projects: {stats.total_projects}",
        f"Total Revenue: {format_money(stats.total_revenue, currency_symbol)}",
        f"Pending Projects: {stats.pending_count}",
        f"Ongoing Projects: {stats.ongoing_count}",
        f"Completed Projects: {stats.completed_count}",
    ]

    lines += _section(f"CLIENTS ({len(clients)})")
    for c in clients:
        lines += [
            "",
            f"• {c.full_name}",
            f"  Email: {c.email}",
            f"  Company: {c.company_name or 'N/A'}",
            f"  Tags: {', '.join(c.tags) or 'None'}",
            f"  Since: {_month_year(c.created_at)}",
        ]

    lines += _section(f"PROJECTS ({len(projects)})")
    for p in projects:
        lines += [
            "",
            f"• {p.title}",
            f"  Client: {client_names.get(p.client_id) or 'N/A'}",
            f"  Price: {format_money(p.price, currency_symbol)}",
            f"  Status: {p.status.value.upper()}",
            f"  Deadline: {_short_date(p.deadline) if p.deadline else 'N/A'}",
        ]

    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def export_filename(kind: str, on: date) -> str:
    kind = ExportKind(kind)
    extension = "txt" if kind == ExportKind.REPORT else "csv"
    return f"{kind.value}-{on:%Y-%m-%d}.{extension}"


def build_document(
    kind: str,
    clients: Sequence[Client],
    projects: Sequence[Project],
    generated_at: Optional[datetime] = None,
    currency_symbol: str = "$",
) -> ExportDocument:
    """Render one export from the full (unfiltered) snapshot."""
    kind = ExportKind(kind)
    generated_at = generated_at or datetime.now(timezone.utc)
    filename = export_filename(kind, generated_at.date())

    if kind == ExportKind.CLIENTS:
        return ExportDocument(to_tabular(clients, kind), filename, "text/csv")
    if kind == ExportKind.PROJECTS:
        return ExportDocument(to_tabular(projects, kind, clients), filename, "text/csv")
    content = to_narrative(
        clients, projects,
        generated_at=generated_at,
        currency_symbol=currency_symbol,
    )
    return ExportDocument(content, filename, "text/plain")
