"""Controlling: revenue and status statistics over a client/project snapshot.

All functions are pure. "Revenue" is the contracted price of a project,
summed over every status (pending and ongoing included), not only paid work.
"""
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ...common.models import Client, Project, ProjectStatus

ZERO = Decimal('0')


@dataclass(frozen=True)
class ClientStats:
    """Per-client figures shown on the client card and detail page."""
    project_count: int
    ongoing_count: int
    completed_count: int
    total_revenue: Decimal


@dataclass(frozen=True)
class PortfolioStats:
    """Dashboard-wide figures."""
    total_clients: int
    total_projects: int
    total_revenue: Decimal
    ongoing_revenue: Decimal
    overdue_count: int
    pending_count: int
    ongoing_count: int
    completed_count: int


@dataclass(frozen=True)
class RevenueEntry:
    """One bar of the revenue-by-client chart."""
    client_id: str
    full_name: str
    label: str
    revenue: Decimal


@dataclass(frozen=True)
class DashboardSnapshot:
    portfolio: PortfolioStats
    status_breakdown: Dict[str, int]
    revenue_by_client: List[RevenueEntry]
    recent_projects: List[Project]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _sum_prices(projects) -> Decimal:
    return sum((p.price for p in projects), ZERO)


def is_overdue(project: Project, now: datetime) -> bool:
    """Deadline (start of that day) lies before `now` and the work is not done.

    The day starts in `now`'s timezone; a naive `now` is taken as UTC.
    """
    if project.deadline is None or project.status == ProjectStatus.COMPLETED:
        return False
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    due = datetime.combine(project.deadline, time.min, tzinfo=now.tzinfo)
    return due < now


def per_client_stats(projects: Sequence[Project], client_id: str) -> ClientStats:
    own = [p for p in projects if p.client_id == client_id]
    return ClientStats(
        project_count=len(own),
        ongoing_count=sum(1 for p in own if p.status == ProjectStatus.ONGOING),
        completed_count=sum(1 for p in own if p.status == ProjectStatus.COMPLETED),
        total_revenue=_sum_prices(own),
    )


def status_breakdown(projects: Sequence[Project]) -> Dict[str, int]:
    """Project count per status, always in pending/ongoing/completed order."""
    counts = {status.value: 0 for status in ProjectStatus}
    for project in projects:
        counts[project.status.value] += 1
    return counts


def portfolio_stats(
    clients: Sequence[Client],
    projects: Sequence[Project],
    now: Optional[datetime] = None,
) -> PortfolioStats:
    now = now or datetime.now(timezone.utc)
    counts = status_breakdown(projects)
    return PortfolioStats(
        total_clients=len(clients),
        total_projects=len(projects),
        total_revenue=_sum_prices(projects),
        ongoing_revenue=_sum_prices(p for p in projects if p.status == ProjectStatus.ONGOING),
        overdue_count=sum(1 for p in projects if is_overdue(p, now)),
        pending_count=counts[ProjectStatus.PENDING.value],
        ongoing_count=counts[ProjectStatus.ONGOING.value],
        completed_count=counts[ProjectStatus.COMPLETED.value],
    )


def revenue_by_client(
    clients: Sequence[Client],
    projects: Sequence[Project],
    top_n: int = 6,
) -> List[RevenueEntry]:
    """Clients ranked by revenue, highest first; ties keep client order."""
    revenue: Dict[str, Decimal] = {}
    for project in projects:
        revenue[project.client_id] = revenue.get(project.client_id, ZERO) + project.price

    entries = [
        RevenueEntry(
            client_id=c.id,
            full_name=c.full_name,
            label=c.first_name,
            revenue=revenue.get(c.id, ZERO),
        )
        for c in clients
    ]
    # sorted() is stable with reverse=True as well
    entries = sorted(entries, key=lambda e: e.revenue, reverse=True)
    return entries[:max(top_n, 0)]


def recent_projects(projects: Sequence[Project], n: int = 5) -> List[Project]:
    """Newest projects first; ties keep input order."""
    return sorted(projects, key=lambda p: p.created_at, reverse=True)[:max(n, 0)]


def dashboard(
    clients: Sequence[Client],
    projects: Sequence[Project],
    now: Optional[datetime] = None,
    top_n: int = 6,
    recent_n: int = 5,
) -> DashboardSnapshot:
    now = now or datetime.now(timezone.utc)
    return DashboardSnapshot(
        portfolio=portfolio_stats(clients, projects, now),
        status_breakdown=status_breakdown(projects),
        revenue_by_client=revenue_by_client(clients, projects, top_n),
        recent_projects=recent_projects(projects, recent_n),
        generated_at=now,
    )
