"""Revenue & status statistics (dashboard)."""

from .service import (
    ClientStats,
    DashboardSnapshot,
    PortfolioStats,
    RevenueEntry,
    dashboard,
    is_overdue,
    per_client_stats,
    portfolio_stats,
    recent_projects,
    revenue_by_client,
    status_breakdown,
)

__all__ = [
    'ClientStats', 'DashboardSnapshot', 'PortfolioStats', 'RevenueEntry',
    'dashboard', 'is_overdue', 'per_client_stats', 'portfolio_stats',
    'recent_projects', 'revenue_by_client', 'status_breakdown',
]
