"""Controlling CLI - dashboard figures."""
import argparse
import json
import sys
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ...common.config import get_config
from ...common.storage import StoreError
from ..crm.cli import print_notification
from ..crm.service import service_from_config
from ..reporting.export import format_money
from .service import DashboardSnapshot


def _json_default(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def dashboard_json(snapshot: DashboardSnapshot) -> str:
    return json.dumps(asdict(snapshot), default=_json_default, indent=2, ensure_ascii=False)


def print_dashboard(snapshot: DashboardSnapshot, symbol: str = "$") -> None:
    s = snapshot.portfolio
    print(f"\n📊 Dashboard ({snapshot.generated_at:%Y-%m-%d %H:%M})")
    print(f"   Clients:          {s.total_clients}")
    print(f"   Projects:         {s.total_projects}")
    print(f"   Total revenue:    {format_money(s.total_revenue, symbol)}")
    print(f"   Ongoing revenue:  {format_money(s.ongoing_revenue, symbol)}")
    print(f"   Overdue:          {s.overdue_count}")

    print("\n   Status:")
    for status, count in snapshot.status_breakdown.items():
        print(f"     {status:<10} {count:>4}")

    if snapshot.revenue_by_client:
        print("\n   Revenue by client:")
        for entry in snapshot.revenue_by_client:
            print(f"     {entry.label[:15]:<15} {format_money(entry.revenue, symbol):>12}")

    if snapshot.recent_projects:
        print("\n   Recent projects:")
        for p in snapshot.recent_projects:
            print(f"     [{p.status.value:<9}] {p.title}  {format_money(p.price, symbol)}")


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Financial Controlling")
    parser.add_argument("--json", action="store_true", help="Print the dashboard as JSON")
    args = parser.parse_args(argv)

    config = get_config()
    try:
        service = service_from_config(config, notify=print_notification)
    except StoreError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    try:
        snapshot = service.load_snapshot()
    finally:
        service.store.close()
    if snapshot is None:
        sys.exit(1)

    board = service.dashboard(
        snapshot,
        now=config.profile.now(),
        top_n=config.export.top_clients,
        recent_n=config.export.recent_projects,
    )
    if args.json:
        print(dashboard_json(board))
    else:
        print_dashboard(board, config.profile.currency_symbol)


if __name__ == "__main__":
    main()
