#!/usr/bin/env python3
"""Unified CLI for the freelancer CRM.

Usage:
    freelance-crm clients --help
    freelance-crm projects --help
    freelance-crm dashboard --help
    freelance-crm export --help
"""
import argparse
import logging
import os
import sys


def main():
    parser = argparse.ArgumentParser(
        description='Freelancer CRM - clients, projects, revenue',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modules:
  clients     Client records (list, show, add, update, delete)
  projects    Project records (list, add, update, delete)
  dashboard   Portfolio statistics
  export      CSV exports and the text report

Examples:
  freelance-crm clients list --search acme --tag design
  freelance-crm clients add --name "Ann Lee" --email ann@x.io --tag vip
  freelance-crm projects add --client <id> --title "Store redesign" --price 1200
  freelance-crm projects list --status ongoing
  freelance-crm dashboard --json
  freelance-crm export report
"""
    )

    parser.add_argument(
        'module',
        choices=['clients', 'projects', 'dashboard', 'export'],
        help='Module to run'
    )

    # Parse just the module, pass rest (including --help) to submodule
    args = parser.parse_args(sys.argv[1:2])
    remaining = sys.argv[2:]

    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'WARNING').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Dispatch to module CLI
    if args.module in ('clients', 'projects'):
        from freelance_crm.modules.crm.cli import main as crm_main
        sys.argv = ['crm', args.module] + remaining
        crm_main()

    elif args.module == 'dashboard':
        from freelance_crm.modules.controlling.cli import main as ctrl_main
        sys.argv = ['dashboard'] + remaining
        ctrl_main()

    elif args.module == 'export':
        from freelance_crm.modules.reporting.cli import main as export_main
        sys.argv = ['export'] + remaining
        export_main()


if __name__ == '__main__':
    main()
