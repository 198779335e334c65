"""Export CLI."""
import argparse
import sys
from pathlib import Path
from typing import Optional

from ...common.config import get_config
from ...common.storage import StoreError
from ..crm.cli import print_notification
from ..crm.service import service_from_config
from .emitter import DirectoryEmitter
from .export import ExportKind


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Export clients, projects or a report")
    parser.add_argument("kind", choices=[k.value for k in ExportKind])
    parser.add_argument(
        "--output-dir", type=Path, default=None,
        help="Output directory (default: export.output_dir from config)",
    )
    args = parser.parse_args(argv)

    config = get_config()
    try:
        service = service_from_config(config, notify=print_notification)
    except StoreError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    emitter = DirectoryEmitter(args.output_dir or Path(config.export.output_dir))
    try:
        path = service.export(
            args.kind, emitter,
            generated_at=config.profile.now(),
            currency_symbol=config.profile.currency_symbol,
        )
    finally:
        service.store.close()
    if path is None:
        sys.exit(1)
    print(f"   {path}")


if __name__ == "__main__":
    main()
