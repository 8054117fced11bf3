import argparse
import logging
import sys
from pathlib import Path

import requests

from sn_report import settings, templates
from sn_report.errors import SNReportError
from sn_report.logger import setup_logger
from sn_report.pipelines.reconcile import ReconcilePipeline
from sn_report.pipelines.upload import UploadPipeline
from sn_report.repository import ApiRepository
from sn_report.schemas import RecordKind

logger = logging.getLogger(__name__)

KINDS = [kind.value for kind in RecordKind]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serial number report: upload, templates and reconciliation.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level.")
    sub = parser.add_subparsers(dest="command", required=True)

    upload = sub.add_parser("upload", help="Normalize a CSV file and upload it in batches.")
    upload.add_argument("kind", choices=KINDS)
    upload.add_argument("file", type=Path, help="CSV file (relative paths resolve against INPUT_DIR).")
    upload.add_argument("--dry-run", action="store_true", help="Parse and save outputs without uploading.")

    template = sub.add_parser("template", help="Write the CSV template for an upload kind.")
    template.add_argument("kind", choices=KINDS)
    template.add_argument("--delimiter", default=None)

    reconcile = sub.add_parser("reconcile", help="Compute matched sales, securing and outstanding balance.")
    reconcile.add_argument("--salesforce", default=None)
    reconcile.add_argument("--tap", default=None)
    reconcile.add_argument("--dry-run", action="store_true", help="Log the summary without saving it.")

    return parser


def resolve_input(path: Path) -> Path:
    if path.is_absolute() or path.exists():
        return path
    return settings.INPUT_DIR / path


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(log_level=logging.DEBUG if args.verbose else None)

    try:
        if args.command == "upload":
            pipeline = UploadPipeline(
                RecordKind(args.kind),
                resolve_input(args.file),
                ApiRepository(),
                test_mode=args.dry_run,
            )
            result = pipeline.run()
            logger.info(f"✅ {len(result.records)} '{args.kind}' records processed.")
            if pipeline.sellthru_result is not None and not args.dry_run:
                logger.info(
                    f"✅ Update Sukses: {pipeline.sellthru_result.success} data. "
                    f"Gagal/Tidak Ditemukan: {pipeline.sellthru_result.failed} data."
                )
        elif args.command == "template":
            templates.write_template(RecordKind(args.kind), delimiter=args.delimiter)
        elif args.command == "reconcile":
            ReconcilePipeline(
                ApiRepository(), salesforce=args.salesforce, tap=args.tap, test_mode=args.dry_run
            ).run()
    except SNReportError as e:
        logger.error(f"❌ {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"❌ File not found: {e.filename}")
        return 1
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error talking to the API: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
