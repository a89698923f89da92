"""Command line entry point: ``python -m file_ingestion FILE [FILE ...]``."""

import argparse
import json
import sys
from dataclasses import replace
from typing import Optional, Sequence

from file_ingestion.config import IngestionConfig
from file_ingestion.exceptions import InvalidBatchError
from file_ingestion.ingest import ingest_paths
from file_ingestion.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="file-ingest",
        description="Extract text (and image thumbnails) from uploaded files",
    )
    p.add_argument("files", nargs="+", help="Files to ingest as one batch")
    p.add_argument("--mime-type", default=None, help="Override the MIME type guessed from extensions")
    p.add_argument("--thumbnails-dir", default=None, help="Write image thumbnails here")
    p.add_argument("--timeout", type=float, default=None, help="Batch timeout in seconds")
    p.add_argument("--log-level", default="WARNING", help="Python logging level (INFO, DEBUG, ...)")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    config = IngestionConfig.from_env()
    config.max_batch_size = max(config.max_batch_size, len(args.files))
    if args.timeout is not None:
        config.batch_timeout_seconds = args.timeout
    if args.thumbnails_dir:
        config.thumbnail = replace(config.thumbnail, output_dir=args.thumbnails_dir)

    try:
        outcomes = ingest_paths(args.files, mime_type=args.mime_type, config=config)
    except (ValueError, InvalidBatchError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    json.dump([outcome.to_dict() for outcome in outcomes], sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0 if all(outcome.success for outcome in outcomes) else 2


if __name__ == "__main__":
    raise SystemExit(main())
