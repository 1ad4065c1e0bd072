#!/usr/bin/env python3
"""
Cleanup script to remove stored post images that no post references.

Objects are orphaned when a best-effort deletion fails after a post is
edited or deleted. This script lists every object under the posts/ prefix,
compares it with the keys referenced by the posts table and deletes the rest.

Objects younger than --min-age-minutes are left alone: a create or edit
uploads before it writes its row, so a fresh unreferenced object may be
about to gain a post. The age comes from the millisecond timestamp in the
key, or from the object's LastModified for keys without one.

Run:
    PYTHONPATH=src python seed/cleanup_orphans.py --dry-run
    PYTHONPATH=src python seed/cleanup_orphans.py
"""

import argparse
import sys
from datetime import datetime

from aws_lambda_powertools import Logger

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.dynamodb_posts import DynamoDBPostRepository
from core.infrastructure.aws.s3_object_store import S3ObjectStore
from core.repositories.post_repository import PostRepository
from core.services.storage_keys import key_timestamp_ms
from core.utils.config import load_object_store_settings
from core.utils.constants import ORPHAN_MIN_AGE_MINUTES, POST_KEY_PREFIX
from core.utils.time import utc_now_millis

logger = Logger(service="cleanup")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove orphaned post images")

    parser.add_argument(
        "--prefix",
        default=POST_KEY_PREFIX,
        help="Key prefix to scan (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report orphaned keys",
    )
    parser.add_argument(
        "--min-age-minutes",
        type=int,
        default=ORPHAN_MIN_AGE_MINUTES,
        help="Skip objects uploaded more recently than this (default: %(default)s)",
    )

    args = parser.parse_args(argv)
    if args.min_age_minutes < 0:
        parser.error("--min-age-minutes must not be negative")

    return args


def uploaded_at_ms(key: str, last_modified: datetime) -> int:
    timestamp = key_timestamp_ms(key)
    if timestamp is None:
        return int(last_modified.timestamp() * 1000)
    return timestamp


def find_orphans(
    *,
    stored: list[tuple[str, datetime]],
    posts: PostRepository,
    min_age_minutes: int = ORPHAN_MIN_AGE_MINUTES,
    now_ms: int | None = None,
) -> list[str]:
    """Stored keys that no post points at and are old enough to remove.

    Keys are returned in listing order.
    """
    if now_ms is None:
        now_ms = utc_now_millis()
    cutoff_ms = now_ms - min_age_minutes * 60_000

    referenced = posts.list_image_keys()
    orphans: list[str] = []

    for key, last_modified in stored:
        if key in referenced:
            continue

        if uploaded_at_ms(key, last_modified) > cutoff_ms:
            logger.info("Skipping recent unreferenced image", extra={"key": key})
            continue

        orphans.append(key)

    return orphans


def cleanup_orphans(argv: list[str] | None = None) -> int:
    """Run the cleanup; returns the number of failed deletions."""
    args = parse_args(argv)

    settings = load_object_store_settings()
    if settings is None:
        logger.error("Object store is not configured")
        sys.exit(1)

    adapter = S3Adapter(settings)
    store = S3ObjectStore(settings, adapter=adapter)

    try:
        stored = adapter.list_objects(prefix=args.prefix)
        orphans = find_orphans(
            stored=stored,
            posts=DynamoDBPostRepository(),
            min_age_minutes=args.min_age_minutes,
        )
    except Exception as exc:
        logger.exception("Cleanup failed", exc_info=exc)
        sys.exit(1)

    logger.info(
        "Orphan scan completed",
        extra={
            "stored": len(stored),
            "orphaned": len(orphans),
            "min_age_minutes": args.min_age_minutes,
            "dry_run": args.dry_run,
        },
    )

    failures = 0
    for key in orphans:
        if args.dry_run:
            logger.info("Orphaned image", extra={"key": key})
            continue

        result = store.delete(key=key)
        if result.ok:
            logger.info("Deleted orphaned image", extra={"key": key})
        else:
            failures += 1
            logger.error(
                "Failed to delete orphaned image",
                extra={"key": key, "error": result.error},
            )

    logger.info("Cleanup completed", extra={"failures": failures})
    return failures


if __name__ == "__main__":
    sys.exit(1 if cleanup_orphans() else 0)
