"""Collect App Store reviews from the command line.

Usage:
    python -m scripts.collect_reviews 585027354
    python -m scripts.collect_reviews 585027354 316126557 --max-pages 2
    python -m scripts.collect_reviews 585027354 316126557 --check-before-continue --max-age-days 2

Prints one line per review, one per page and one per finished app. With
--check-before-continue the next page of an app is only fetched when every
review on the current page is newer than --max-age-days.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, ".")

from review_collector import Collector, ConfigurationError, EventType
from review_collector.config import settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Collect App Store reviews for one or more apps.")
    p.add_argument("app_ids", nargs="+", help="Numeric App Store ids")
    p.add_argument("--max-pages", type=int, default=None, help="Pages per app, 0 for no cap")
    p.add_argument("--delay", type=int, default=None, help="Milliseconds between requests")
    p.add_argument("--max-retries", type=int, default=None, help="Attempts per page")
    p.add_argument(
        "--check-before-continue",
        action="store_true",
        help="Decide after each page whether to keep going",
    )
    p.add_argument(
        "--max-age-days",
        type=int,
        default=2,
        help="With --check-before-continue, stop an app at the first review older than this",
    )
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p.parse_args(argv)


def build_collector(args: argparse.Namespace, fetcher=None) -> Collector:
    overrides = {
        key: value
        for key, value in (
            ("max_pages", args.max_pages),
            ("delay", args.delay),
            ("max_retries", args.max_retries),
        )
        if value is not None
    }
    collector = Collector(
        args.app_ids,
        fetcher=fetcher,
        caller_driven_pagination=args.check_before_continue,
        **overrides,
    )

    @collector.on(EventType.REVIEW)
    def on_review(event):
        print(f"Found a {event.review.rating} star rating for {event.app_id} on page {event.page_num}")

    @collector.on(EventType.PAGE_COMPLETE)
    def on_page(event):
        print(f"Found {len(event.reviews)} reviews on page {event.page_num} of {event.app_id}")
        if event.continue_ is None:
            return
        cutoff = datetime.now(timezone.utc) - timedelta(days=args.max_age_days)
        if any(review.date < cutoff for review in event.reviews):
            print(f"Stop collecting reviews for {event.app_id}")
            event.stop()
        else:
            print(f"Keep collecting reviews for {event.app_id}")
            event.continue_()

    @collector.on(EventType.DONE_COLLECTING)
    def on_app_done(event):
        if event.error:
            print(
                f"Finished collecting for {event.app_id} due to error: {event.error}, "
                f"with {event.apps_remaining} apps to go",
                file=sys.stderr,
            )
        else:
            print(
                f"Finished collecting for {event.app_id} after page {event.page_num}, "
                f"with {event.apps_remaining} apps to go"
            )

    @collector.on(EventType.DONE_WITH_APPS)
    def on_all_done():
        print("Finished collecting for all of the apps")

    return collector


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if (settings.debug or args.debug) else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
    )

    try:
        collector = build_collector(args)
    except ConfigurationError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return 2

    outcomes = await collector.collect()
    return 0 if all(outcome.ok for outcome in outcomes) else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
