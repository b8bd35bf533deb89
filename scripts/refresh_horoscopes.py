#!/usr/bin/env python3
"""
Refresh script for the horoscope cache.

Meant to run from a scheduler (e.g. cron at 00:01 Moscow time). Stored
horoscopes never expire on their own, so this script deletes the periods
that should be regenerated and then reconciles every sign, which generates
whatever is missing.

Examples:
    # Regenerate the daily periods for all signs
    python scripts/refresh_horoscopes.py --invalidate YESTERDAY TODAY TOMORROW

    # Only fill gaps, delete nothing
    python scripts/refresh_horoscopes.py
"""

import argparse
import asyncio
import time

from horoscope_cache.config import configure_logging
from horoscope_cache.entities import Period, Sign
from horoscope_cache.exceptions import HoroscopeError
from horoscope_cache.repositories import GeminiGenerationClient, RedisContentRepository
from horoscope_cache.services import HoroscopeService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def invalidate(service: HoroscopeService, signs: list[Sign], periods: list[Period]) -> int:
    """Delete the given periods for every sign."""
    print_section("Invalidating")
    deleted = 0
    for sign in signs:
        for period in periods:
            if await service.invalidate(sign, period):
                deleted += 1
    print(f"Deleted {deleted} stored horoscopes")
    return deleted


async def reconcile(service: HoroscopeService, signs: list[Sign]) -> int:
    """Reconcile every sign one at a time; returns the number of failed signs."""
    print_section("Reconciling")
    failures = 0
    for sign in signs:
        start_time = time.time()
        try:
            artifacts = await service.get_all_horoscopes(sign)
        except HoroscopeError as e:
            failures += 1
            print(f"{sign.emoji} {sign.value:<10} FAILED: {e}")
            continue

        elapsed = time.time() - start_time
        placeholders = [a.period.value for a in artifacts if a.is_placeholder]
        status = f"placeholders: {', '.join(placeholders)}" if placeholders else "ok"
        print(f"{sign.emoji} {sign.value:<10} {len(artifacts)} periods in {elapsed:.1f}s ({status})")
    return failures


async def main() -> int:
    parser = argparse.ArgumentParser(description="Invalidate and regenerate stored horoscopes")
    parser.add_argument(
        "--invalidate",
        nargs="*",
        default=[],
        metavar="PERIOD",
        help="Periods to delete before reconciling (e.g. TODAY or Сегодня)",
    )
    parser.add_argument(
        "--sign",
        action="append",
        default=[],
        help="Restrict to these signs (repeatable). Defaults to all twelve.",
    )
    args = parser.parse_args()

    configure_logging()

    signs = [Sign.parse(s) for s in args.sign] or list(Sign)
    periods = [Period.parse(p) for p in args.invalidate]

    store = RedisContentRepository.create()
    service = HoroscopeService.create(store=store, generator=GeminiGenerationClient.create())

    try:
        if periods:
            await invalidate(service, signs, periods)
        failures = await reconcile(service, signs)
    finally:
        await store.close()

    print_section("Done")
    print(f"{len(signs) - failures}/{len(signs)} signs reconciled")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
