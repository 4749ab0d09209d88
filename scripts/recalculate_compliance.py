from __future__ import annotations

import argparse
import asyncio
import sys

from imsmetrics.core.config import SUPPORTED_STANDARDS
from imsmetrics.core.logging import configure_logging
from imsmetrics.persistence.db import SessionLocal
from imsmetrics.persistence.repos.compliance_scores import list_scores
from imsmetrics.services.compliance import overall_posture, recalculate_all


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Recalculate per-standard compliance scores")
    parser.add_argument(
        "--standard",
        choices=SUPPORTED_STANDARDS,
        default=None,
        help="Standard to recalculate (default: all configured standards)",
    )
    return parser


async def _run(standard: str | None) -> int:
    async with SessionLocal() as session:
        rows = await recalculate_all(session, standards=[standard] if standard else None)
        for row in rows:
            print(f"{row.standard} overall={row.overall_score} items={row.compliant_items}/{row.total_items}")
        posture = overall_posture(await list_scores(session))
    print(f"overall posture={posture['overall']}")
    return 0


def main() -> int:
    args = _build_parser().parse_args()
    configure_logging()
    try:
        return asyncio.run(_run(args.standard))
    except Exception as exc:  # noqa: BLE001 - surface failure for cron diagnostics.
        print(f"recalculate_compliance failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
