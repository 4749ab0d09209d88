from __future__ import annotations

import argparse
import asyncio
import sys

from imsmetrics.core.clock import utc_now
from imsmetrics.core.config import SUPPORTED_STANDARDS
from imsmetrics.core.logging import configure_logging
from imsmetrics.persistence.db import SessionLocal
from imsmetrics.services.actions import sweep_overdue_actions
from imsmetrics.services.objectives import refresh_objective_statuses
from imsmetrics.services.training import sweep_expired_training


def _build_parser() -> argparse.ArgumentParser:
    # Time-driven state changes in one pass; safe to schedule concurrently.
    parser = argparse.ArgumentParser(description="Apply overdue, expiry and objective status sweeps")
    parser.add_argument("--standard", choices=SUPPORTED_STANDARDS, default=None, help="Limit to one standard")
    parser.add_argument("--skip-training", action="store_true", help="Do not expire training records")
    return parser


async def _run(standard: str | None, skip_training: bool) -> int:
    now = utc_now()
    async with SessionLocal() as session:
        overdue = await sweep_overdue_actions(session, now=now, standard=standard)
        objectives = await refresh_objective_statuses(session, now=now, standard=standard)
        expired = 0 if skip_training else await sweep_expired_training(session, now=now)
    print(f"actions_overdue={overdue} objectives_refreshed={objectives} training_expired={expired}")
    return 0


def main() -> int:
    args = _build_parser().parse_args()
    configure_logging()
    try:
        return asyncio.run(_run(args.standard, args.skip_training))
    except Exception as exc:  # noqa: BLE001 - surface failure for cron diagnostics.
        print(f"sweep_overdue failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
