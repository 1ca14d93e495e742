#!/usr/bin/env python3
"""Delete expired sessions and sessions revoked long ago.

Meant to be run periodically by an external scheduler (cron, k8s CronJob).
Safe to run concurrently or repeatedly.

Usage:
    python scripts/cleanup_sessions.py
    python scripts/cleanup_sessions.py --retention-days 7
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


async def cleanup(retention_days: int) -> dict:
    from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
    from src.app.use_cases.sessions import CleanupExpiredSessionsUseCase
    from src.depends import AsyncSessionLocal, engine

    try:
        async with AsyncSessionLocal() as session:
            use_case = CleanupExpiredSessionsUseCase(SqlAlchemyUnitOfWork(session))
            result = await use_case.execute(retention_days)
    finally:
        await engine.dispose()

    if result.is_err():
        raise RuntimeError(f"{result.error.code}: {result.error.message}")
    return result.value


def main() -> int:
    from config import ApplicationConfig

    parser = argparse.ArgumentParser(description="Sweep dead auth sessions")
    parser.add_argument(
        "--retention-days",
        type=int,
        default=ApplicationConfig.REVOKED_SESSION_RETENTION_DAYS,
        help="Keep revoked sessions this many days before deleting them",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.retention_days < 0:
        print("Error: --retention-days must not be negative", file=sys.stderr)
        return 1

    counts = asyncio.run(cleanup(args.retention_days))
    print(
        f"Deleted {counts['expired_deleted']} expired and "
        f"{counts['revoked_deleted']} revoked session(s)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
