#!/usr/bin/env python3
"""Chartmerge CLI - database setup and patient merges from the command line."""

import argparse
import asyncio
import sys

from chartmerge.exceptions import ChartmergeError
from chartmerge.services.patient_service import PatientService
from chartmerge.services.unit_of_work import UnitOfWork
from chartmerge.utils.db_manager import DatabaseManager, db_manager
from chartmerge.utils.logger import logger


async def init_database(manager: DatabaseManager = db_manager) -> None:
    """Create all tables."""
    logger.info("Initializing database...")
    await manager.create_db_and_tables_async()
    await manager.close()
    logger.info("Database initialized successfully")


async def merge_patients(
    preferred_id: int,
    duplicate_id: int,
    creator: str | None = None,
    manager: DatabaseManager = db_manager,
) -> bool:
    """Merge one patient into another.

    Returns:
        True if the merge completed, False if it failed
    """
    try:
        async with manager.async_session_factory() as session:
            service = PatientService.from_uow(
                UnitOfWork(session), config=manager.config, creator=creator
            )
            merge_log = await service.merge_patients_by_id(preferred_id, duplicate_id)
            logger.info(f"Merge log #{merge_log.id}: {merge_log.merged_data}")
            return True
    except ChartmergeError as e:
        logger.error(f"Merge failed: {e}")
        return False
    finally:
        await manager.close()


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="chartmerge", description="Chartmerge CLI - patient record merges"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # db command
    db_parser = subparsers.add_parser("db", help="Database management")
    db_subparsers = db_parser.add_subparsers(dest="db_command")
    db_subparsers.add_parser("init", help="Initialize database with tables")

    # merge command
    merge_parser = subparsers.add_parser("merge", help="Merge a duplicate patient into another")
    merge_parser.add_argument("preferred_id", type=int, help="ID of the patient to keep")
    merge_parser.add_argument("duplicate_id", type=int, help="ID of the patient to merge away")
    merge_parser.add_argument(
        "--creator", type=str, default=None, help="Name recorded on the merge log"
    )

    args = parser.parse_args()

    if args.command == "db":
        if args.db_command == "init":
            asyncio.run(init_database())
        else:
            db_parser.print_help()
    elif args.command == "merge":
        if not asyncio.run(merge_patients(args.preferred_id, args.duplicate_id, args.creator)):
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
