"""
Out-of-band maintenance commands.

Usage:
    python -m studysync.manage init-db
    python -m studysync.manage promote-admin student@example.com
"""
import argparse
import asyncio
import logging
import sys

from .config.config import settings
from .db.db_client import AsyncPostgresClient, create_pool, rows_affected
from .models.db_models import Role
from .services.auth_service import normalize_email


async def init_db(db_client: AsyncPostgresClient) -> int:
    await db_client.ensure_schema()
    print("Schema is up to date.")
    return 0


async def promote_admin(db_client: AsyncPostgresClient, email: str) -> int:
    """Signup always creates plain users; this is the only way to get an admin."""
    status_msg = await db_client.set_user_role(normalize_email(email), Role.ADMIN)
    if not rows_affected(status_msg):
        print(f"No user registered with '{email}'.", file=sys.stderr)
        return 1
    print(f"'{email}' is now an admin.")
    return 0


async def _run(args: argparse.Namespace) -> int:
    pool = await create_pool(settings.DATABASE_URL)
    try:
        db_client = AsyncPostgresClient(pool=pool)
        if args.command == "init-db":
            return await init_db(db_client)
        return await promote_admin(db_client, args.email)
    finally:
        await pool.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="studysync.manage", description="StudySync maintenance commands")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("init-db", help="Create missing tables")
    promote = subparsers.add_parser("promote-admin", help="Give an existing user the admin role")
    promote.add_argument("email")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if not settings.DATABASE_URL:
        print("DATABASE_URL is not set.", file=sys.stderr)
        return 2
    logging.basicConfig(level=logging.INFO)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
