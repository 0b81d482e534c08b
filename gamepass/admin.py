"""Game Pass admin tool - schema, season, moderators and dev tokens

Usage:
    python -m gamepass.admin migrate [--file migrations/001_gamepass_schema.sql]
    python -m gamepass.admin set-season 2
    python -m gamepass.admin add-moderator <user_id>
    python -m gamepass.admin remove-moderator <user_id>
    python -m gamepass.admin token <user_id> [--email ...] [--name ...] [--hours 1]
"""
import argparse
import asyncio
import logging
from datetime import timedelta
from pathlib import Path

from gamepass.config import LOG_LEVEL
from gamepass.db import queries
from gamepass.db.connection import db
from gamepass.exceptions import InvalidArgumentError
from gamepass.gamification.identity import create_access_token

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL)
)
logger = logging.getLogger(__name__)

DEFAULT_MIGRATION = Path("migrations") / "001_gamepass_schema.sql"


async def apply_migration(conn, path: Path) -> None:
    sql = path.read_text(encoding="utf-8")
    async with conn.cursor() as cur:
        await cur.execute(sql)
    logger.info(f"Applied migration {path}")


async def set_season(conn, season: int) -> None:
    if season < 1:
        raise InvalidArgumentError(
            message="season must be a positive integer",
            field="season",
            value=season,
            operation="set_season"
        )
    await queries.set_current_season(conn, season)


async def run_command(args) -> None:
    """Run one database command inside a transaction"""
    await db.init_pool()
    try:
        async with db.transaction() as conn:
            if args.command == "migrate":
                await apply_migration(conn, Path(args.file))

            elif args.command == "set-season":
                await set_season(conn, args.season)
                print(f"Current season is now {args.season}")

            elif args.command == "add-moderator":
                added = await queries.add_moderator(conn, args.user_id)
                print(f"{args.user_id} {'added as' if added else 'is already a'} moderator")

            elif args.command == "remove-moderator":
                removed = await queries.remove_moderator(conn, args.user_id)
                print(f"{args.user_id} {'removed from' if removed else 'was not among the'} moderators")
    finally:
        await db.close_pool()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Game Pass administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate = subparsers.add_parser("migrate", help="Apply the schema migration")
    migrate.add_argument("--file", default=str(DEFAULT_MIGRATION), help="SQL file to apply")

    season = subparsers.add_parser("set-season", help="Set the current season")
    season.add_argument("season", type=int, help="Season number (positive)")

    add = subparsers.add_parser("add-moderator", help="Grant moderator capability")
    add.add_argument("user_id")

    remove = subparsers.add_parser("remove-moderator", help="Revoke moderator capability")
    remove.add_argument("user_id")

    token = subparsers.add_parser("token", help="Issue a signed bearer token (development)")
    token.add_argument("user_id")
    token.add_argument("--email", help="Email claim")
    token.add_argument("--name", help="Name claim")
    token.add_argument("--hours", type=float, default=1.0, help="Lifetime in hours (default: 1)")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.command == "token":
        print(create_access_token(
            args.user_id,
            email=args.email,
            name=args.name,
            expires_in=timedelta(hours=args.hours),
        ))
        return

    asyncio.run(run_command(args))


if __name__ == "__main__":
    main()
