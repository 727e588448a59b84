#!/usr/bin/env python3
"""Inspect and maintain the album rating cache.

Hey future me - a NULL row means "we asked Discogs and got nothing" and is never
retried automatically. When an album wrongly shows no rating, `clear` its row and
`resolve` it again.

Usage:
    python scripts/ratings_admin.py list
    python scripts/ratings_admin.py check "OK Computer" "Radiohead"
    python scripts/ratings_admin.py clear "OK Computer" "Radiohead"
    python scripts/ratings_admin.py clear-all --yes
    python scripts/ratings_admin.py resolve "OK Computer" "Radiohead"

    # Or with custom database URL:
    DATABASE_URL=sqlite+aiosqlite:///./my.db python scripts/ratings_admin.py list
"""

import argparse
import asyncio
import sys

from albumrater.domain.value_objects import Found, RatingKey, RatingOutcome
from albumrater.infrastructure.lifecycle import AppContext, application_context
from albumrater.infrastructure.persistence import AlbumRatingRepository


def _format_entry(key: RatingKey, outcome: RatingOutcome) -> str:
    value = f"{outcome.rating}" if isinstance(outcome, Found) else "null"
    return f'  "{key.album}" by "{key.artist}" = {value}'


async def _list(ctx: AppContext, args: argparse.Namespace) -> int:
    async with ctx.database.session_scope() as session:
        entries = await AlbumRatingRepository(session).list_all()
    print(f"Found {len(entries)} ratings in database:")
    for key, outcome in entries:
        print(_format_entry(key, outcome))
    return 0


async def _check(ctx: AppContext, args: argparse.Namespace) -> int:
    async with ctx.database.session_scope() as session:
        repo = AlbumRatingRepository(session)
        outcome = await repo.get_rating(args.album, args.artist)
        similar = await repo.find_similar(args.album, args.artist)

    key = RatingKey.of(args.album, args.artist)
    if outcome is None:
        print(f'"{key.album}" by "{key.artist}": not in database')
    else:
        print(_format_entry(key, outcome).strip())
    print(f"Similar entries ({len(similar)}):")
    for similar_key, similar_outcome in similar:
        print(_format_entry(similar_key, similar_outcome))
    return 0


async def _clear(ctx: AppContext, args: argparse.Namespace) -> int:
    async with ctx.database.session_scope() as session:
        removed = await AlbumRatingRepository(session).clear_rating(
            args.album, args.artist
        )
    key = RatingKey.of(args.album, args.artist)
    if not removed:
        print(f'No entry for "{key.album}" by "{key.artist}"')
        return 1
    print(f'Cleared rating for "{key.album}" by "{key.artist}"')
    return 0


async def _clear_all(ctx: AppContext, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to clear all ratings without --yes")
        return 1
    async with ctx.database.session_scope() as session:
        removed = await AlbumRatingRepository(session).clear_all()
    print(f"Cleared {removed} ratings from database")
    return 0


async def _resolve(ctx: AppContext, args: argparse.Namespace) -> int:
    outcome = await ctx.rating_service.resolve_with_cache(args.album, args.artist)
    if isinstance(outcome, Found):
        print(f"{args.album} by {args.artist}: {outcome.rating}/10")
    else:
        print(f"{args.album} by {args.artist}: no rating")
    return 0


COMMANDS = {
    "list": _list,
    "check": _check,
    "clear": _clear,
    "clear-all": _clear_all,
    "resolve": _resolve,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List every cached rating")
    for name, help_text in (
        ("check", "Show one entry and similar entries"),
        ("clear", "Forget one entry so it is looked up again"),
        ("resolve", "Get a rating through the cache (queries Discogs if absent)"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("album")
        sub.add_argument("artist")

    clear_all = subparsers.add_parser("clear-all", help="Delete every cached rating")
    clear_all.add_argument("--yes", action="store_true", help="Confirm deletion")
    return parser


async def run(args: argparse.Namespace) -> int:
    """Run one admin command inside a fully wired application context."""
    async with application_context() as ctx:
        return await COMMANDS[args.command](ctx, args)


def main() -> int:
    args = build_parser().parse_args()
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
