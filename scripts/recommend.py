#!/usr/bin/env python3
"""Run the recommendation engine from the command line.

Prints JSON to stdout; logs go to stderr.

Usage:
    python scripts/recommend.py profile 1
    python scripts/recommend.py similar 1 --limit 5
    python scripts/recommend.py recommend 1 movie --limit 10
    python scripts/recommend.py recommend 1 all
    python scripts/recommend.py recommend 1 music --mode generative
    python scripts/recommend.py activity 1 --days 14
    python scripts/recommend.py summary 1
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.constants import DEFAULT_RECOMMENDATION_LIMIT
from src.db import init_db
from src.models.content import ContentCategory
from src.services.recommendations.service import build_recommendation_service
from src.utils.http_client import close_all_clients
from src.utils.logging import setup_logging

CATEGORY_CHOICES = [c.value for c in ContentCategory] + ["ALL"]


def dump(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


async def run(args: argparse.Namespace) -> None:
    await init_db()
    service = build_recommendation_service()

    try:
        if args.command == "profile":
            profile = await service.analyze_taste(args.user_id)
            dump(profile.model_dump(mode="json"))

        elif args.command == "similar":
            users = await service.find_similar_users(args.user_id, args.limit)
            dump([u.model_dump(mode="json") for u in users])

        elif args.command == "recommend":
            if args.category == "ALL":
                results = await service.recommend_all(args.user_id, args.limit)
                dump({c.value: [r.model_dump(mode="json") for r in recs] for c, recs in results.items()})
                return

            category = ContentCategory(args.category)
            if args.mode == "generative":
                recs = await service.generative_only(args.user_id, category, args.limit)
            elif args.mode == "collaborative":
                recs = await service.collaborative_only(args.user_id, category, args.limit)
            else:
                recs = await service.recommend(args.user_id, category, args.limit)
            dump([r.model_dump(mode="json") for r in recs])

        elif args.command == "activity":
            feed = await service.activity(args.user_id, args.days)
            dump(feed.model_dump(mode="json"))

        elif args.command == "summary":
            summary = await service.weekly_summary(args.user_id)
            dump(summary.model_dump(mode="json") if summary else None)
    finally:
        await close_all_clients()


def main() -> None:
    parser = argparse.ArgumentParser(description="Taste analysis and recommendations")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("profile", help="Recompute and show a user's taste profile")
    p.add_argument("user_id", type=int)

    p = sub.add_parser("similar", help="Users with the most similar taste")
    p.add_argument("user_id", type=int)
    p.add_argument("--limit", type=int, default=10)

    p = sub.add_parser("recommend", help="Recommendations for one category or all")
    p.add_argument("user_id", type=int)
    p.add_argument("category", type=str.upper, choices=CATEGORY_CHOICES)
    p.add_argument("--limit", type=int, default=DEFAULT_RECOMMENDATION_LIMIT)
    p.add_argument(
        "--mode",
        choices=["hybrid", "generative", "collaborative"],
        default="hybrid",
        help="Single-source modes do not apply to ALL",
    )

    p = sub.add_parser("activity", help="Recent activity of similar users")
    p.add_argument("user_id", type=int)
    p.add_argument("--days", type=int, default=None)

    p = sub.add_parser("summary", help="Weekly summary of the closest users")
    p.add_argument("user_id", type=int)

    args = parser.parse_args()
    setup_logging("DEBUG" if args.verbose else "WARNING", stream=sys.stderr)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
