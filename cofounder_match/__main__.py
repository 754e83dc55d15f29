"""Main entry point for the co-founder matching CLI."""

import argparse
import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from dataclasses import asdict
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from cofounder_match import __version__
from cofounder_match.config.settings import Settings
from cofounder_match.matching.config import get_matching_config
from cofounder_match.matching.models import ExploreFilters
from cofounder_match.matching.service import MatchingError
from cofounder_match.utils.logging import configure_logging, get_logger

T = TypeVar("T")


def _to_json(payload: object) -> str:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    return json.dumps(payload, indent=2, ensure_ascii=False, default=_default)


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Override database path (defaults to settings)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="cofounder-match",
        description="Co-founder matching and compatibility scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cofounder_match import pool.yaml
  python -m cofounder_match recommend user-1 --limit 5
  python -m cofounder_match score viewer.yaml candidate.yaml
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
    )

    import_parser = subparsers.add_parser(
        "import",
        help="Import a YAML/JSON profile pool into the database",
    )
    import_parser.add_argument("pool", type=Path, help="Pool file (users + blocks)")
    _add_db_argument(import_parser)

    recommend_parser = subparsers.add_parser(
        "recommend",
        help="Rank eligible candidates for a user",
    )
    recommend_parser.add_argument("user_id", help="Viewer user id")
    recommend_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of recommendations (defaults to settings)",
    )
    _add_db_argument(recommend_parser)

    detail_parser = subparsers.add_parser(
        "detail",
        help="Show the full score breakdown for one pair",
    )
    detail_parser.add_argument("viewer_id", help="Viewer user id")
    detail_parser.add_argument("candidate_id", help="Candidate user id")
    _add_db_argument(detail_parser)

    explore_parser = subparsers.add_parser(
        "explore",
        help="Browse public profiles with optional filters",
    )
    explore_parser.add_argument("user_id", help="Viewer user id")
    explore_parser.add_argument(
        "--domain", dest="domains", action="append", default=[], help="Domain tag"
    )
    explore_parser.add_argument(
        "--role", dest="roles", action="append", default=[], help="Role tag"
    )
    explore_parser.add_argument(
        "--goal", dest="goals", action="append", default=[], help="Goal"
    )
    explore_parser.add_argument(
        "--location-pref",
        dest="location_prefs",
        action="append",
        default=[],
        help="Location preference",
    )
    explore_parser.add_argument("--min-hours", type=int, default=None)
    explore_parser.add_argument("--max-hours", type=int, default=None)
    explore_parser.add_argument("--page", type=int, default=1)
    explore_parser.add_argument("--page-size", type=int, default=None)
    _add_db_argument(explore_parser)

    score_parser = subparsers.add_parser(
        "score",
        help="Score two profile files against each other (no database)",
    )
    score_parser.add_argument("viewer", type=Path, help="Viewer profile YAML/JSON")
    score_parser.add_argument(
        "candidate", type=Path, help="Candidate profile YAML/JSON"
    )

    return parser


def _run_with_repository(
    db_path: Path, action: Callable[..., Awaitable[T]]
) -> T:
    from cofounder_match.profiles.repository import ProfileRepository

    async def _run() -> T:
        repo = ProfileRepository(db_path)
        await repo.initialize()
        try:
            return await action(repo)
        finally:
            await repo.close()

    return asyncio.run(_run())


def _score_files(viewer_path: Path, candidate_path: Path) -> dict:
    from cofounder_match.matching.calculator import (
        calculate_match_score,
        get_top_contributors,
        get_top_penalty,
    )
    from cofounder_match.matching.explanation import (
        generate_card_summary,
        generate_detailed_explanation,
        generate_explanation,
    )
    from cofounder_match.matching.normalizer import (
        to_explanation_profile,
        to_scoring_profile,
    )
    from cofounder_match.profiles.loader import ProfileLoader

    loader = ProfileLoader()
    viewer = loader.load_profile(viewer_path)
    candidate = loader.load_profile(candidate_path)

    result = calculate_match_score(
        to_scoring_profile(viewer),
        to_scoring_profile(candidate),
        get_matching_config(),
    )
    explain_args = (
        to_explanation_profile(viewer),
        to_explanation_profile(candidate),
        result.breakdown,
    )
    explanation = generate_explanation(*explain_args)
    top_penalty = get_top_penalty(result.breakdown)

    return {
        "viewer_id": viewer.user_id,
        "candidate_id": candidate.user_id,
        "stability": result.stability,
        "synergy": result.synergy,
        "trust": result.trust,
        "startup_mbti": result.startup_mbti,
        "penalties": result.penalties,
        "total": result.total,
        "breakdown": result.breakdown.to_dict(),
        "reasons": explanation.reasons_top3,
        "caution": explanation.caution,
        "summary": generate_card_summary(*explain_args),
        "detail": asdict(generate_detailed_explanation(*explain_args)),
        "top_contributors": [asdict(c) for c in get_top_contributors(result.breakdown)],
        "top_penalty": asdict(top_penalty) if top_penalty else None,
        "mbti_strengths": result.mbti_strengths,
        "mbti_cautions": result.mbti_cautions,
    }


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    configure_logging(level=log_level)
    logger = get_logger("cli")

    # If no command specified, show help
    if parsed.command is None:
        parser.print_help()
        return 0

    logger.debug(f"cofounder-match v{__version__} running {parsed.command}")

    if parsed.command == "score":
        try:
            payload = _score_files(parsed.viewer, parsed.candidate)
        except (FileNotFoundError, ValueError) as e:
            # pydantic.ValidationError is a ValueError
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(_to_json(payload))
        return 0

    from cofounder_match.matching.service import MatchingService
    from cofounder_match.profiles.loader import ProfileLoader

    db_path = parsed.db or settings.database_path

    async def _import(repo):
        pool = await ProfileLoader().import_pool(parsed.pool, repo)
        return {"users": len(pool.users), "blocks": len(pool.blocks)}

    async def _recommend(repo):
        service = MatchingService(repo, settings=settings)
        return await service.get_recommendations(parsed.user_id, limit=parsed.limit)

    async def _detail(repo):
        service = MatchingService(repo, settings=settings)
        return await service.get_match_detail(parsed.viewer_id, parsed.candidate_id)

    async def _explore(repo):
        service = MatchingService(repo, settings=settings)
        filters = ExploreFilters(
            domains=parsed.domains,
            roles=parsed.roles,
            goals=parsed.goals,
            location_prefs=parsed.location_prefs,
            min_hours=parsed.min_hours,
            max_hours=parsed.max_hours,
        )
        return await service.explore(
            parsed.user_id, filters, page=parsed.page, page_size=parsed.page_size
        )

    actions = {
        "import": _import,
        "recommend": _recommend,
        "detail": _detail,
        "explore": _explore,
    }

    try:
        result = _run_with_repository(db_path, actions[parsed.command])
    except MatchingError as e:
        logger.warning(f"{parsed.command} rejected ({e.status_code}): {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Error: invalid profile data: {e}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(_to_json(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
