#!/usr/bin/env python3
"""
Run the episode workflow from a JSON input file.

The input file holds the workflow input (camelCase or snake_case keys):
    {"story": {...}, "episode": {...}, "characters": [...], "recipientId": "user-1"}

Usage:
    python scripts/run_episode.py input.json
    python scripts/run_episode.py input.json --output episode.json
    python scripts/run_episode.py input.json --no-notify       # skip delivery lookups

Examples:
    TEST_EVALUATORS_MODEL=gpt-4o-mini python scripts/run_episode.py samples/episode.json
"""

import sys
import argparse
import asyncio
import json
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv(project_root / ".env")

from episode_studio.config import get_settings
from episode_studio.services.errors import EpisodeStudioError
from episode_studio.services.logger import init_logger
from episode_studio.services.llm_router import init_llm_router
from episode_studio.services.notification import NotificationDispatcher
from episode_studio.workflows import build_episode_workflow


async def run(input_path: Path, output_path: Path = None, notify: bool = True) -> int:
    settings = get_settings()
    init_logger(settings=settings)
    init_llm_router(settings.models_config_path).log_configuration()

    payload = json.loads(input_path.read_text(encoding="utf-8"))

    dispatcher = None if notify else NotificationDispatcher(directory=None)
    workflow = build_episode_workflow(dispatcher=dispatcher, settings=settings)

    try:
        result = await workflow.run(payload)
    except EpisodeStudioError as e:
        print(f"❌ {type(e).__name__}: {e}")
        return 1

    print()
    print("=" * 60)
    print(f"  Revised: {'yes' if result.is_revised else 'no'}")
    for evaluation in result.evaluations:
        print(f"  {evaluation.character_name}: {evaluation.total_score:.1f}")
    delivery = result.delivery
    if delivery.success:
        print(f"  Delivered via {delivery.channel}")
    else:
        print(f"  Not delivered: {delivery.error}")
    print("=" * 60)
    print()

    if output_path:
        output_path.write_text(result.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        print(f"💾 Saved to {output_path}")
    else:
        print(result.content)

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Generate, review and deliver one episode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("input", help="Path to the workflow input JSON")
    parser.add_argument("--output", "-o", help="Write the full workflow output JSON here")
    parser.add_argument("--no-notify", action="store_true", help="Skip delivery (reported as not delivered)")
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().log_level.upper(), format="%(message)s")
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Input file not found: {input_path}")
        sys.exit(1)

    output_path = Path(args.output) if args.output else None
    sys.exit(asyncio.run(run(input_path, output_path, notify=not args.no_notify)))


if __name__ == "__main__":
    main()
