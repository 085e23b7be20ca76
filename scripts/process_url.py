#!/usr/bin/env python3
"""
Run one request through the pipeline locally and print progress events.

Usage:
    python3 scripts/process_url.py "https://www.youtube.com/watch?v=..."
    python3 scripts/process_url.py --mode text "Long passage to summarize..."
    python3 scripts/process_url.py --json "https://example.com/talk.mp4"
"""

import argparse
import asyncio
import sys

from vidscribe.config import ConfigurationError, get_settings, validate_required_settings
from vidscribe.logging_config import setup_logging
from vidscribe.models.schemas import InputMode, PipelineStage, TaskState
from vidscribe.services.handles import ServiceHandles
from vidscribe.services.pipeline import PipelineOrchestrator, ProgressStream


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download, transcribe and summarize one media URL or passage",
    )
    parser.add_argument("input", help="URL (or text with --mode text)")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in InputMode],
        default=InputMode.AUTO.value,
        help="auto: first URL in the input; text: summarize the input itself",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print events as JSON lines instead of messages",
    )
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    settings = get_settings()
    setup_logging(settings)

    try:
        validate_required_settings(settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    handles = ServiceHandles.from_settings(settings)
    try:
        orchestrator = PipelineOrchestrator.from_handles(handles)
        stream = ProgressStream(orchestrator, args.input, InputMode(args.mode))

        last_event = None
        async for event in stream.events():
            last_event = event
            if args.json:
                print(event.model_dump_json())
            else:
                print("=" * 60)
                print(f"[{event.state.value}] {event.stage.value if event.stage else ''}")
                print(event.message)
    finally:
        await handles.aclose()

    if last_event is None or last_event.state != TaskState.COMPLETED:
        return 1
    if last_event.result is None or last_event.result.stage == PipelineStage.FAILED:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
