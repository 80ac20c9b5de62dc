"""
Command line interface for Agora.

Runs a scripted debate or a moderated discussion against the model sources
described in an engine config file, printing each utterance as it is made.
"""

import asyncio
import argparse
import logging
import sys
from typing import Dict, List, Optional

from pydantic import ValidationError

from agora.adapters.fallback import build_model
from agora.config import DebateConfig, DiscussionConfig, load_engine_config
from agora.errors import AgoraError
from agora.orchestrator.decision import ModeratorDecision
from agora.orchestrator.moderator import AutonomousModerator
from agora.orchestrator.scripted import ScriptedOrchestrator
from agora.personas.provider import StaticPersonaProvider
from agora.protocol.message import Phase


def split_identities(value: str) -> List[str]:
    """Split a comma separated identity list."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_forced_stances(values: Optional[List[str]]) -> Dict[str, str]:
    """
    Parse ``identity=stance`` pairs.

    Raises:
        ValueError: If a value has no ``=``
    """
    forced: Dict[str, str] = {}
    for value in values or []:
        identity, sep, stance = value.partition("=")
        if not sep or not identity.strip():
            raise ValueError(f"Expected identity=stance, got {value!r}")
        forced[identity.strip()] = stance.strip()
    return forced


def print_utterance(speaker_name: str, content: str, phase: Phase) -> None:
    print(f"\n[{phase.value}] {speaker_name}:\n{content}", flush=True)


def print_decision(decision: ModeratorDecision) -> None:
    target = f" -> {decision.target}" if decision.target else ""
    print(f"\n(moderator: {decision.action.value} {decision.next_speaker}{target}; {decision.reason})", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Agora debate and discussion runner")
    parser.add_argument(
        "--config",
        type=str,
        default="agora.json",
        help="Engine config file listing model sources"
    )
    parser.add_argument(
        "--personas",
        type=str,
        required=True,
        help="JSON file with the persona definitions"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Debate command
    debate_parser = subparsers.add_parser("debate", help="Run a scripted pro/con debate")
    debate_parser.add_argument("--topic", type=str, required=True, help="Motion under debate")
    debate_parser.add_argument("--pro", type=str, required=True, help="Pro side identities, comma separated")
    debate_parser.add_argument("--con", type=str, required=True, help="Con side identities, comma separated")
    debate_parser.add_argument("--pro-stance", type=str, help="Stance text for the pro side")
    debate_parser.add_argument("--con-stance", type=str, help="Stance text for the con side")
    debate_parser.add_argument(
        "--force",
        action="append",
        metavar="IDENTITY=STANCE",
        help="Impose a stance on a participant (repeatable)"
    )

    # Discuss command
    discuss_parser = subparsers.add_parser("discuss", help="Run a moderated discussion")
    discuss_parser.add_argument("--topic", type=str, required=True, help="Topic of the discussion")
    discuss_parser.add_argument("--members", type=str, required=True, help="Member identities, comma separated")
    discuss_parser.add_argument("--max-rounds", type=int, help="Upper bound on utterances")
    discuss_parser.add_argument(
        "--force",
        action="append",
        metavar="IDENTITY=STANCE",
        help="Impose a stance on a member (repeatable)"
    )

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main function to parse arguments and run commands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command not in ("debate", "discuss"):
        parser.print_help()
        return 1

    try:
        engine = load_engine_config(args.config)
        personas = StaticPersonaProvider.from_json_file(args.personas)
        forced = parse_forced_stances(args.force)
        model = await build_model(engine)

        if args.command == "debate":
            settings = {"pro_stance": args.pro_stance, "con_stance": args.con_stance}
            config = DebateConfig(
                topic=args.topic,
                pro_participants=split_identities(args.pro),
                con_participants=split_identities(args.con),
                forced_stances=forced,
                **{k: v for k, v in settings.items() if v}
            )
            orchestrator = ScriptedOrchestrator(config, model, personas, transcript_sink=print_utterance)
        else:
            config = DiscussionConfig(
                topic=args.topic,
                participants=split_identities(args.members),
                max_rounds=args.max_rounds or engine.default_max_rounds,
                forced_stances=forced
            )
            orchestrator = AutonomousModerator(
                config,
                model,
                personas,
                transcript_sink=print_utterance,
                decision_listener=print_decision
            )

        print(f"Topic: {config.topic}")
        result = await orchestrator.run()
        print(f"\nSession {result.state.value} with {len(result.records)} utterances")
        return 0

    except (AgoraError, ValidationError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
