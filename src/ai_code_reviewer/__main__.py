#!/usr/bin/env python3
"""Run the AI Code Reviewer for the current GitHub Actions event."""

import argparse
import logging
import sys
from typing import List, Optional

from .api import AICodeReviewer
from .config import ConfigurationError, load_config, setup_logging
from .github.events import load_trigger_event


logger = logging.getLogger("ai_code_reviewer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-code-reviewer",
        description="Check pull requests for missing tests and review them with AI.",
    )
    parser.add_argument(
        "--config",
        help="YAML configuration file (defaults to action inputs and environment)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point.

    Returns:
        Process exit code: 0 for completed or ignored runs, 1 on errors
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.logging, debug=config.debug)
    logger.debug(f"Configuration: {config.to_dict()}")

    try:
        event = load_trigger_event()
        decision = AICodeReviewer(config).run(event)
    except Exception:
        logger.exception("Main execution error")
        return 1

    logger.info(f"Review finished in state: {decision.final_state.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
