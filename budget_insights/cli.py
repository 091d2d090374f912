#!/usr/bin/env python3
"""
Command-line interface for budget_insights.

Loads a budget spreadsheet and answers questions about it, either from
repeated -q/--question arguments or interactively from stdin.
"""

import argparse
import json
import logging
import sys

from .config_loader import load_default_config
from .exceptions import DataLoadError
from .session import BudgetSession

# Setup logging
logger = logging.getLogger(__name__)

QUIT_WORDS = ('quit', 'exit')


def _print_result(result, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(result.insight)
        print()


def _interactive(session: BudgetSession, as_json: bool) -> None:
    print("Ask a question about your budget data (type 'quit' to exit).")
    while True:
        try:
            question = input('> ').strip()
        except EOFError:
            break
        if not question:
            continue
        if question.lower() in QUIT_WORDS:
            break
        _print_result(session.ask(question), as_json)


def main(argv=None) -> int:
    """
    CLI entry point.
    """
    parser = argparse.ArgumentParser(
        description="Ask questions about budget vs actual spreadsheets"
    )

    parser.add_argument('file', help='Excel (.xlsx/.xls) or CSV file with budget records')
    parser.add_argument('-q', '--question', action='append', default=[],
                        help='Question to answer (repeatable); omit for interactive mode')
    parser.add_argument('--config', help='YAML file merged over the packaged configuration')
    parser.add_argument('--summary', action='store_true',
                        help='Print the yearly dashboard summary')
    parser.add_argument('--json', action='store_true', help='Print results as JSON')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    session = BudgetSession(config=load_default_config(args.config))
    try:
        session.load_file(args.file)
    except DataLoadError as e:
        print(f"Could not load data: {e}", file=sys.stderr)
        return 1

    print(session.load_message())
    print()

    if args.summary:
        print(json.dumps(session.summary(), indent=2))
        print()

    if args.question:
        for question in args.question:
            _print_result(session.ask(question), args.json)
    elif not args.summary:
        _interactive(session, args.json)

    return 0


if __name__ == "__main__":
    sys.exit(main())
