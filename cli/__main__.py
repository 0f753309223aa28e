"""Entry point for vocabin CLI client."""

import argparse
import sys

from cli.api_client import VocabinAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='Vocabin - vocabulary flashcards with spaced repetition')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    parser.add_argument(
        '--review',
        action='store_true',
        help='Review wrong words instead of studying a dictionary'
    )
    args = parser.parse_args()

    client = VocabinAPIClient(base_url=args.server, user_id=args.user)
    ui = ConsoleUI(client)

    try:
        ui.run(review_only=args.review)
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
