"""Entry point for wordbank CLI client."""

import argparse
import logging
import sys

from core.config import DEFAULT_LANGUAGE, LANGUAGES
from core.profile import ProfileSession
from cli.api_client import APIProfileStore, APIWordSource, WordbankAPIClient
from cli.console import ConsoleUI


def main():
    parser = argparse.ArgumentParser(description='Wordbank - spaced-repetition vocabulary trainer')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--profile',
        required=True,
        help='Profile ID'
    )
    parser.add_argument(
        '--language',
        default=DEFAULT_LANGUAGE,
        choices=list(LANGUAGES),
        help=f'Target language (default: {DEFAULT_LANGUAGE})'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show engine log messages'
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    client = WordbankAPIClient(base_url=args.server)
    profile = ProfileSession(APIProfileStore(client), APIWordSource(client),
                             args.profile, args.language)
    ui = ConsoleUI(client, profile)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
