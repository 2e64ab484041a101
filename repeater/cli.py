"""
Command-line interface for the access-log repeater.
"""

import argparse
import logging
import sys

import uvloop

from repeater import __version__
from repeater.configuration import (
    DEFAULT_CONNECTION_LIMIT,
    EXIT_ABORTED,
    EXIT_FAILURE,
    EXIT_SUCCESS,
    LOG_FORMAT,
    LOG_LEVEL,
    REQUEST_TIMEOUT_SECONDS,
)
from repeater.errors import AbortedError, RepeaterError

logger = logging.getLogger(__name__)


class RepeaterCLI:
    """Parse an access-log export and repeat its GET requests against another host."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='repeater',
            description='Parse and then repeat GET-requests of an access-log against a different host',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # List the recorded requests in order
  repeater print access-log.csv

  # Replay against a staging host at double the recorded load
  repeater run access-log.json --scheme-and-host https://staging.internal --time-factor 0.5

  # Replay several recorded domains against their own hosts
  repeater run access-log.csv --scheme-and-host-mapping-file hosts.json --hosts-to-ignore static.example
            """
        )
        parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
        parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default=LOG_LEVEL,
                            help=f'Log level on stderr (default: {LOG_LEVEL})')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Print command
        print_parser = subparsers.add_parser(
            'print', help='Print every record as a structured line, in timestamp order')
        print_parser.add_argument('input_file', help='File to parse and print (.csv or .json)')

        # Run command
        run_parser = subparsers.add_parser(
            'run', help='GET the recorded URLs again, with accurate relative timing',
            description='Parses the provided file and runs the discovered requests, with accurate '
                        'relative timing, against the provided host.')
        run_parser.add_argument('input_file', help='File to parse and GET-again (.csv or .json)')
        run_parser.add_argument('-s', '--scheme-and-host', type=str, default=None,
                                help='Scheme and host to run the GET-requests against, '
                                     'e.g. https://my-alternative-service.internal')
        run_parser.add_argument('--scheme-and-host-mapping-file', type=str, default=None,
                                help='JSON object mapping recorded domain names to scheme and host')
        run_parser.add_argument('--hosts-to-ignore', action='append', default=[], metavar='DOMAIN',
                                help='Recorded domain whose requests are skipped (repeatable)')
        run_parser.add_argument('--time-factor', type=float, default=None,
                                help='Factor in which the requests should be fulfilled: 0.5 finishes in half '
                                     'the time (double the load), 2.0 in double the time (half the load)')
        run_parser.add_argument('--timeout', type=float, default=REQUEST_TIMEOUT_SECONDS,
                                help='Total per-request timeout in seconds (default: HTTP client default)')
        run_parser.add_argument('--connection-limit', type=int, default=DEFAULT_CONNECTION_LIMIT,
                                help=f'Connection pool size, 0 for unlimited (default: {DEFAULT_CONNECTION_LIMIT})')
        run_parser.add_argument('--no-progress', action='store_true',
                                help='Do not render the progress bar')

        return parser

    def _configure_logging(self, level: str):
        """Send logs to stderr (only if not already configured)."""
        if not logging.root.handlers:
            logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
        else:
            logging.root.setLevel(level)

    def run_print(self, args):
        """Run the print command."""
        from repeater.commands.printer import RecordPrinter

        RecordPrinter(args.input_file).run()
        return EXIT_SUCCESS

    def run_replay(self, args):
        """Run the replay command."""
        from repeater.commands.replay import ReplayRunner
        from repeater.common.resolver_factory import create_host_resolver

        resolver = create_host_resolver(
            scheme_and_host=args.scheme_and_host,
            mapping_file=args.scheme_and_host_mapping_file,
            hosts_to_ignore=args.hosts_to_ignore,
        )
        runner = ReplayRunner(
            input_file=args.input_file,
            resolver=resolver,
            time_factor=args.time_factor,
            timeout=args.timeout,
            connection_limit=args.connection_limit,
            show_progress=not args.no_progress,
        )
        uvloop.run(runner.run_replay())
        return EXIT_SUCCESS

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)
        self._configure_logging(parsed_args.log_level)

        if not parsed_args.command:
            self.parser.print_help(sys.stderr)
            return EXIT_FAILURE

        try:
            if parsed_args.command == 'print':
                return self.run_print(parsed_args)
            elif parsed_args.command == 'run':
                return self.run_replay(parsed_args)
            else:
                logger.error(f"Unknown command: {parsed_args.command}")
                return EXIT_FAILURE

        except (AbortedError, KeyboardInterrupt):
            logger.error("Aborted with CTRL-C")
            return EXIT_ABORTED
        except RepeaterError as e:
            logger.error(f"{type(e).__name__}: {e}")
            return EXIT_FAILURE


def main():
    """Main entry point."""
    cli = RepeaterCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
