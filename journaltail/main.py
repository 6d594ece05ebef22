#!/usr/bin/env python3
"""
Command-line entry point: tail the systemd journal as JSON lines.

Usage:
    # Follow new entries, resuming from ~/.sincedb_journal on restart
    journaltail

    # Read everything from this boot with readable field names
    journaltail --seekto head --pretty-keys

    # Only one unit, position kept in a custom file
    journaltail --filter _SYSTEMD_UNIT=sshd.service --sincedb-path /var/lib/jt/sshd
"""

import argparse
import json
import signal
import sys
from typing import Any, Dict, List, Optional, TextIO

from journaltail.config import ConfigurationError, JournalInputConfig
from journaltail.input import JournalInput
from journaltail.position.store import CursorStoreError
from journaltail.utils.config import Config
from journaltail.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class JsonLinesSink:
    """Writes each record as one JSON document per line."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def __call__(self, record: Dict[str, Any]) -> None:
        self.stream.write(json.dumps(record, ensure_ascii=False, default=str))
        self.stream.write("\n")
        self.stream.flush()


def parse_filter(values: Optional[List[str]]) -> Optional[Dict[str, str]]:
    """Parse repeated FIELD=VALUE arguments into a filter mapping."""
    if not values:
        return None

    result = {}
    for item in values:
        field, sep, value = item.partition("=")
        if not sep or not field:
            raise argparse.ArgumentTypeError(
                f"Invalid filter {item!r}, expected FIELD=VALUE"
            )
        result[field] = value
    return result


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='journaltail - resumable systemd journal tailer'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML configuration file'
    )

    parser.add_argument(
        '--seekto',
        choices=['head', 'tail'],
        default=None,
        help='Where to start when there is no saved position (default: tail)'
    )

    parser.add_argument(
        '--flags',
        type=int,
        choices=[0, 1, 2, 4],
        default=None,
        help='Journal flags: 0 all, 1 local only, 2 runtime only, 4 system only'
    )

    parser.add_argument(
        '--path',
        type=str,
        default=None,
        help='Directory to read journal files from (default: /var/log/journal)'
    )

    parser.add_argument(
        '--filter',
        action='append',
        metavar='FIELD=VALUE',
        help='Only emit matching entries on a fresh start (repeatable)'
    )

    parser.add_argument(
        '--no-thisboot',
        dest='thisboot',
        action='store_false',
        default=None,
        help='Do not restrict a fresh start to the current boot'
    )

    parser.add_argument(
        '--pretty-keys',
        action='store_true',
        default=None,
        help='Rename UPPERCASE journal fields to readable lowercase names'
    )

    parser.add_argument(
        '--sincedb-path',
        type=str,
        default=None,
        help='File holding the saved position (default: $SINCEDB_DIR or $HOME/.sincedb_journal)'
    )

    parser.add_argument(
        '--sincedb-write-interval',
        type=float,
        default=None,
        help='Seconds between position checkpoints (default: 15)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-format',
        type=str,
        default=None,
        choices=['json', 'console'],
        help='Log format (default: json)'
    )

    return parser.parse_args(argv)


def build_input_config(args: argparse.Namespace, config: Config) -> JournalInputConfig:
    """Merge command-line flags over the loaded configuration."""
    return JournalInputConfig.from_config(
        config,
        seekto=args.seekto,
        flags=args.flags,
        path=args.path,
        filter=parse_filter(args.filter),
        thisboot=args.thisboot,
        pretty_keys=args.pretty_keys,
        sincedb_path=args.sincedb_path,
        sincedb_write_interval=args.sincedb_write_interval,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config = Config(args.config)

    configure_logging(
        log_level=args.log_level or config.get("logging.level", "INFO"),
        log_format=args.log_format or config.get("logging.format", "json"),
        log_output=config.get("logging.output", "stderr"),
    )

    try:
        input_config = build_input_config(args, config)
    except (ConfigurationError, argparse.ArgumentTypeError) as e:
        logger.error("Invalid configuration", error=str(e))
        return 2

    journal_input = JournalInput(input_config)

    def handle_signal(signum, frame):
        logger.info("Received signal, stopping", signal=signal.Signals(signum).name)
        journal_input.stop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, handle_signal)

    exit_code = 0

    try:
        journal_input.start()

        logger.info(
            "Starting journaltail",
            seekto=input_config.seekto.value,
            path=input_config.path,
            pretty_keys=input_config.pretty_keys,
        )

        journal_input.run(JsonLinesSink(sys.stdout))

    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        exit_code = 2

    except Exception as e:
        logger.error("journaltail failed", error=str(e), exc_info=True)
        exit_code = 1

    try:
        journal_input.close()
    except CursorStoreError:
        exit_code = exit_code or 1

    return exit_code


if __name__ == '__main__':
    sys.exit(main())
