#!/usr/bin/env python3
"""
Tail example: print journal messages for one unit, resuming across runs.
"""

import argparse
import signal

from journaltail.config import JournalInputConfig
from journaltail.input import JournalInput
from journaltail.utils.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description='journaltail example')
    parser.add_argument('--unit', default='sshd.service', help='systemd unit to follow')
    parser.add_argument('--sincedb', default='./.sincedb_example', help='Position file')
    parser.add_argument('--seekto', default='head', choices=['head', 'tail'])
    args = parser.parse_args()

    configure_logging(log_level='WARNING', log_format='console')

    config = JournalInputConfig(
        seekto=args.seekto,
        filter={'_SYSTEMD_UNIT': args.unit},
        pretty_keys=True,
        sincedb_path=args.sincedb,
        sincedb_write_interval=5,
    )

    print(f"Following '{args.unit}' (position kept in {args.sincedb})")
    print("Press Ctrl+C to stop...\n")

    journal_input = JournalInput(config)
    signal.signal(signal.SIGINT, lambda signum, frame: journal_input.stop())

    def show(record):
        print(f"[{record['cursor'][-12:]}] {record['host']}: {record.get('message', '')}")

    with journal_input:
        count = journal_input.run(show)

    print(f"\nShown {count} messages")


if __name__ == '__main__':
    main()
