#!/usr/bin/env python3
"""
channelfinder - command-line search over a channel catalog.

Searches combine channel name globs, tags and property value globs. All
criteria must hold; the values given for one property are alternatives.
"""
import sys
import argparse
import json
import logging
from pathlib import Path
from typing import List, Tuple
from rich.console import Console
from rich.table import Table
from rich.markup import escape

from channelfinder.config import init_config
from channelfinder.db import get_db
from channelfinder.query import FindResult, EmptyResult, NAME_KEY, TAG_KEY

logger = logging.getLogger(__name__)


console = Console()


def parse_pair(text: str) -> Tuple[str, str]:
    """Parse a KEY=VALUE argument."""
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got '{text}'")
    return key, value


def build_request(args) -> List[Tuple[str, str]]:
    """Turn find arguments into (key, value) search pairs."""
    request = [(NAME_KEY, n) for n in args.name or []]
    request.extend((TAG_KEY, t) for t in args.tag or [])
    request.extend(args.prop or [])
    return request


def output_result(result: FindResult, format: str = "table"):
    """Output a search result in the specified format."""
    if format == "json":
        print(json.dumps([c.to_dict() for c in result.channels()], indent=2))
    elif format == "rows":
        for row in result:
            print("\t".join("" if v is None else v for v in (
                row.channel, row.channel_owner, row.property, row.value, row.property_owner
            )))
    elif format == "plain":
        for channel in result.channels():
            props = " ".join(f"{n}={v}" for n, v, _ in channel.properties)
            tags = " ".join(f"#{t}" for t in channel.tag_names())
            print(f"{channel.name} ({channel.owner}) {props} {tags}".rstrip())
    else:
        table = Table(title="Channels")
        table.add_column("Name", style="cyan")
        table.add_column("Owner", style="green")
        table.add_column("Properties", style="blue")
        table.add_column("Tags", style="yellow")

        for channel in result.channels():
            table.add_row(
                channel.name,
                channel.owner,
                ", ".join(f"{n}={v}" for n, v, _ in channel.properties),
                ", ".join(channel.tag_names()),
            )

        console.print(table)


def cmd_find(args):
    """Search channels."""
    db = get_db(args.db)
    result = db.find(build_request(args))

    if isinstance(result, EmptyResult):
        logger.info("search short-circuited at %s", result.stage)

    if not result:
        if args.output == "json":
            print("[]")
        elif not args.quiet:
            console.print("[yellow]No channels found[/yellow]")
        return

    output_result(result, args.output)


def cmd_channel_add(args):
    """Add a channel to the catalog."""
    db = get_db(args.db)
    channel = db.add_channel(
        args.name,
        owner=args.owner,
        properties=dict(args.prop or []),
        tags=args.tag or [],
    )
    if not args.quiet:
        console.print(f"[green]✓ Added channel {channel.name}[/green]")


def cmd_db_info(args):
    """Show catalog statistics."""
    db = get_db(args.db)
    stats = db.stats()

    if args.output == "json":
        print(json.dumps(stats, indent=2))
        return

    table = Table(title="Catalog")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in stats.items():
        table.add_row(key, str(value))
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="channelfinder",
        description="channelfinder - search channels by name, tag and property",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Channels whose name matches either glob
  channelfinder find --name 'SR:C01-*' --name 'BR:*'

  # Tagged 'archived' and with any tag matching grp-*
  channelfinder find --tag archived --tag 'grp-*'

  # color red or blue, and size 10
  channelfinder find --prop color=red --prop color=blue --prop size=10

  # Populate a local catalog
  channelfinder channel add SR:C01-BI:BPM1 --owner ops --prop cell=01 --tag archived

  channelfinder db info

Globs: * matches any run of characters, ? a single character, \\ escapes.

Configuration:
  Default database: ./channelfinder.db or from config
  Config file: ~/.config/channelfinder/config.toml
  Environment: CHANNELFINDER_DATABASE, CHANNELFINDER_OUTPUT_FORMAT
        """
    )

    parser.add_argument("--db", help="Database file (default: channelfinder.db)")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-o", "--output", choices=["table", "plain", "json", "rows"],
                        help="Output format")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    # find
    find_parser = subparsers.add_parser("find", help="Search channels")
    find_parser.add_argument("--name", action="append", metavar="GLOB",
                             help="Channel name glob (repeatable, any may match)")
    find_parser.add_argument("--tag", action="append", metavar="GLOB",
                             help="Tag name or glob (repeatable, all must match)")
    find_parser.add_argument("--prop", action="append", type=parse_pair, metavar="KEY=GLOB",
                             help="Property value glob (repeatable; values of one key are alternatives)")
    find_parser.set_defaults(func=cmd_find)

    # channel group
    channel_parser = subparsers.add_parser("channel", help="Channel operations")
    channel_subparsers = channel_parser.add_subparsers(dest="channel_command", required=True)

    ch_add = channel_subparsers.add_parser("add", help="Add a channel")
    ch_add.add_argument("name", help="Channel name")
    ch_add.add_argument("--owner", help="Owner (default: config default_owner)")
    ch_add.add_argument("--prop", action="append", type=parse_pair, metavar="KEY=VALUE",
                        help="Property (repeatable)")
    ch_add.add_argument("--tag", action="append", help="Tag (repeatable)")
    ch_add.set_defaults(func=cmd_channel_add)

    # db group
    db_parser = subparsers.add_parser("db", help="Database management")
    db_subparsers = db_parser.add_subparsers(dest="db_command", required=True)

    db_info = db_subparsers.add_parser("info", help="Show catalog statistics")
    db_info.set_defaults(func=cmd_db_info)

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config_args = {}
    if args.output:
        config_args["output_format"] = args.output
    if args.config:
        config_args["config_file"] = Path(args.config)

    config = init_config(database=args.db, **config_args)

    if not args.output:
        args.output = config.output_format
    console.no_color = not config.color_output

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format='%(levelname)s: %(name)s: %(message)s'
    )

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
