import sys

from prosign.logger import get_console
from prosign.src.core.exceptions import ConfigError
from prosign.src.sources.source_fetcher import (
    fetch_and_print_json_from_strings,
    fetch_json_outcomes_from_strings,
    print_outcome,
)
from prosign.src.utils.config_loader import get_fetch_timeout, get_source_urls


def main(args) -> int:
    console = get_console()

    try:
        urls = args.urls or get_source_urls()
        timeout = args.timeout if args.timeout is not None else get_fetch_timeout()
    except ConfigError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    if not args.ordered:
        fetch_and_print_json_from_strings(urls, console=console, timeout=timeout)
        return 0

    outcomes = fetch_json_outcomes_from_strings(urls, timeout=timeout, console=console)
    if not outcomes:
        console.print("No URLs provided.")
        return 0

    for outcome in outcomes:
        print_outcome(console, outcome)

    failed = sum(1 for outcome in outcomes if not outcome.ok)
    if failed:
        console.print(f"[yellow]{failed} of {len(outcomes)} source(s) failed[/]")
        return 1
    return 0


def run_fetch_command(args):
    """Entry point for the fetch command from CLI"""
    return main(args)


if __name__ == "__main__":
    from prosign.cli import main as cli_main

    sys.exit(cli_main())
