import argparse
import sys
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme
from rich_argparse import RichHelpFormatter
from prosign.arguments import (
    add_expiry_arguments,
    add_fetch_arguments,
    add_signing_arguments,
)
from prosign.src.constants.cli_constants import (
    __version__,
    get_banner_text,
    APP_DESCRIPTION,
)


class ProSignHelpFormatter(RichHelpFormatter):
    """Custom formatter for ProSign CLI that enhances the output with rich styling."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=30, width=100)
        self.console = Console(
            theme=Theme(
                {
                    "command": "bold cyan",
                    "argument": "green",
                    "option": "yellow",
                    "version": "blue",
                    "title": "bold magenta",
                }
            )
        )

    def start_section(self, heading):
        # Make section headings more prominent
        heading_text = Text(heading, style="title")
        super().start_section(str(heading_text))


def display_banner():
    """Display a stylish banner for ProSign."""
    console = Console()
    banner = get_banner_text()

    version_info = Text(f"v{__version__}", style="version")
    tagline = Text(APP_DESCRIPTION, style="italic")

    panel = Panel.fit(
        Text.assemble(banner, "\n", tagline, "\n", version_info),
        border_style="green",
        padding=(1, 2),
    )
    console.print(panel)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prosign",
        description=f"ProSign: {APP_DESCRIPTION}",
        formatter_class=ProSignHelpFormatter,
        add_help=True,
    )

    parser.add_argument(
        "--version", action="version", version=f"ProSign {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    sign_parser = subparsers.add_parser(
        "sign",
        help="Resign an IPA file",
        formatter_class=ProSignHelpFormatter,
        description="Resign an IPA file with a .p12 certificate and a provisioning profile.",
    )
    add_signing_arguments(sign_parser)

    expiry_parser = subparsers.add_parser(
        "expiry",
        help="Show when a provisioning profile expires",
        formatter_class=ProSignHelpFormatter,
        description="Read the expiration date embedded in a .mobileprovision file.",
    )
    add_expiry_arguments(expiry_parser)

    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Fetch and pretty-print JSON sources",
        formatter_class=ProSignHelpFormatter,
        description="Fetch several JSON source feeds concurrently and print them.",
    )
    add_fetch_arguments(fetch_parser)

    return parser


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv

    # Display the banner before the help text
    if len(argv) == 0 or "-h" in argv or "--help" in argv:
        display_banner()

    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "sign":
        from prosign.commands.sign import run_sign_command

        return run_sign_command(args)
    elif args.command == "expiry":
        from prosign.commands.expiry import run_expiry_command

        return run_expiry_command(args)
    elif args.command == "fetch":
        from prosign.commands.fetch import run_fetch_command

        return run_fetch_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
