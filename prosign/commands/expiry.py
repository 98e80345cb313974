from datetime import datetime, timezone
import sys

from prosign.logger import get_console
from prosign.src.ipa.provisioning_profile import get_expiration_date_from_path


def days_remaining(expiration: datetime, now: datetime = None) -> int:
    """Whole days until expiration; negative once it has passed."""
    # plistlib returns naive datetimes in UTC
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return (expiration - now).days


def main(args) -> int:
    console = get_console()
    profile = args.provisioning_path

    if not profile.exists():
        console.print(f"[red]Error:[/] {profile} does not exist")
        return 1

    expiration = get_expiration_date_from_path(profile)
    if expiration is None:
        console.print(f"[red]Could not read an expiration date from {profile}[/]")
        return 1

    remaining = days_remaining(expiration)
    color = "green" if remaining > 7 else "yellow" if remaining >= 0 else "red"
    console.print(f"[bold]Expiration date:[/] {expiration:%Y-%m-%d %H:%M:%S} UTC")
    if remaining >= 0:
        console.print(f"[{color}]{remaining} day(s) remaining[/]")
    else:
        console.print(f"[{color}]Expired {-remaining} day(s) ago[/]")
    return 0


def run_expiry_command(args):
    """Entry point for the expiry command from CLI"""
    return main(args)


if __name__ == "__main__":
    from prosign.cli import main as cli_main

    sys.exit(cli_main())
