from pathlib import Path
from typing import Optional
import sys

from rich.prompt import Prompt

from prosign.logger import get_console
from prosign.src.core.exceptions import ConfigError
from prosign.src.core.sign_orchestrator import SignJob, SignOrchestrator
from prosign.src.core.signer import ZsignSigner
from prosign.src.ipa.provisioning_profile import get_expiration_date_from_path
from prosign.src.utils.config_loader import get_output_dir, get_p12_password


def verify_inputs_exist(args, console) -> bool:
    """Verify every input file exists and return status."""
    ok = True
    for label, path in (
        ("IPA file", args.ipa_path),
        ("Certificate", args.p12_path),
        ("Provisioning profile", args.provisioning_path),
    ):
        if not path.is_file():
            console.print(f"[red]Error:[/] {label} not found: {path}")
            ok = False
    return ok


def resolve_password(args) -> Optional[str]:
    """Password from the command line, then env/config, then a prompt."""
    if args.password is not None:
        return args.password
    password = get_p12_password()
    if password is not None:
        return password
    if sys.stdin.isatty():
        return Prompt.ask("Certificate password", password=True, default="")
    return None


def print_configuration_summary(console, args, output_dir: Path) -> None:
    """Print the configuration summary."""
    console.print("\n[bold blue]Signing Configuration:[/]")
    console.print(f"[cyan]Input IPA:[/] {args.ipa_path}")
    console.print(f"[cyan]Certificate:[/] {args.p12_path}")
    console.print(f"[cyan]Profile:[/] {args.provisioning_path}")

    expiration = get_expiration_date_from_path(args.provisioning_path)
    if expiration is not None:
        console.print(f"[cyan]Profile expires:[/] {expiration:%Y-%m-%d %H:%M:%S}")
    console.print(f"[cyan]Output directory:[/] {output_dir}\n")


def main(args) -> int:
    """Main sign function that does the actual work."""
    console = get_console()

    if not verify_inputs_exist(args, console):
        return 1

    try:
        password = resolve_password(args)
        output_dir = args.output_dir or get_output_dir()
        signer = ZsignSigner(args.zsign)
    except ConfigError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    if password is None:
        console.print(
            "[red]Error: No certificate password given.[/] "
            "Use --password or set PROSIGN_P12_PASSWORD."
        )
        return 1

    print_configuration_summary(console, args, output_dir)

    with console.status("Starting") as status:
        job = SignJob(
            ipa_path=args.ipa_path,
            p12_path=args.p12_path,
            provisioning_path=args.provisioning_path,
            p12_password=password,
            progress_update=status.update,
        )
        with SignOrchestrator(signer=signer, output_dir=output_dir) as orchestrator:
            result = orchestrator.sign(job).result()

    if not result.ok:
        console.print(f"\n[red]Error during signing:[/] {result.error}")
        return 1

    console.print(f"[green]Successfully signed IPA:[/] {result.output_path}")
    return 0


def run_sign_command(args):
    """Entry point for the sign command from CLI"""
    return main(args)


# For direct script execution - route through the CLI
if __name__ == "__main__":
    from prosign.cli import main as cli_main

    sys.exit(cli_main())
