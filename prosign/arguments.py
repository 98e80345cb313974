from pathlib import Path


def add_signing_arguments(parser):
    """Add all signing-related arguments to an existing parser."""
    parser.add_argument("ipa_path", type=Path, help="Path to the IPA file to sign")

    parser.add_argument(
        "--p12",
        "-k",
        dest="p12_path",
        type=Path,
        required=True,
        help="Path to the .p12 certificate and private key",
    )

    parser.add_argument(
        "--profile",
        "-m",
        dest="provisioning_path",
        type=Path,
        required=True,
        help="Path to the .mobileprovision file",
    )

    parser.add_argument(
        "--password",
        "-p",
        type=str,
        help="Password for the .p12 file [default: PROSIGN_P12_PASSWORD, config, or prompt]",
    )

    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        help="Directory that receives the signed IPA [default: ~/Documents/prosign]",
    )

    parser.add_argument(
        "--zsign",
        type=str,
        help="zsign executable to use [default: zsign on PATH]",
    )


def add_expiry_arguments(parser):
    """Add arguments for reading provisioning profile metadata."""
    parser.add_argument(
        "provisioning_path", type=Path, help="Path to the .mobileprovision file"
    )


def add_fetch_arguments(parser):
    """Add arguments for fetching JSON sources."""
    parser.add_argument(
        "urls",
        nargs="*",
        help="Source URLs to fetch [default: sources.urls from config]",
    )

    parser.add_argument(
        "--ordered",
        action="store_true",
        help="Print results in the order the URLs were given [default: as they finish]",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds [default: 10]",
    )
