from rich.text import Text

__version__ = "0.1.0"

APP_DESCRIPTION = "Resign iOS apps with your own certificate and provisioning profile"

BANNER = r"""
 ____            ____  _
|  _ \ _ __ ___ / ___|(_) __ _ _ __
| |_) | '__/ _ \\___ \| |/ _` | '_ \
|  __/| | | (_) |___) | | (_| | | | |
|_|   |_|  \___/|____/|_|\__, |_| |_|
                         |___/
"""


def get_banner_text() -> Text:
    """Return the banner as styled rich text."""
    return Text(BANNER.strip("\n"), style="bold green")
