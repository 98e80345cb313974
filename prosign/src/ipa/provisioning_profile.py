from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union
import plistlib
from xml.parsers.expat import ExpatError

PLIST_START_TAG = b"<plist"
PLIST_END_TAG = b"</plist>"
EXPIRATION_KEY = "ExpirationDate"


def read_profile_plist(profile_data: bytes) -> Optional[Dict[str, Any]]:
    """Parse the plist embedded in a signed provisioning profile.

    A .mobileprovision file is a CMS envelope around an XML plist, so the
    plist is sliced out between its opening and closing tags. Returns None if
    the tags are missing or the slice doesn't parse to a dictionary.
    """
    start = profile_data.find(PLIST_START_TAG)
    if start == -1:
        return None
    end = profile_data.find(PLIST_END_TAG, start)
    if end == -1:
        return None

    plist_data = profile_data[start : end + len(PLIST_END_TAG)]
    try:
        parsed = plistlib.loads(plist_data)
    # plistlib surfaces malformed values as assorted builtin errors
    except (
        plistlib.InvalidFileException,
        ExpatError,
        ValueError,
        TypeError,
        AttributeError,
        IndexError,
        KeyError,
    ):
        return None

    if not isinstance(parsed, dict):
        return None
    return parsed


def get_expiration_date(profile_data: bytes) -> Optional[datetime]:
    """ExpirationDate of a provisioning profile, or None if it can't be read"""
    plist = read_profile_plist(profile_data)
    if plist is None:
        return None

    expiration = plist.get(EXPIRATION_KEY)
    if not isinstance(expiration, datetime):
        return None
    return expiration


def get_expiration_date_from_path(profile_path: Union[str, Path]) -> Optional[datetime]:
    try:
        profile_data = Path(profile_path).read_bytes()
    except OSError:
        return None
    return get_expiration_date(profile_data)
