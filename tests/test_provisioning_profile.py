from datetime import datetime
from pathlib import Path

from prosign.src.ipa.provisioning_profile import (
    get_expiration_date,
    get_expiration_date_from_path,
    read_profile_plist,
)


def test_expiration_date_from_wrapped_profile(profile_builder, expiration_date) -> None:
    data = profile_builder({"Name": "Dev", "ExpirationDate": expiration_date})
    assert get_expiration_date(data) == expiration_date


def test_empty_input() -> None:
    assert get_expiration_date(b"") is None


def test_missing_tags() -> None:
    assert get_expiration_date(b"\x30\x82 just some DER bytes") is None
    assert get_expiration_date(b'<plist version="1.0"><dict></dict>') is None
    assert get_expiration_date(b"<dict></dict></plist>") is None


def test_closing_tag_before_opening_tag() -> None:
    assert get_expiration_date(b"</plist> junk <plist version=\"1.0\">") is None


def test_unparseable_slice() -> None:
    data = b"\x00\x01<plist version=\"1.0\"><dict><key>ExpirationDate</key><date>never</date></dict></plist>\x02"
    assert get_expiration_date(data) is None
    assert get_expiration_date(b"<plist><dict><key>A</key></plist>") is None
    assert get_expiration_date(b"<plist><key>A</key></plist>") is None


def test_missing_key(profile_builder) -> None:
    assert get_expiration_date(profile_builder({"Name": "Dev"})) is None


def test_wrong_type(profile_builder) -> None:
    assert get_expiration_date(profile_builder({"ExpirationDate": "2027-01-01"})) is None


def test_non_dictionary_root(profile_builder) -> None:
    assert read_profile_plist(profile_builder(["not", "a", "dict"])) is None


def test_read_profile_plist_returns_all_keys(profile_builder, expiration_date) -> None:
    plist = read_profile_plist(
        profile_builder({"Name": "Dev", "TeamIdentifier": ["ABCDE12345"], "ExpirationDate": expiration_date})
    )
    assert plist["Name"] == "Dev"
    assert plist["TeamIdentifier"] == ["ABCDE12345"]


def test_from_path(tmp_path: Path, profile_builder) -> None:
    expected = datetime(2030, 1, 1, 0, 0, 0)
    profile = tmp_path / "dev.mobileprovision"
    profile.write_bytes(profile_builder({"ExpirationDate": expected}))

    assert get_expiration_date_from_path(profile) == expected
    assert get_expiration_date_from_path(str(profile)) == expected


def test_from_unreadable_path(tmp_path: Path) -> None:
    assert get_expiration_date_from_path(tmp_path / "missing.mobileprovision") is None
    assert get_expiration_date_from_path(tmp_path) is None


def test_stray_closing_tag_before_plist(profile_builder, expiration_date) -> None:
    data = b"\x30\x82</plist>\x01" + profile_builder({"ExpirationDate": expiration_date})
    assert get_expiration_date(data) == expiration_date
