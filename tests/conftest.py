from datetime import datetime
from pathlib import Path
import plistlib
import threading
import zipfile

import pytest

INFO_PLIST = plistlib.dumps(
    {
        "CFBundleIdentifier": "com.example.app",
        "CFBundleExecutable": "App",
        "CFBundleSupportedPlatforms": ["iPhoneOS"],
    }
)

# Stand-ins for the DER bytes around the embedded plist of a .mobileprovision
CMS_PREFIX = b"0\x82\x0b\x1a\x06\t*\x86H\x86\xf7\r\x01\x07\x02\xa0\x82\x0b\x0b"
CMS_SUFFIX = b"\xa0\x82\x08\x001\x82\x01\xc2\x00\xff\xfe"


def write_ipa(path: Path, entries) -> Path:
    """entries: list of (name, bytes); names ending in '/' become directories"""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return path


def make_profile(plist: dict) -> bytes:
    return CMS_PREFIX + plistlib.dumps(plist) + CMS_SUFFIX


class FakeSigner:
    """Signing primitive double: records calls, drops a signature file, reports back"""

    def __init__(self, error=None, threaded=False, delay=None):
        self.error = error
        self.threaded = threaded
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def sign(
        self,
        app_path,
        provision_path,
        p12_path,
        p12_password,
        entitlements_path,
        remove_provision,
        callback,
    ):
        self.calls.append(
            {
                "app_path": app_path,
                "provision_path": provision_path,
                "p12_path": p12_path,
                "p12_password": p12_password,
                "entitlements_path": entitlements_path,
                "remove_provision": remove_provision,
            }
        )

        def finish():
            with self._lock:
                self.active += 1
                self.max_active = max(self.max_active, self.active)
            if self.delay:
                threading.Event().wait(self.delay)
            with self._lock:
                self.active -= 1

            if self.error is not None:
                callback(None, self.error)
                return
            signature_dir = Path(app_path) / "_CodeSignature"
            signature_dir.mkdir(exist_ok=True)
            (signature_dir / "CodeResources").write_bytes(b"signed")
            callback(app_path, None)

        if self.threaded:
            threading.Thread(target=finish).start()
        else:
            finish()


@pytest.fixture
def fake_signer_class():
    return FakeSigner


@pytest.fixture
def ipa_writer():
    return write_ipa


@pytest.fixture
def profile_builder():
    return make_profile


@pytest.fixture
def expiration_date() -> datetime:
    return datetime(2027, 3, 14, 15, 9, 26)


@pytest.fixture
def sample_ipa(tmp_path) -> Path:
    """The smallest valid IPA: Payload/, Payload/App.app/ and its Info.plist"""
    return write_ipa(
        tmp_path / "source" / "Sample.ipa",
        [
            ("Payload/", b""),
            ("Payload/App.app/", b""),
            ("Payload/App.app/Info.plist", INFO_PLIST),
        ],
    )


@pytest.fixture
def credentials(tmp_path, expiration_date):
    """Dummy key container and profile files"""
    source = tmp_path / "source"
    source.mkdir(exist_ok=True)
    p12 = source / "cert.p12"
    p12.write_bytes(b"not really a pkcs12 file")
    profile = source / "dev.mobileprovision"
    profile.write_bytes(
        make_profile({"Name": "Dev", "ExpirationDate": expiration_date})
    )
    return p12, profile
