"""Shared fixtures: an in-memory HTTP session and a fake minirootfs tarball."""

import io
import tarfile
from unittest.mock import patch

import pytest
import requests

from alpine_netboot.lib.command import CmdResult

MIRROR = "https://dl-cdn.alpinelinux.org/alpine"
FIRMWARE = "https://raw.githubusercontent.com/raspberrypi/firmware/master/boot"


class FakeResponse:
    def __init__(self, url, status=200, body=b"", headers=None):
        self.url = url
        self.status_code = status
        self.body = body if isinstance(body, bytes) else body.encode("utf-8")
        self.headers = headers or {}

    @property
    def text(self):
        return self.body.decode("utf-8")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i : i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Serves a fixed url -> body map; unknown URLs are 404s."""

    def __init__(self, routes=None, errors=None):
        self.routes = dict(routes or {})
        self.errors = dict(errors or {})
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append(url)
        if url in self.errors:
            raise self.errors[url]
        if url not in self.routes:
            return FakeResponse(url, status=404)
        return FakeResponse(url, body=self.routes[url])

    def close(self):
        self.closed = True


def make_minirootfs(extra_files=None):
    """Return gzip tarball bytes shaped like an Alpine minirootfs."""

    files = {
        "etc/apk/world": "alpine-baselayout\nbusybox\n",
        "etc/apk/repositories": "https://dl-cdn.alpinelinux.org/alpine/v3.20/main\n",
        "etc/passwd": "root:x:0:0:root:/root:/bin/sh\n",
        "etc/fstab": "/dev/cdrom\t/media/cdrom\tiso9660\tnoauto,ro 0 0\n",
        "etc/ssh/sshd_config": "#PermitRootLogin prohibit-password\n",
        "etc/.pwd.lock": "",
        "bin/busybox": "#!/bin/sh\n",
    }
    files.update(extra_files or {})

    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for d in ["proc", "sys", "dev", "tmp", "etc/init.d"]:
            info = tarfile.TarInfo(d)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, body in files.items():
            data = body.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
        link = tarfile.TarInfo("bin/sh")
        link.type = tarfile.SYMTYPE
        link.linkname = "/bin/busybox"
        tar.addfile(link)
    return buf.getvalue()


def default_routes(branch="3.20", patch_level=5):
    """Routes for a full successful run against the default upstreams."""

    index = (
        f'<a href="alpine-minirootfs-{branch}.{patch_level}-aarch64.tar.gz">'
        f"alpine-minirootfs-{branch}.{patch_level}-aarch64.tar.gz</a>\n"
        '<a href="alpine-minirootfs-3.19.1-aarch64.tar.gz">alpine-minirootfs-3.19.1-aarch64.tar.gz</a>\n'
    )
    return {
        f"{MIRROR}/latest-stable/releases/arm64/": index,
        f"{MIRROR}/v{branch}/releases/arm64/": index,
        f"{FIRMWARE}/fixup4cd.dat": b"fixup-cd",
        f"{FIRMWARE}/start4.elf": b"start",
        f"{FIRMWARE}/bcm2711-rpi-4-b.dtb": b"dtb",
        f"{MIRROR}/v{branch}/releases/aarch64/netboot/vmlinuz-rpi4": b"kernel",
        f"{MIRROR}/v{branch}/releases/aarch64/netboot/initramfs-rpi4": b"initramfs",
        f"{MIRROR}/v{branch}/releases/arm64/alpine-minirootfs-{branch}.{patch_level}-aarch64.tar.gz": make_minirootfs(),
    }


@pytest.fixture
def fake_commands():
    """Patch the single subprocess seam; yields the list of argv lists run."""

    calls = []

    def _fake_run_cmd(argv, *, check=True, dry_run=False, **kwargs):
        calls.append([str(a) for a in argv])
        return CmdResult(argv=[str(a) for a in argv], returncode=0, stdout="", stderr="")

    with patch("alpine_netboot.lib.chroot.run_cmd", side_effect=_fake_run_cmd):
        yield calls
