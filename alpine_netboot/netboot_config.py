from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

DEFAULT_PACKAGES = ["alpine-base", "alpine-conf", "openssh", "chrony"]

# (saved name, candidate upstream names in order)
RPI4_FIRMWARE = [
    ("fixup4.dat", ["fixup4.dat", "fixup4cd.dat"]),
    ("start4.elf", ["start4.elf", "start4cd.elf"]),
    ("bcm2711-rpi-4-b.dtb", ["bcm2711-rpi-4-b.dtb"]),
]

# (saved name, upstream netboot name)
RPI4_NETBOOT = [
    ("kernel8.img", "vmlinuz-rpi4"),
    ("initramfs-rpi", "initramfs-rpi4"),
]


def _version_string(key: str, v: Any) -> str:
    # YAML reads an unquoted 3.20 as the float 3.2.
    if not isinstance(v, str):
        raise ValueError(f"{key} must be a quoted string such as \"3.20\", got {v!r}")
    return v


@dataclass(frozen=True)
class NetbootConfig:
    """Typed view over a raw settings mapping.

    Every property falls back to the value the stock Raspberry Pi 4 setup
    uses, so NetbootConfig() alone reproduces the default build.
    """

    raw: Dict[str, Any] = field(default_factory=dict)

    def _get(self, key: str, default: Any) -> Any:
        v = self.raw.get(key)
        return default if v is None or v == "" else v

    @property
    def board_name(self) -> str:
        return str(self._get("board_name", "cp1"))

    @property
    def hostname(self) -> str:
        return str(self._get("hostname", self.board_name))

    @property
    def tftp_root(self) -> str:
        return str(self._get("tftp_root", "/srv/tftpboot"))

    @property
    def overlay_server(self) -> str:
        return str(self._get("overlay_server", "192.168.1.2"))

    @property
    def alpine_mirror(self) -> str:
        return str(self._get("alpine_mirror", "https://dl-cdn.alpinelinux.org/alpine")).rstrip("/")

    @property
    def alpine_repo_mirror(self) -> str:
        return str(self._get("alpine_repo_mirror", "http://dl-cdn.alpinelinux.org/alpine")).rstrip("/")

    @property
    def firmware_base_url(self) -> str:
        return str(
            self._get("firmware_base_url", "https://raw.githubusercontent.com/raspberrypi/firmware/master/boot")
        ).rstrip("/")

    @property
    def default_version(self) -> str:
        return _version_string("default_version", self._get("default_version", "3.20"))

    @property
    def pinned_version(self) -> Optional[str]:
        v = self.raw.get("version")
        if v is None or v == "":
            return None
        return _version_string("version", v)

    @property
    def rootfs_arch(self) -> str:
        return str(self._get("rootfs_arch", "arm64"))

    @property
    def rootfs_tarball_arch(self) -> str:
        return str(self._get("rootfs_tarball_arch", "aarch64"))

    @property
    def packages(self) -> List[str]:
        v = self._get("packages", DEFAULT_PACKAGES)
        if isinstance(v, str):
            return v.split()
        return [str(p) for p in v]

    @property
    def kernel_modules(self) -> str:
        return str(self._get("kernel_modules", "loop,squashfs"))

    @property
    def console(self) -> str:
        return str(self._get("console", "ttyAMA0,115200"))

    @property
    def dns_domain(self) -> str:
        return str(self._get("dns_domain", "example.com"))

    @property
    def dns_server(self) -> str:
        return str(self._get("dns_server", "8.8.8.8"))

    @property
    def timezone(self) -> str:
        return str(self._get("timezone", "UTC"))

    @property
    def keymap(self) -> str:
        return str(self._get("keymap", "us us"))

    @property
    def allow_passwordless_root(self) -> bool:
        return bool(self._get("allow_passwordless_root", True))

    @property
    def copy_host_resolv_conf(self) -> bool:
        return bool(self._get("copy_host_resolv_conf", True))

    @property
    def http_timeout(self) -> float:
        return float(self._get("http_timeout", 60))

    @property
    def work_dir_parent(self) -> Optional[str]:
        v = self.raw.get("work_dir_parent")
        return str(v) if v else None

    # Derived locations

    def boot_dir(self, branch: str) -> Path:
        return Path(self.tftp_root) / branch

    @property
    def apkovl_name(self) -> str:
        return f"{self.board_name}.apkovl.tar.gz"

    @property
    def apkovl_url(self) -> str:
        return f"http://{self.overlay_server}/{self.apkovl_name}"

    @property
    def latest_stable_index_url(self) -> str:
        return f"{self.alpine_mirror}/latest-stable/releases/{self.rootfs_arch}/"

    def release_index_url(self, branch: str) -> str:
        return f"{self.alpine_mirror}/v{branch}/releases/{self.rootfs_arch}/"

    def netboot_url(self, branch: str, name: str) -> str:
        return f"{self.alpine_mirror}/v{branch}/releases/{self.rootfs_tarball_arch}/netboot/{name}"

    def firmware_url(self, name: str) -> str:
        return f"{self.firmware_base_url}/{name}"

    def repo_url(self, branch: str) -> str:
        return f"{self.alpine_repo_mirror}/v{branch}/main"

    def minirootfs_urls(self, branch: str, patch: int) -> List[str]:
        """Primary URL for branch.patch, then the latest-stable fallback (.0)."""

        name = "alpine-minirootfs-{v}-{a}.tar.gz"
        return [
            self.release_index_url(branch) + name.format(v=f"{branch}.{patch}", a=self.rootfs_tarball_arch),
            self.latest_stable_index_url + name.format(v=f"{branch}.0", a=self.rootfs_tarball_arch),
        ]

    def with_overrides(self, overrides: Mapping[str, Any]) -> "NetbootConfig":
        merged = dict(self.raw)
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return NetbootConfig(raw=merged)


def load_netboot_config(path: Optional[str]) -> NetbootConfig:
    if not path:
        return NetbootConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("netboot config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")

    cfg = NetbootConfig(raw=raw)
    # Both raise ValueError for unquoted versions.
    cfg.default_version
    cfg.pinned_version
    return cfg
