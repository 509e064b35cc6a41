"""Bodies of the files written into the overlay and the boot directory.

All of these are consumed by the Alpine boot process (setup-alpine,
OpenRC, sshd, lbu, the Pi firmware), not by this tool.
"""

from __future__ import annotations

from ..netboot_config import NetbootConfig

ANSWERS_PATH = "/etc/answers"
SETUP_SERVICE = "setup-alpine"


def render_cmdline(cfg: NetbootConfig, branch: str) -> str:
    params = [
        f"modules={cfg.kernel_modules}",
        f"console={cfg.console}",
        "ip=dhcp",
        f"alpine_repo={cfg.repo_url(branch)}",
        f"apkovl={cfg.apkovl_url}",
    ]
    return " ".join(params) + "\n"


def render_answers(cfg: NetbootConfig) -> str:
    # DISKOPTS -m none: nothing is installed to disk, the system stays in RAM.
    return "\n".join(
        [
            f'KEYMAPOPTS="{cfg.keymap}"',
            f'HOSTNAMEOPTS="-n {cfg.hostname}"',
            'INTERFACESOPTS="auto lo',
            "iface lo inet loopback",
            "",
            "auto eth0",
            'iface eth0 inet dhcp"',
            f'DNSOPTS="-d {cfg.dns_domain} {cfg.dns_server}"',
            f'TIMEZONEOPTS="-z {cfg.timezone}"',
            'PROXYOPTS="none"',
            'APKREPOSOPTS="-1"',
            'SSHDOPTS="-c openssh"',
            'NTPOPTS="-c chrony"',
            'DISKOPTS="-m none"',
            "",
        ]
    )


def render_setup_service(answers_path: str = ANSWERS_PATH) -> str:
    return f"""#!/sbin/openrc-run
command="/sbin/setup-alpine"
command_args="-f {answers_path}"
pidfile="/var/run/setup-alpine.pid"

depend() {{
    need localmount
    before networking
}}

start() {{
    ebegin "Running setup-alpine"
    if [ -f {answers_path} ]; then
        /sbin/setup-alpine -f {answers_path}
        eend $?
    else
        eend 1 "Answers file not found"
    fi
}}
"""


SSHD_POLICY = """
# Allow root login without password
PermitRootLogin yes
PasswordAuthentication yes
"""

DISKLESS_FSTAB = """# Diskless mode - no persistent storage
# All filesystems are in memory
"""

DISKLESS_LBU_CONF = """# Diskless mode - no storage device for lbu
# Changes will not persist across reboots
LBU_MEDIA=""
"""
