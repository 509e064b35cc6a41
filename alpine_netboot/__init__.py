"""Alpine Linux netboot staging for the Raspberry Pi 4.

One-shot, sequential build:
- Resolve the Alpine release branch
- Fetch Pi firmware, kernel and initramfs into the TFTP tree
- Write cmdline.txt pointing at the overlay
- Build a minirootfs and install packages in a chroot
- Package its /etc as <board>.apkovl.tar.gz
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
