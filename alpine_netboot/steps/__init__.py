from .step_10_resolve_version import ResolveVersionStep
from .step_20_fetch_artifacts import FetchArtifactsStep
from .step_30_write_cmdline import WriteCmdlineStep
from .step_40_build_rootfs import BuildRootfsStep
from .step_50_write_overlay_config import WriteOverlayConfigStep
from .step_60_package_apkovl import PackageApkovlStep

__all__ = [
    "ResolveVersionStep",
    "FetchArtifactsStep",
    "WriteCmdlineStep",
    "BuildRootfsStep",
    "WriteOverlayConfigStep",
    "PackageApkovlStep",
]
