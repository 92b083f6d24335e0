"""Shell environment tuning files for local inference."""

from __future__ import annotations

import logging
import os
import platform
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

PROFILE_MARKER = "# Load LLM optimizations"

METAL_CONF = """# Metal optimizations for Apple Silicon
export MTL_CAPTURE_ENABLED=0
export MTL_DEBUG_LAYER=0
export MTL_MAX_BUFFER_LENGTH=1073741824
export MTL_GPU_FAMILY=apple7
export MTL_GPU_VERSION=1
"""

THREAD_VARIABLES = (
    "OMP_NUM_THREADS",
    "MKL_NUM_THREADS",
    "VECLIB_MAXIMUM_THREADS",
    "NUMEXPR_NUM_THREADS",
    "OPENBLAS_NUM_THREADS",
)

PERFORMANCE_ENV = """# Performance optimizations
export PYTHONUNBUFFERED=1
export TF_CPP_MIN_LOG_LEVEL=2
export TF_ENABLE_ONEDNN_OPTS=1
export HDF5_USE_FILE_LOCKING=FALSE
"""


def memory_conf(cores: int) -> str:
    lines = [
        "# Memory optimizations for LLM",
        "export MALLOC_ARENA_MAX=2",
        "export MALLOC_MMAP_THRESHOLD_=131072",
        "export MALLOC_TRIM_THRESHOLD_=131072",
        "export MALLOC_MMAP_MAX_=65536",
        "",
        "# Thread optimizations",
    ]
    lines += [f"export {name}={cores}" for name in THREAD_VARIABLES]
    return "\n".join(lines) + "\n"


def environment_file(opt_dir: Path, include_metal: bool) -> str:
    lines = ["# LLM optimizations"]
    if include_metal:
        lines.append(f'source "{opt_dir / "metal.conf"}"')
    lines.append(f'source "{opt_dir / "memory.conf"}"')
    return "\n".join(lines) + "\n\n" + PERFORMANCE_ENV


def optimized_wrapper(opt_dir: Path) -> str:
    return (
        "#!/bin/bash\n"
        "# Run cc with the optimized environment loaded\n"
        f'source "{opt_dir / "environment"}"\n'
        'exec cc "$@"\n'
    )


def performance_mode_script(system: str) -> str:
    lines = [
        "#!/bin/bash",
        "# Enable high performance mode for LLM operations",
        'echo "Optimizing system for LLM operations..."',
    ]
    if system == "Darwin":
        lines.append("sudo purge")
    lines += [
        'echo "For best performance:"',
        'echo "1. Connect to power adapter"',
        'echo "2. Quit unnecessary applications"',
        'echo "3. Disable unnecessary background services"',
        'echo "Performance mode active. Your LLM operations should now be faster."',
    ]
    return "\n".join(lines) + "\n"


@dataclass
class OptimizationResult:
    """Files produced by :func:`write_optimizations`."""

    opt_dir: Path
    files: List[Path] = field(default_factory=list)
    scripts: List[Path] = field(default_factory=list)

    @property
    def environment(self) -> Path:
        return self.opt_dir / "environment"


def _write(path: Path, content: str, executable: bool = False) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if executable:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.debug("Wrote %s", path)
    return path


def write_optimizations(
    opt_dir: Path,
    cores: Optional[int] = None,
    system: Optional[str] = None,
) -> OptimizationResult:
    """Write the tuning files and helper scripts into ``opt_dir``.

    Args:
        opt_dir: Target directory, created if missing
        cores: Thread count for the *_NUM_THREADS variables (default: CPU count)
        system: platform.system() value; Metal settings are only written on Darwin

    Returns:
        OptimizationResult listing everything written
    """
    cores = cores or os.cpu_count() or 1
    system = system or platform.system()
    is_mac = system == "Darwin"

    result = OptimizationResult(opt_dir=opt_dir)
    if is_mac:
        result.files.append(_write(opt_dir / "metal.conf", METAL_CONF))
    result.files.append(_write(opt_dir / "memory.conf", memory_conf(cores)))
    result.files.append(_write(opt_dir / "environment", environment_file(opt_dir, is_mac)))

    bin_dir = opt_dir / "bin"
    result.scripts.append(_write(bin_dir / "cc-optimized", optimized_wrapper(opt_dir), executable=True))
    result.scripts.append(
        _write(bin_dir / "llm-performance-mode", performance_mode_script(system), executable=True)
    )
    logger.info("Wrote %d optimization files to %s", len(result.files) + len(result.scripts), opt_dir)
    return result


def add_to_shell_profile(profile: Path, environment: Path) -> bool:
    """Append a ``source`` line for ``environment`` unless already present.

    Returns:
        True if the profile was modified
    """
    source_line = f"source {environment}"
    existing = profile.read_text(encoding="utf-8") if profile.exists() else ""
    if source_line in existing:
        logger.info("%s already sources %s", profile, environment)
        return False

    profile.parent.mkdir(parents=True, exist_ok=True)
    with open(profile, "a", encoding="utf-8") as f:
        f.write(f"\n{PROFILE_MARKER}\n{source_line}\n")
    return True
