"""Local hardware detection and model recommendations."""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass, field
from pathlib import Path

import psutil

from cc_cli.errors import CommandNotFoundError
from cc_cli.infra.runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)

APPLE_SILICON_GPU = "Apple Silicon GPU"
NO_GPU = "No dedicated GPU detected"


@dataclass(slots=True)
class HardwareInfo:
    """Snapshot of the host's compute resources.

    Attributes:
        system: platform.system() value ("Darwin", "Linux", ...)
        cpu_info: CPU model string
        cpu_cores: Logical CPU count
        total_ram_bytes: Physical memory in bytes
        gpu_info: GPU name or NO_GPU
        has_gpu: Whether a usable GPU was found
        disk_free_bytes: Free space on the root filesystem
    """

    system: str
    cpu_info: str
    cpu_cores: int
    total_ram_bytes: int
    gpu_info: str = NO_GPU
    has_gpu: bool = False
    disk_free_bytes: int = 0

    @property
    def ram_gb(self) -> int:
        """Whole gigabytes of RAM, rounded down."""
        return self.total_ram_bytes // (1024**3)

    @property
    def ram_gb_exact(self) -> float:
        return self.total_ram_bytes / (1024**3)

    @property
    def is_apple_silicon(self) -> bool:
        return self.gpu_info == APPLE_SILICON_GPU


def _cpu_model(system: str, runner: CommandRunner) -> str:
    if system == "Darwin":
        try:
            result = runner.run(["sysctl", "-n", "machdep.cpu.brand_string"])
        except CommandNotFoundError:
            return "Unknown"
        return result.stdout.strip() or "Unknown"
    if system == "Linux":
        cpuinfo = Path("/proc/cpuinfo")
        if cpuinfo.exists():
            for line in cpuinfo.read_text(encoding="utf-8", errors="replace").splitlines():
                if line.startswith("model name"):
                    return line.split(":", 1)[1].strip()
    return platform.processor() or "Unknown"


def _gpu(system: str, cpu_info: str, runner: CommandRunner) -> tuple[str, bool]:
    if runner.exists("nvidia-smi"):
        result = runner.run(["nvidia-smi", "--query-gpu=name", "--format=csv,noheader"])
        if result.ok and result.stdout.strip():
            return result.stdout.strip().splitlines()[0].strip(), True
        logger.warning("nvidia-smi present but returned no GPU: %s", result.stderr.strip())
    if system == "Darwin" and "Apple" in cpu_info:
        return APPLE_SILICON_GPU, True
    return NO_GPU, False


def detect_hardware(runner: CommandRunner = default_runner) -> HardwareInfo:
    """Inspect CPU, RAM, GPU and disk of the current machine."""
    system = platform.system()
    cpu_info = _cpu_model(system, runner)
    gpu_info, has_gpu = _gpu(system, cpu_info, runner)
    try:
        disk_free = psutil.disk_usage("/").free
    except OSError as exc:
        logger.warning("Could not read disk usage: %s", exc)
        disk_free = 0

    info = HardwareInfo(
        system=system,
        cpu_info=cpu_info,
        cpu_cores=psutil.cpu_count(logical=True) or 1,
        total_ram_bytes=psutil.virtual_memory().total,
        gpu_info=gpu_info,
        has_gpu=has_gpu,
        disk_free_bytes=disk_free,
    )
    logger.info("Detected hardware: %s", info)
    return info


def recommend_best_model(hw: HardwareInfo) -> str:
    """Pick the best alternative model for this machine."""
    ram_gb = hw.ram_gb

    if hw.is_apple_silicon:
        if ram_gb >= 16:
            return "llama3:8b"
        if ram_gb >= 8:
            return "phi"
        return "gemma:2b"

    if ram_gb >= 32:
        return "mistral" if hw.has_gpu else "llama3:8b"
    if ram_gb >= 16:
        return "llama3:8b" if hw.has_gpu else "mistral"
    if ram_gb >= 12:
        return "qwen:4b"
    if ram_gb >= 8:
        return "phi"
    return "gemma:2b"


def capability_summary(ram_gb: int) -> str:
    """One line describing which models this much RAM can handle."""
    if ram_gb >= 32:
        return "You can run models up to: cc-r1:14b, llama3:8b, mistral"
    if ram_gb >= 16:
        return "You can run models up to: cc-r1:8b, llama3:8b, mistral"
    if ram_gb >= 12:
        return "Recommended models: mistral, qwen:4b"
    if ram_gb >= 8:
        return "Recommended models: phi, gemma:2b, qwen:4b"
    return "Your system has limited RAM. Consider using phi or gemma:2b models with caution."


@dataclass(slots=True)
class HardwareReport:
    """Result of a full hardware analysis."""

    hardware: HardwareInfo
    recommendation: str
    limited_memory: bool
    suggestions: list[str] = field(default_factory=list)


def analyze(hw: HardwareInfo) -> HardwareReport:
    """Build the recommendation and tuning suggestions for ``cc-analyze-hardware``."""
    mem = hw.ram_gb_exact
    if mem < 8:
        recommendation = "Use smaller models (phi or cc-r1:1.5b)"
    elif mem < 16:
        recommendation = "Use medium-sized models (cc-r1:8b)"
    else:
        recommendation = "Can handle larger models (cc-r1:14b or larger)"

    suggestions = []
    if hw.cpu_cores < 4:
        suggestions.append("Consider using models with smaller context windows")
        suggestions.append("Enable model quantization for better performance")
    if hw.has_gpu:
        suggestions.append("GPU detected: Consider enabling GPU acceleration")
    else:
        suggestions.append("No GPU detected: Using CPU-only mode")
        suggestions.append("Consider using quantized models for better performance")

    return HardwareReport(
        hardware=hw,
        recommendation=recommendation,
        limited_memory=mem < 8,
        suggestions=suggestions,
    )


def format_bytes(num: int) -> str:
    value = float(num)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}TB"
