"""Compute-requirement estimates for running a model.

Arithmetic is done in :class:`~decimal.Decimal` so results match the
fixed-point integer arithmetic of the published sizing tables; truncation
is always toward zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from cc_cli.catalog import QUANTIZATIONS, ModelParameters, get_model_parameters
from cc_cli.errors import InvalidPerformanceLevelError

PerformanceLevel = Literal["basic", "standard", "optimal"]
PERFORMANCE_LEVELS: tuple[str, ...] = ("basic", "standard", "optimal")

# MB of RAM per billion parameters
MEMORY_PER_BILLION_MB = {"none": 1000, "int8": 500, "int4": 250}
# GB of GPU memory per billion parameters
GPU_MEMORY_PER_BILLION_GB = {"none": Decimal(2), "int8": Decimal(1), "int4": Decimal("0.5")}

MIN_RAM_MB = {"basic": 4096, "standard": 8192, "optimal": 16384}

# (max GPU memory GB, GPU type); anything larger gets an A100
GPU_TYPE_THRESHOLDS: tuple[tuple[int, str], ...] = ((16, "T4"), (24, "L4"), (40, "A10G"))

LARGE_MODEL_THRESHOLD = Decimal(70)
LARGE_MODEL_OVERRIDES = {
    "standard": (32, 131072, 24, 1, "A10G"),
    "optimal": (32, 131072, 80, 1, "A100"),
}


@dataclass(frozen=True, slots=True)
class ModelRequirements:
    """Minimum instance specs for a model at a performance level."""

    vcpus: int
    ram_mb: int
    gpu_memory_gb: int
    gpu_count: int
    gpu_type: str
    performance: str

    @property
    def ram_gb(self) -> int:
        return self.ram_mb // 1024

    @property
    def needs_gpu(self) -> bool:
        return self.gpu_memory_gb > 0

    def describe(self) -> str:
        return (
            f"{self.vcpus} vCPUs, {self.ram_gb} GB RAM, "
            f"{self.gpu_memory_gb} GB GPU memory, {self.gpu_count} GPU(s)"
        )


def validate_performance_level(level: str) -> str:
    if level not in PERFORMANCE_LEVELS:
        raise InvalidPerformanceLevelError(level)
    return level


def _trunc(value: Decimal) -> int:
    return int(value)


def _round_up(value: Decimal) -> int:
    # Rounds x.1 and above up; exact integers stay put
    return _trunc(value + Decimal("0.9"))


def context_factor(context_length: int) -> Decimal:
    if context_length <= 4096:
        return Decimal("1.0")
    return Decimal("1.0") + (Decimal(context_length - 4096) / Decimal(4096)) * Decimal("0.2")


def gpu_type_for(gpu_memory_gb: int) -> str:
    for limit, gpu_type in GPU_TYPE_THRESHOLDS:
        if gpu_memory_gb <= limit:
            return gpu_type
    return "A100"


def calculate_model_requirements(
    params: ModelParameters,
    performance: str = "standard",
) -> ModelRequirements:
    """Estimate instance requirements from model size metadata.

    Args:
        params: Model size metadata
        performance: "basic", "standard" or "optimal"

    Returns:
        ModelRequirements for the model

    Raises:
        InvalidPerformanceLevelError: If performance is not a known level
        ValueError: If the quantization is not recognised
    """
    validate_performance_level(performance)
    if params.quantization not in QUANTIZATIONS:
        raise ValueError(f"Invalid quantization: {params.quantization}")

    param_count = Decimal(str(params.param_count))
    mem_per_b = MEMORY_PER_BILLION_MB[params.quantization]
    base_ram = _trunc(param_count * mem_per_b * context_factor(params.context_length))

    vcpus = 2
    if param_count >= 7:
        vcpus = 4
    if param_count >= 32:
        vcpus = 16
    if param_count >= 70:
        vcpus = 32

    if performance == "basic":
        vcpus = max(2, vcpus // 2)
    elif performance == "optimal":
        vcpus = vcpus * 2

    gpu_memory = 0
    gpu_count = 0
    gpu_type = "none"
    small_basic = performance == "basic" and param_count < 7
    if not small_basic and param_count >= 2:
        raw_gpu = param_count * GPU_MEMORY_PER_BILLION_GB[params.quantization] + 2
        gpu_memory = max(4, _round_up(raw_gpu))
        if performance == "optimal":
            gpu_memory = _round_up(Decimal(gpu_memory) * Decimal("1.5"))
        gpu_count = 1
        gpu_type = gpu_type_for(gpu_memory)

    ram_mb = _trunc(Decimal(base_ram) * Decimal("1.5"))

    if param_count >= LARGE_MODEL_THRESHOLD and performance in LARGE_MODEL_OVERRIDES:
        vcpus, ram_mb, gpu_memory, gpu_count, gpu_type = LARGE_MODEL_OVERRIDES[performance]

    ram_mb = max(ram_mb, MIN_RAM_MB[performance])

    return ModelRequirements(
        vcpus=vcpus,
        ram_mb=ram_mb,
        gpu_memory_gb=gpu_memory,
        gpu_count=gpu_count,
        gpu_type=gpu_type,
        performance=performance,
    )


def get_model_requirements(
    model: str,
    performance: str = "standard",
    quantization: str | None = None,
) -> ModelRequirements:
    """Requirements for a catalog model, optionally with a quantization override."""
    params = get_model_parameters(model)
    if quantization is not None:
        params = params.with_quantization(quantization)
    return calculate_model_requirements(params, performance)
