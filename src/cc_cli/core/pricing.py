"""Built-in hourly price tables and cheapest-instance selection.

Prices are approximate on-demand USD/hour figures. Each table is a list of
tiers; within a tier the first row whose limits fit the requirements wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from cc_cli.core.sizing import ModelRequirements


@dataclass(frozen=True, slots=True)
class InstanceOffer:
    """A priced instance shape.

    Attributes:
        provider: "gcp", "azure" or "aws"
        name: Instance/SKU name shown to the user
        hourly_price: Approximate on-demand USD per hour
        location: Zone (GCP), location (Azure) or region (AWS)
        vcpus: vCPUs of the shape
        ram_gb: Memory of the shape in GB
        gpu: Human-readable GPU description, empty for CPU-only
        machine_type: Machine type to request when it differs from ``name``
        accelerator: GCP accelerator type to attach, if any
        max_vcpus / max_ram_mb / max_gpu_memory: Fit limits, None = unbounded
    """

    provider: str
    name: str
    hourly_price: float
    location: str
    vcpus: int
    ram_gb: float
    gpu: str = ""
    machine_type: str | None = None
    accelerator: str | None = None
    max_vcpus: int | None = None
    max_ram_mb: int | None = None
    max_gpu_memory: int | None = None

    def fits(self, req: ModelRequirements) -> bool:
        if self.max_vcpus is not None and req.vcpus > self.max_vcpus:
            return False
        if self.max_ram_mb is not None and req.ram_mb > self.max_ram_mb:
            return False
        if self.max_gpu_memory is not None and req.gpu_memory_gb > self.max_gpu_memory:
            return False
        return True

    @property
    def request_type(self) -> str:
        return self.machine_type or self.name

    def describe(self) -> str:
        specs = f"{self.vcpus} vCPU, {self.ram_gb:g}GB RAM"
        if self.gpu:
            specs += f", {self.gpu}"
        return f"{self.name} ({specs}, ~${self.hourly_price:.2f}/hour)"


@dataclass(frozen=True, slots=True)
class GpuTier:
    """A GPU family; chosen when the type matches or the memory fits."""

    gpu_types: tuple[str, ...]
    max_gpu_memory: int | None
    offers: tuple[InstanceOffer, ...] = field(default_factory=tuple)

    def matches(self, req: ModelRequirements) -> bool:
        if req.gpu_type in self.gpu_types:
            return True
        return self.max_gpu_memory is None or req.gpu_memory_gb <= self.max_gpu_memory


@dataclass(frozen=True, slots=True)
class PriceTable:
    provider: str
    cpu_offers: tuple[InstanceOffer, ...]
    gpu_tiers: tuple[GpuTier, ...]


def _offer(provider: str, location: str):
    def make(name: str, price: float, vcpus: int, ram_gb: float, gpu: str = "", **kwargs) -> InstanceOffer:
        return InstanceOffer(provider, name, price, location, vcpus, ram_gb, gpu, **kwargs)

    return make


_gcp = _offer("gcp", "us-central1-a")
_gcp_t4 = _offer("gcp", "us-central1-b")

GCP_PRICES = PriceTable(
    provider="gcp",
    cpu_offers=(
        _gcp("n1-standard-2", 0.10, 2, 7.5, max_vcpus=2, max_ram_mb=4096),
        _gcp("n1-standard-4", 0.20, 4, 15, max_vcpus=2),
        _gcp("n1-standard-4", 0.20, 4, 15, max_vcpus=4, max_ram_mb=16384),
        _gcp("n1-standard-8", 0.38, 8, 30, max_vcpus=4),
        _gcp("n1-standard-8", 0.38, 8, 30, max_vcpus=8, max_ram_mb=32768),
        _gcp("n1-standard-16", 0.76, 16, 60),
    ),
    gpu_tiers=(
        GpuTier(("T4",), 16, (
            _gcp_t4("n1-standard-4-t4", 0.35, 4, 15, "NVIDIA T4 GPU", machine_type="n1-standard-4",
                    accelerator="nvidia-tesla-t4", max_vcpus=4, max_ram_mb=16384),
            _gcp_t4("n1-standard-8-t4", 0.53, 8, 30, "NVIDIA T4 GPU", machine_type="n1-standard-8",
                    accelerator="nvidia-tesla-t4", max_vcpus=8, max_ram_mb=32768),
            _gcp_t4("n1-standard-16-t4", 0.91, 16, 60, "NVIDIA T4 GPU", machine_type="n1-standard-16",
                    accelerator="nvidia-tesla-t4"),
        )),
        GpuTier(("L4",), 24, (
            _gcp("g2-standard-4", 0.71, 4, 16, "NVIDIA L4 GPU", max_vcpus=4, max_ram_mb=16384),
            _gcp("g2-standard-8", 0.85, 8, 32, "NVIDIA L4 GPU", max_vcpus=8, max_ram_mb=32768),
            _gcp("g2-standard-16", 1.15, 16, 64, "NVIDIA L4 GPU", max_vcpus=16, max_ram_mb=65536),
            _gcp("g2-standard-32", 1.73, 32, 128, "NVIDIA L4 GPU"),
        )),
        GpuTier(("A10G",), 24, (
            _gcp("a2-highgpu-1g", 1.50, 12, 85, "NVIDIA A10G GPU"),
        )),
        GpuTier(("A100",), None, (
            _gcp("a2-highgpu-1g", 3.67, 12, 85, "NVIDIA A100 GPU", max_gpu_memory=40),
            _gcp("a2-highgpu-2g", 7.35, 24, 170, "2x NVIDIA A100 GPU"),
        )),
    ),
)

_azure = _offer("azure", "eastus")

AZURE_PRICES = PriceTable(
    provider="azure",
    cpu_offers=(
        _azure("Standard_D2s_v5", 0.096, 2, 8, max_vcpus=2, max_ram_mb=8192),
        _azure("Standard_D4s_v5", 0.192, 4, 16, max_vcpus=2),
        _azure("Standard_D4s_v5", 0.192, 4, 16, max_vcpus=4, max_ram_mb=16384),
        _azure("Standard_D8s_v5", 0.384, 8, 32, max_vcpus=4),
        _azure("Standard_D8s_v5", 0.384, 8, 32, max_vcpus=8, max_ram_mb=32768),
        _azure("Standard_D16s_v5", 0.768, 16, 64),
    ),
    gpu_tiers=(
        GpuTier(("T4",), 16, (
            _azure("Standard_NC4as_T4_v3", 0.73, 4, 28, "NVIDIA T4 GPU", max_vcpus=6, max_ram_mb=56000),
            _azure("Standard_NC8as_T4_v3", 1.46, 8, 56, "NVIDIA T4 GPU", max_vcpus=12, max_ram_mb=112000),
            _azure("Standard_NC16as_T4_v3", 2.93, 16, 110, "NVIDIA T4 GPU"),
        )),
        GpuTier(("V100",), 32, (
            _azure("Standard_NC4s_v3", 3.06, 4, 28, "NVIDIA V100 GPU", max_vcpus=6, max_ram_mb=56000),
            _azure("Standard_NC8s_v3", 6.12, 8, 56, "NVIDIA V100 GPU", max_vcpus=12, max_ram_mb=112000),
            _azure("Standard_NC16s_v3", 12.24, 16, 112, "2x NVIDIA V100 GPU"),
        )),
        GpuTier(("A100",), None, (
            _azure("Standard_ND40rs_v2", 26.07, 40, 672, "8x NVIDIA V100 GPU"),
        )),
    ),
)

_aws = _offer("aws", "us-east-1")

AWS_PRICES = PriceTable(
    provider="aws",
    cpu_offers=(
        _aws("m6i.large", 0.096, 2, 8, max_vcpus=2, max_ram_mb=8192),
        _aws("m6i.xlarge", 0.192, 4, 16, max_vcpus=4, max_ram_mb=16384),
        _aws("m6i.2xlarge", 0.384, 8, 32, max_vcpus=8, max_ram_mb=32768),
        _aws("m6i.4xlarge", 0.768, 16, 64, max_vcpus=16, max_ram_mb=65536),
        _aws("m6i.8xlarge", 1.536, 32, 128),
    ),
    gpu_tiers=(
        GpuTier(("T4",), 16, (
            _aws("g4dn.xlarge", 0.526, 4, 16, "NVIDIA T4 GPU", max_vcpus=4, max_ram_mb=16384),
            _aws("g4dn.2xlarge", 0.752, 8, 32, "NVIDIA T4 GPU", max_vcpus=8, max_ram_mb=32768),
            _aws("g4dn.4xlarge", 1.204, 16, 64, "NVIDIA T4 GPU"),
        )),
        GpuTier(("L4",), 24, (
            _aws("g6.xlarge", 0.805, 4, 16, "NVIDIA L4 GPU", max_vcpus=4, max_ram_mb=16384),
            _aws("g6.2xlarge", 0.978, 8, 32, "NVIDIA L4 GPU", max_vcpus=8, max_ram_mb=32768),
            _aws("g6.4xlarge", 1.323, 16, 64, "NVIDIA L4 GPU", max_vcpus=16, max_ram_mb=65536),
            _aws("g6.8xlarge", 2.014, 32, 128, "NVIDIA L4 GPU"),
        )),
        GpuTier(("A10G",), 24, (
            _aws("g5.xlarge", 1.006, 4, 16, "NVIDIA A10G GPU", max_vcpus=4, max_ram_mb=16384),
            _aws("g5.2xlarge", 1.212, 8, 32, "NVIDIA A10G GPU", max_vcpus=8, max_ram_mb=32768),
            _aws("g5.4xlarge", 1.624, 16, 64, "NVIDIA A10G GPU", max_vcpus=16, max_ram_mb=65536),
            _aws("g5.8xlarge", 2.448, 32, 128, "NVIDIA A10G GPU"),
        )),
        GpuTier(("A100",), None, (
            _aws("p4d.24xlarge", 32.77, 96, 1152, "8x NVIDIA A100 GPU"),
        )),
    ),
)

PRICE_TABLES: dict[str, PriceTable] = {
    "gcp": GCP_PRICES,
    "azure": AZURE_PRICES,
    "aws": AWS_PRICES,
}

# Tie-break order when two providers quote the same price
PROVIDER_ORDER: tuple[str, ...] = ("gcp", "azure", "aws")


def _first_fit(offers: Iterable[InstanceOffer], req: ModelRequirements) -> InstanceOffer:
    for offer in offers:
        if offer.fits(req):
            return offer
    raise LookupError("price table has no catch-all row")


def select_offer(table: PriceTable, req: ModelRequirements) -> InstanceOffer:
    """Pick the cheapest suitable instance from one provider's table."""
    if not req.needs_gpu:
        return _first_fit(table.cpu_offers, req)
    for tier in table.gpu_tiers:
        if tier.matches(req):
            return _first_fit(tier.offers, req)
    raise LookupError(f"{table.provider} price table has no catch-all GPU tier")


def find_cheapest_for_provider(provider: str, req: ModelRequirements) -> InstanceOffer:
    return select_offer(PRICE_TABLES[provider], req)


def cheapest_offer(offers: Sequence[InstanceOffer]) -> InstanceOffer:
    """Lowest hourly price; ties go to the provider earlier in PROVIDER_ORDER."""
    if not offers:
        raise ValueError("no offers to compare")
    return min(offers, key=lambda o: (o.hourly_price, PROVIDER_ORDER.index(o.provider)))
