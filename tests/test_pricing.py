"""Tests for the built-in price tables and cheapest-offer selection."""

import pytest

from cc_cli.core.pricing import (
    PRICE_TABLES,
    InstanceOffer,
    cheapest_offer,
    find_cheapest_for_provider,
)
from cc_cli.core.sizing import get_model_requirements


def _pick(provider, model, performance="standard"):
    return find_cheapest_for_provider(provider, get_model_requirements(model, performance))


class TestFindCheapestForProvider:
    """Test suite for per-provider row and tier selection."""

    @pytest.mark.parametrize(
        "provider,model,performance,name,price",
        [
            ("gcp", "cc-r1:8b", "standard", "g2-standard-4", 0.71),
            ("azure", "cc-r1:8b", "standard", "Standard_NC4s_v3", 3.06),
            ("aws", "cc-r1:8b", "standard", "g6.xlarge", 0.805),
            ("gcp", "phi", "basic", "n1-standard-2", 0.10),
            ("azure", "phi", "basic", "Standard_D2s_v5", 0.096),
            ("aws", "phi", "basic", "m6i.large", 0.096),
            ("gcp", "cc-r1:1.5b", "standard", "n1-standard-4", 0.20),
            ("gcp", "cc-r1:70b", "standard", "g2-standard-32", 1.73),
            ("azure", "cc-r1:70b", "standard", "Standard_NC16s_v3", 12.24),
            ("aws", "cc-r1:70b", "standard", "g6.8xlarge", 2.014),
            ("gcp", "cc-r1:70b", "optimal", "a2-highgpu-2g", 7.35),
            ("gcp", "mistral", "optimal", "g2-standard-8", 0.85),
            ("gcp", "cc-r1:14b", "standard", "a2-highgpu-1g", 1.50),
            ("aws", "cc-r1:14b", "standard", "g5.2xlarge", 1.212),
            ("gcp", "cc-r1:32b", "standard", "a2-highgpu-2g", 7.35),
            ("azure", "cc-r1:32b", "standard", "Standard_ND40rs_v2", 26.07),
        ],
    )
    def test_selection(self, provider, model, performance, name, price):
        """Test the row chosen for representative requirements."""
        offer = _pick(provider, model, performance)

        assert offer.name == name
        assert offer.hourly_price == pytest.approx(price)
        assert offer.provider == provider

    def test_gcp_t4_row_requests_real_machine_type(self):
        """Test that T4 rows map to an n1 machine plus an accelerator."""
        offer = _pick("gcp", "gemma:2b")

        assert offer.name == "n1-standard-4-t4"
        assert offer.request_type == "n1-standard-4"
        assert offer.accelerator == "nvidia-tesla-t4"
        assert offer.location == "us-central1-b"
        assert offer.hourly_price == pytest.approx(0.35)

    def test_plain_row_request_type_is_name(self):
        """Test that rows without machine_type request their own name."""
        offer = _pick("gcp", "cc-r1:8b")
        assert offer.request_type == "g2-standard-4"
        assert offer.accelerator is None

    @pytest.mark.parametrize("provider", sorted(PRICE_TABLES))
    def test_every_catalog_case_resolves(self, provider):
        """Test that every model and level finds a row in every table."""
        for model in ("phi", "gemma:2b", "qwen:4b", "mistral", "llama3:8b",
                      "cc-r1:1.5b", "cc-r1:8b", "cc-r1:14b", "cc-r1:32b", "cc-r1:70b"):
            for performance in ("basic", "standard", "optimal"):
                assert _pick(provider, model, performance).hourly_price > 0


class TestCheapestOffer:
    """Test suite for the cross-provider comparison."""

    def test_cheapest_across_providers(self):
        """Test that the lowest price wins."""
        offers = [_pick(p, "cc-r1:14b") for p in ("gcp", "azure", "aws")]
        assert cheapest_offer(offers).provider == "aws"

    def test_tie_goes_to_earlier_provider(self):
        """Test that equal prices resolve in gcp, azure, aws order."""
        offers = [_pick("aws", "phi", "basic"), _pick("azure", "phi", "basic")]
        assert cheapest_offer(offers).provider == "azure"

    def test_empty(self):
        """Test that an empty list is an error."""
        with pytest.raises(ValueError):
            cheapest_offer([])

    def test_describe(self):
        """Test the offer summary line."""
        offer = InstanceOffer("gcp", "g2-standard-4", 0.71, "us-central1-a", 4, 16, "NVIDIA L4 GPU")
        assert offer.describe() == "g2-standard-4 (4 vCPU, 16GB RAM, NVIDIA L4 GPU, ~$0.71/hour)"
