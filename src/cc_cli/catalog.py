"""Known models and their size metadata."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from cc_cli.errors import UnknownModelError

Quantization = Literal["none", "int8", "int4"]
QUANTIZATIONS: tuple[str, ...] = ("none", "int8", "int4")

CC_MODELS: tuple[str, ...] = ("cc-r1:1.5b", "cc-r1:8b", "cc-r1:14b", "cc-r1:32b", "cc-r1:70b")
ALTERNATIVE_MODELS: tuple[str, ...] = ("phi", "mistral", "gemma:2b", "llama3:8b", "qwen:4b")
ALL_MODELS: tuple[str, ...] = CC_MODELS + ALTERNATIVE_MODELS

CC_MODEL_PREFIX = "cc-r1:"


@dataclass(frozen=True, slots=True)
class ModelParameters:
    """Size metadata for a model.

    Attributes:
        param_count: Parameters in billions
        context_length: Context window in tokens
        quantization: Weight quantization ("none", "int8" or "int4")
        model_type: Architecture family, informational only
    """

    param_count: float
    context_length: int
    quantization: Quantization = "none"
    model_type: str = "decoder-only"

    def with_quantization(self, quantization: str) -> "ModelParameters":
        if quantization not in QUANTIZATIONS:
            raise ValueError(f"Invalid quantization: {quantization}")
        return replace(self, quantization=quantization)  # type: ignore[arg-type]


MODEL_PARAMETERS: dict[str, ModelParameters] = {
    "cc-r1:1.5b": ModelParameters(1.5, 2048),
    "cc-r1:8b": ModelParameters(8, 8192),
    "cc-r1:14b": ModelParameters(14, 8192),
    "cc-r1:32b": ModelParameters(32, 8192),
    "cc-r1:70b": ModelParameters(70, 12288),
    "phi": ModelParameters(2.7, 2048),
    "mistral": ModelParameters(7, 8192),
    "gemma:2b": ModelParameters(2, 8192),
    "llama3:8b": ModelParameters(8, 8192),
    "qwen:4b": ModelParameters(4, 8192),
}

# (model, one-line description) shown by `cc recommend`
RECOMMENDED_MODELS: tuple[tuple[str, str], ...] = (
    ("phi", "Microsoft's 2.7B model, small but powerful (~1.7GB, needs ~10GB RAM)"),
    ("mistral", "7B model with excellent performance (~4.1GB, needs ~14GB RAM)"),
    ("gemma:2b", "Google's 2B model, good for basic tasks (~1.8GB, needs ~8GB RAM)"),
    ("llama3:8b", "Meta's 8B model, very capable (~4.7GB, needs ~16GB RAM)"),
    ("qwen:4b", "4B model with good performance (~2.9GB, needs ~10GB RAM)"),
)


def is_known_model(model: str) -> bool:
    return model in MODEL_PARAMETERS


def looks_like_model(token: str) -> bool:
    """Whether the first argument of ``cc run`` names a model rather than a prompt."""
    return token.startswith(CC_MODEL_PREFIX) or token in ALTERNATIVE_MODELS


def get_model_parameters(model: str) -> ModelParameters:
    """Look up size metadata for a catalog model.

    Raises:
        UnknownModelError: If the model isn't in the catalog
    """
    try:
        return MODEL_PARAMETERS[model]
    except KeyError:
        raise UnknownModelError(model) from None
