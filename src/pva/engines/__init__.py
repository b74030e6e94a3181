"""Adapters for the external validation engines."""

from __future__ import annotations

from pva.engines.base import (
    BuiltSpec,
    Fingerprint,
    RuleEngine,
    SpecBuilder,
    Violation,
    compute_fingerprint,
)
from pva.engines.spec_builder import OpenApiSpecBuilder
from pva.engines.spectral import SpectralEngine

__all__ = [
    # Base types
    "BuiltSpec",
    "Fingerprint",
    "RuleEngine",
    "SpecBuilder",
    "Violation",
    "compute_fingerprint",
    # Engines
    "OpenApiSpecBuilder",
    "SpectralEngine",
]
