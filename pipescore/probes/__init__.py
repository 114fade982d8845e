"""Weighted, independent CI/CD maturity probes."""

from .base import Category, ProbeDefinition, ProbeRegistry
from .registry import build_registry, default_probes

__all__ = ["Category", "ProbeDefinition", "ProbeRegistry", "build_registry", "default_probes"]
