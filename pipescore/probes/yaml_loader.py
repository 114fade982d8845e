"""Extra keyword probes declared in the YAML config (`extra_probes:`)."""

from __future__ import annotations

from typing import Any

from .base import Category, ProbeDefinition
from .pipeline_content import keyword_probe


def probe_from_dict(entry: Any) -> ProbeDefinition:
    """
    Build a pipeline-content probe from a config entry:

        - id: terraform_plan
          points: 5
          category: advanced
          label: Terraform plan in CI
          keywords: [terraform plan, tflint]
    """
    if not isinstance(entry, dict):
        raise ValueError(f"extra probe must be a mapping, got {type(entry).__name__}")
    missing = [k for k in ("id", "points", "category", "keywords") if k not in entry]
    if missing:
        raise ValueError(f"extra probe {entry.get('id', '?')}: missing {', '.join(missing)}")
    keywords = entry["keywords"]
    if isinstance(keywords, str):
        keywords = [keywords]
    if not isinstance(keywords, list) or not keywords or not all(isinstance(k, str) and k for k in keywords):
        raise ValueError(f"extra probe {entry['id']}: keywords must be a non-empty list of strings")
    try:
        category = Category(str(entry["category"]).lower())
    except ValueError:
        raise ValueError(
            f"extra probe {entry['id']}: unknown category {entry['category']!r} "
            f"(expected {', '.join(c.value for c in Category)})"
        ) from None
    label = str(entry.get("label") or entry["id"])
    return ProbeDefinition(
        id=str(entry["id"]),
        points=entry["points"],
        category=category,
        label=label,
        evaluate=keyword_probe(tuple(keywords), label[0].lower() + label[1:]),
        description=str(entry.get("description") or f"Any of {', '.join(keywords)} in a workflow."),
        fix=str(entry.get("fix", "")),
    )


def load_extra_probes(entries: Any) -> list[ProbeDefinition]:
    """Parse the `extra_probes` list. Raises ValueError on the first bad entry."""
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ValueError("extra_probes must be a list")
    return [probe_from_dict(e) for e in entries]
