"""Configuration loading for the analytics engine (YAML or JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .errors import ValidationError

DEFAULT_TECHNICIAN_ROLE_CODES = ("technician", "technician_l1", "technician_l2")


@dataclass
class WorkloadStatusConfig:
    underloaded_ratio: float = 0.5
    overloaded_ratio: float = 1.5


@dataclass
class AnalyticsConfig:
    db_url: str = "sqlite:///utilization.db"
    technician_role_codes: Tuple[str, ...] = DEFAULT_TECHNICIAN_ROLE_CODES
    ranking_size: int = 10
    trend_threshold_pct: float = 5.0
    max_workers: int = 4
    workload_status: WorkloadStatusConfig = field(default_factory=WorkloadStatusConfig)


def _read_raw(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        raw = json.loads(text)
    else:
        raw = yaml.safe_load(text)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError(f"Config root must be a mapping: {path}")
    return raw


def config_from_dict(raw: Dict[str, Any]) -> AnalyticsConfig:
    """Build an AnalyticsConfig from a plain mapping, rejecting unknown keys."""
    known = {f.name for f in fields(AnalyticsConfig)}
    unknown = set(raw) - known
    if unknown:
        raise ValidationError(f"Unknown config keys: {sorted(unknown)}")

    values = dict(raw)
    status_raw = values.pop("workload_status", None) or {}
    status_known = {f.name for f in fields(WorkloadStatusConfig)}
    if set(status_raw) - status_known:
        raise ValidationError(f"Unknown workload_status keys: {sorted(set(status_raw) - status_known)}")
    status = WorkloadStatusConfig(**{k: float(v) for k, v in status_raw.items()})

    if "technician_role_codes" in values:
        values["technician_role_codes"] = tuple(str(c) for c in values["technician_role_codes"])

    cfg = AnalyticsConfig(workload_status=status, **values)

    if cfg.ranking_size < 1:
        raise ValidationError("ranking_size must be >= 1")
    if cfg.max_workers < 1:
        raise ValidationError("max_workers must be >= 1")
    if not cfg.technician_role_codes:
        raise ValidationError("technician_role_codes must not be empty")
    return cfg


def load_config(path: str | Path | None = None) -> AnalyticsConfig:
    """
    Load configuration from a YAML or JSON file.

    Args:
        path: Config file path; None returns the defaults

    Returns:
        AnalyticsConfig
    """
    if path is None:
        return AnalyticsConfig()
    return config_from_dict(_read_raw(Path(path)))
