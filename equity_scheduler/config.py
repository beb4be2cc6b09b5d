"""Configuration loading (YAML or JSON)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from equity_scheduler.domain.models import WorkingHoursPolicy
from equity_scheduler.services.holidays import DEFAULT_TIMEOUT_SECONDS, NAGER_API_BASE
from equity_scheduler.services.policies import policy_from_dict
from equity_scheduler.services.retry import RetryPolicy
from equity_scheduler.services.timeplan import get_zone


@dataclass
class HolidaySourceSettings:
    base_url: str = NAGER_API_BASE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    include_regional: bool = False


@dataclass
class CacheSettings:
    ttl_days: float = 7
    db_url: Optional[str] = None  # None keeps the cache in memory

    @property
    def ttl(self) -> timedelta:
        return timedelta(days=self.ttl_days)


@dataclass
class HeatmapSettings:
    anchor_timezone: str = "UTC"
    top_n: int = 3
    max_workers: int = 1


@dataclass
class EngineConfig:
    holiday_source: HolidaySourceSettings = field(default_factory=HolidaySourceSettings)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    cache: CacheSettings = field(default_factory=CacheSettings)
    heatmap: HeatmapSettings = field(default_factory=HeatmapSettings)
    prefetch_workers: int = 4
    log_level: str = "INFO"
    country_defaults: Dict[str, WorkingHoursPolicy] = field(default_factory=dict)


def _read_raw(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported config format: {path.suffix} (use .yaml, .yml or .json)")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return data


def config_from_dict(data: Mapping[str, Any]) -> EngineConfig:
    """Build and validate an EngineConfig from a plain mapping."""
    source = data.get("holiday_source") or {}
    retry = data.get("retry") or {}
    cache = data.get("cache") or {}
    heatmap = data.get("heatmap") or {}
    prefetch = data.get("prefetch") or {}

    cfg = EngineConfig(
        holiday_source=HolidaySourceSettings(
            base_url=str(source.get("base_url", NAGER_API_BASE)),
            timeout_seconds=float(source.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
            include_regional=bool(source.get("include_regional", False)),
        ),
        retry=RetryPolicy(
            max_attempts=int(retry.get("max_attempts", 3)),
            base_delay=float(retry.get("base_delay_seconds", 1.0)),
            multiplier=float(retry.get("multiplier", 2.0)),
        ),
        cache=CacheSettings(
            ttl_days=float(cache.get("ttl_days", 7)),
            db_url=cache.get("db_url"),
        ),
        heatmap=HeatmapSettings(
            anchor_timezone=str(heatmap.get("anchor_timezone", "UTC")),
            top_n=int(heatmap.get("top_n", 3)),
            max_workers=int(heatmap.get("max_workers", 1)),
        ),
        prefetch_workers=int(prefetch.get("max_workers", 4)),
        log_level=str(data.get("log_level", "INFO")).upper(),
        country_defaults={
            str(code).upper(): policy_from_dict(fields or {}, country_code=str(code), is_default=True)
            for code, fields in (data.get("country_defaults") or {}).items()
        },
    )

    get_zone(cfg.heatmap.anchor_timezone)
    if cfg.heatmap.top_n < 0:
        raise ValueError("heatmap.top_n must not be negative")
    if cfg.cache.ttl_days <= 0:
        raise ValueError("cache.ttl_days must be positive")
    return cfg


def load_config(path: str | Path | None = None) -> EngineConfig:
    """
    Load engine configuration.

    Args:
        path: YAML or JSON file; None returns the built-in defaults

    Returns:
        EngineConfig
    """
    if path is None:
        return EngineConfig()
    return config_from_dict(_read_raw(Path(path)))
