"""Scheduling-equity engine for meetings across timezones.

Modules:
- config: load and validate configuration (JSON or YAML)
- errors: error taxonomy
- domain: value types and the holiday cache store
- services.timeplan: UTC to local wall-clock conversion
- services.policies: working-hours policy resolution
- services.holidays: national holiday cache with retry and fallback
- services.classifier: per-participant comfort status
- services.scoring: equity score aggregation
- engine.heatmap: 24-hour scan and ranked suggestions
- engine.orchestrator: end-to-end facade
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "errors",
    "domain",
    "services",
    "engine",
    "io",
    "cli",
]
