"""Configuration loading and management for Collab Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in the dataclasses below)
    2. Global config (~/.collab-insight.toml)
    3. Project config (./collab-insight.toml)
    4. Explicit config file
    5. Environment variables (COLLAB_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(verbose=True, workers=2)
    >>> config.verbosity
    'verbose'
    >>> config.cqi.weights.effort
    0.4
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]


def _check_unit(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be between 0.0 and 1.0")


@dataclass(frozen=True)
class ChunkingConfig:
    """Bundling and splitting limits for change units.

    Attributes:
        max_lines_per_chunk: Split commits larger than this (never mid-file)
        small_commit_threshold: Commits at or below this may be bundled
        bundle_window_minutes: Max gap between bundled commits by one author
        detect_renames: Carry git rename detection into chunk flags
        detect_formatting: Carry format-only / mass-reformat flags
        skip_path_patterns: Substrings marking generated/dependency paths
    """

    max_lines_per_chunk: int = 500
    small_commit_threshold: int = 30
    bundle_window_minutes: int = 60
    detect_renames: bool = True
    detect_formatting: bool = True
    skip_path_patterns: tuple[str, ...] = (
        "node_modules/", "vendor/", "target/", "build/", ".gradle/",
        "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
        ".min.js", ".min.css", ".map",
        ".class", ".jar", ".war",
        ".png", ".jpg", ".jpeg", ".gif", ".ico", ".svg",
        ".woff", ".woff2", ".ttf", ".eot",
    )

    def __post_init__(self) -> None:
        if self.max_lines_per_chunk < 1:
            raise ValueError("max_lines_per_chunk must be at least 1")
        if self.small_commit_threshold < 0:
            raise ValueError("small_commit_threshold must be non-negative")
        if self.bundle_window_minutes < 0:
            raise ValueError("bundle_window_minutes must be non-negative")


@dataclass(frozen=True)
class FilterConfig:
    """Pre-filter thresholds.

    Attributes:
        small_commit_lines: Trivial-message commits at or below this are
            always excluded as "small trivial"
        rename_flag_max_lines: Rename-flagged chunks up to this are rename-only
        rename_message_max_lines: "rename"/"move" messages up to this are rename-only
        format_max_avg_lines: Format-message chunks below this avg are format-only
        mass_reformat_min_files: File count for mass reformat
        mass_reformat_max_avg_lines: Avg lines/file for mass reformat
        copy_paste_min_lines: Copy-paste suspicion needs more lines than this
        copy_paste_max_novelty: ... and novelty below this
        copy_paste_max_complexity: ... and complexity below this
        copy_paste_weight: Weight multiplier for suspected copy-paste
    """

    small_commit_lines: int = 5
    rename_flag_max_lines: int = 2
    rename_message_max_lines: int = 5
    format_max_avg_lines: float = 10.0
    mass_reformat_min_files: int = 10
    mass_reformat_max_avg_lines: float = 5.0
    copy_paste_min_lines: int = 100
    copy_paste_max_novelty: float = 2.0
    copy_paste_max_complexity: float = 3.0
    copy_paste_weight: float = 0.1

    def __post_init__(self) -> None:
        _check_unit("copy_paste_weight", self.copy_paste_weight)
        if self.mass_reformat_min_files < 1:
            raise ValueError("mass_reformat_min_files must be at least 1")


@dataclass(frozen=True)
class JudgeConfig:
    """External effort judge settings (OpenAI-compatible chat endpoint)."""

    enabled: bool = True
    model: str = "gpt-4o-mini"
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: float = 0.0
    max_diff_chars: int = 10000
    confidence_threshold: float = 0.7
    max_concurrency: int = 4
    timeout_seconds: int = 60

    def __post_init__(self) -> None:
        _check_unit("confidence_threshold", self.confidence_threshold)
        if self.max_diff_chars < 1:
            raise ValueError("max_diff_chars must be at least 1")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.timeout_seconds < 1:
            raise ValueError("timeout_seconds must be at least 1")


@dataclass(frozen=True)
class CqiWeights:
    """Component weights for the base score (must sum to 1.0)."""

    effort: float = 0.40
    loc: float = 0.25
    temporal: float = 0.20
    ownership: float = 0.15

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_unit(f"weights.{f.name}", getattr(self, f.name))
        total = self.effort + self.loc + self.temporal + self.ownership
        if abs(total - 1.0) > 0.001:
            raise ValueError(f"CQI weights must sum to 1.0, got {total:.3f}")


@dataclass(frozen=True)
class CqiThresholds:
    """Ratios above which a penalty fires."""

    solo_development: float = 0.85
    severe_imbalance: float = 0.70
    high_trivial: float = 0.50
    low_confidence: float = 0.40
    late_work: float = 0.50
    # A rating below this confidence counts as low-confidence
    low_confidence_value: float = 0.6
    # Late period starts at this fraction of the project duration
    late_period_start: float = 0.8

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_unit(f"thresholds.{f.name}", getattr(self, f.name))
        if self.severe_imbalance > self.solo_development:
            raise ValueError("severe_imbalance must not exceed solo_development")


@dataclass(frozen=True)
class CqiPenalties:
    """Multipliers applied when a penalty fires."""

    solo_development: float = 0.25
    severe_imbalance: float = 0.70
    high_trivial: float = 0.85
    low_confidence: float = 0.90
    late_work: float = 0.85

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_unit(f"penalties.{f.name}", getattr(self, f.name))


@dataclass(frozen=True)
class CqiConfig:
    """CQI formula parameters."""

    weights: CqiWeights = field(default_factory=CqiWeights)
    thresholds: CqiThresholds = field(default_factory=CqiThresholds)
    penalties: CqiPenalties = field(default_factory=CqiPenalties)
    penalties_enabled: bool = True
    week_days: int = 7
    ownership_min_chunks: int = 3
    ownership_team_cap: int = 4
    neutral_temporal_score: float = 50.0
    neutral_ownership_score: float = 75.0

    def __post_init__(self) -> None:
        if self.week_days < 1:
            raise ValueError("week_days must be at least 1")
        if self.ownership_min_chunks < 1:
            raise ValueError("ownership_min_chunks must be at least 1")
        if self.ownership_team_cap < 1:
            raise ValueError("ownership_team_cap must be at least 1")


@dataclass(frozen=True)
class PairingConfig:
    """Pairing-signal weights and thresholds.

    The 0.78/0.22 split and the 0.30/0.15 thresholds are empirical
    defaults, kept configurable.
    """

    alternation_weight: float = 0.78
    co_editing_weight: float = 0.22
    alternation_threshold: float = 0.30
    co_editing_threshold: float = 0.15
    weak_signal_multiplier: float = 0.8
    session_minutes: int = 90

    def __post_init__(self) -> None:
        for name in (
            "alternation_weight",
            "co_editing_weight",
            "alternation_threshold",
            "co_editing_threshold",
            "weak_signal_multiplier",
        ):
            _check_unit(name, getattr(self, name))
        if abs(self.alternation_weight + self.co_editing_weight - 1.0) > 0.001:
            raise ValueError("Pairing weights must sum to 1.0")
        if self.session_minutes < 1:
            raise ValueError("session_minutes must be at least 1")


@dataclass(frozen=True)
class AnalysisConfig:
    """Top-level configuration for one analysis run.

    Attributes:
        workers: Teams analysed in parallel by batch runs
        verbosity: Logging verbosity level
        institutional_domains: Email domains whose sub-domains are aliases
            (x@in.tum.de and x@mytum.de both normalise to x@tum.de)
    """

    workers: int = 2
    verbosity: Verbosity = "normal"
    institutional_domains: tuple[str, ...] = ("tum.de",)

    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    judge: JudgeConfig = field(default_factory=JudgeConfig)
    cqi: CqiConfig = field(default_factory=CqiConfig)
    pairing: PairingConfig = field(default_factory=PairingConfig)

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be quiet, normal or verbose")

_SECTIONS: dict[str, type] = {
    "chunking": ChunkingConfig,
    "filter": FilterConfig,
    "judge": JudgeConfig,
    "pairing": PairingConfig,
}


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). A
            ``judge_enabled=False`` override switches the judge off.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file or value is invalid
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".collab-insight.toml"
    if global_config.exists():
        _merge(merged, _load_toml_file(global_config))

    project_config = Path.cwd() / "collab-insight.toml"
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]
    if "judge_enabled" in overrides:
        merged.setdefault("judge", {})["enabled"] = overrides.pop("judge_enabled")
    if "model" in overrides:
        merged.setdefault("judge", {})["model"] = overrides.pop("model")

    merged.update(overrides)

    try:
        return _build_config(merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Shallow-merge, descending one level into section tables."""
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key].update(value)
        elif isinstance(value, dict):
            target[key] = dict(value)
        else:
            target[key] = value


def _build_config(merged: dict[str, Any]) -> AnalysisConfig:
    kwargs: dict[str, Any] = {}
    for key, value in merged.items():
        if key in _SECTIONS and isinstance(value, dict):
            kwargs[key] = _SECTIONS[key](**_tuplify(value))
        elif key == "cqi" and isinstance(value, dict):
            kwargs[key] = _build_cqi(value)
        elif isinstance(value, list):
            kwargs[key] = tuple(value)
        else:
            kwargs[key] = value
    return AnalysisConfig(**kwargs)


def _build_cqi(table: dict[str, Any]) -> CqiConfig:
    table = dict(table)
    nested = {
        "weights": CqiWeights,
        "thresholds": CqiThresholds,
        "penalties": CqiPenalties,
    }
    for key, cls in nested.items():
        if isinstance(table.get(key), dict):
            table[key] = cls(**table[key])
    return CqiConfig(**table)


def _tuplify(table: dict[str, Any]) -> dict[str, Any]:
    return {k: tuple(v) if isinstance(v, list) else v for k, v in table.items()}


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from COLLAB_* environment variables.

    Supported environment variables:
        COLLAB_WORKERS: int
        COLLAB_VERBOSITY: quiet/normal/verbose
        COLLAB_JUDGE_ENABLED: bool
        COLLAB_JUDGE_MODEL: str
        COLLAB_JUDGE_BASE_URL: str
        COLLAB_JUDGE_API_KEY: str (falls back to OPENAI_API_KEY)
        COLLAB_JUDGE_MAX_CONCURRENCY: int
        COLLAB_JUDGE_CONFIDENCE_THRESHOLD: float
        COLLAB_JUDGE_TIMEOUT_SECONDS: int

    Returns:
        Dict ready for merging into the config tables.
    """
    result: dict[str, Any] = {}

    top_hints = get_type_hints(AnalysisConfig)
    for name in ("workers", "verbosity"):
        raw = os.environ.get(f"COLLAB_{name.upper()}")
        if raw is not None:
            result[name] = _parse_env_value(raw, top_hints[name], f"COLLAB_{name.upper()}")

    judge_hints = get_type_hints(JudgeConfig)
    judge: dict[str, Any] = {}
    for f in fields(JudgeConfig):
        env_key = f"COLLAB_JUDGE_{f.name.upper()}"
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        parsed = _parse_env_value(raw, judge_hints[f.name], env_key)
        if parsed is not None:
            judge[f.name] = parsed
    if "api_key" not in judge and os.environ.get("OPENAI_API_KEY"):
        judge["api_key"] = os.environ["OPENAI_API_KEY"]
    if judge:
        result["judge"] = judge

    return result


def _parse_env_value(value: str, type_hint: Any, env_key: str) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        InvalidConfigError: If value can't be parsed to expected type
    """
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none = [t for t in args if t is not type(None)]
        if non_none:
            type_hint = non_none[0]

    try:
        if type_hint is bool:
            lower = value.lower()
            if lower in ("true", "1", "yes", "on"):
                return True
            if lower in ("false", "0", "no", "off"):
                return False
            raise ValueError(f"expected true/false, got '{value}'")
        if type_hint is int:
            return int(value)
        if type_hint is float:
            return float(value)
    except ValueError as e:
        raise InvalidConfigError(env_key, value, str(e))

    return value


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If TOML parsing fails
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}")
