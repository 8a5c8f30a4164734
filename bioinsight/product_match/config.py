"""
Configuration for the Product Match & Recommendation Engine.

Holds the scoring weights and thresholds of every component plus the
vendor alias table used to resolve free-text vendor hints.
Config is declarative JSON - edit the file, not the code.

The weights and thresholds have no documented derivation; they are
tunable defaults, not business rules.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_CONFIG_PATH = Path(__file__).parent / "engine_config.json"


@dataclass
class MatcherSettings:
    """Settings for the catalog matcher."""
    exact_confidence: float = 1.0
    prefix_confidence: float = 0.8
    fuzzy_threshold: float = 0.3
    fuzzy_confidence_cap: float = 0.99
    contains_confidence: float = 0.5


@dataclass
class SimilarityWeights:
    """Weights and firing thresholds for each similarity signal."""
    embedding_weight: float = 0.4
    embedding_threshold: float = 0.7
    spec_weight: float = 0.3
    spec_threshold: float = 0.3
    grade_weight: float = 0.15
    spec_text_weight: float = 0.1
    spec_text_threshold: float = 0.5
    name_weight: float = 0.1
    name_threshold: float = 0.3


@dataclass
class AlternativeSettings:
    """Settings for the alternative finder."""
    candidate_pool_size: int = 50
    min_score: float = 0.2
    default_limit: int = 3


@dataclass
class RecommenderSettings:
    """Settings for the budget / lead-time recommender."""
    price_weight: float = 0.4
    lead_time_weight: float = 0.3
    vendor_weight: float = 0.3
    reference_price: float = 1_000_000
    reference_lead_time_days: int = 30
    preferred_vendor_score: float = 100
    default_vendor_score: float = 50
    unknown_score: float = 50  # Price or lead time not quoted
    good_price_ratio: float = 0.8
    fast_delivery_ratio: float = 0.7
    default_limit: int = 10


@dataclass
class Config:
    """Full configuration for the engine."""
    matcher: MatcherSettings = field(default_factory=MatcherSettings)
    similarity: SimilarityWeights = field(default_factory=SimilarityWeights)
    alternatives: AlternativeSettings = field(default_factory=AlternativeSettings)
    recommender: RecommenderSettings = field(default_factory=RecommenderSettings)
    vendor_aliases: dict[str, list[str]] = field(default_factory=dict)

    # Reverse lookup: raw name -> normalized key (built on load)
    _vendor_lookup: dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        """Build reverse lookup for vendor normalization."""
        self._build_vendor_lookup()

    def _build_vendor_lookup(self):
        """Create mapping from all alias variations to normalized key."""
        self._vendor_lookup = {}
        for normalized_key, aliases in self.vendor_aliases.items():
            self._vendor_lookup[normalized_key.lower()] = normalized_key
            for alias in aliases:
                self._vendor_lookup[alias.lower().strip()] = normalized_key


def _section(cls, data: dict):
    """Build a settings dataclass from a JSON section, ignoring unknown keys."""
    known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
    return cls(**known)


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to engine_config.json (default: the module's copy)

    Returns:
        Config with component settings and vendor aliases
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    with open(path, "r") as f:
        data = json.load(f)

    return Config(
        matcher=_section(MatcherSettings, data.get("matcher", {})),
        similarity=_section(SimilarityWeights, data.get("similarity", {})),
        alternatives=_section(AlternativeSettings, data.get("alternatives", {})),
        recommender=_section(RecommenderSettings, data.get("recommender", {})),
        vendor_aliases=data.get("vendor_aliases", {}),
    )


def normalize_vendor(raw_name: str, config: Config) -> Optional[str]:
    """
    Normalize a vendor name from source data to canonical key.

    Args:
        raw_name: Vendor name as typed on a purchase row (e.g., "Thermo Fisher Scientific")
        config: Loaded configuration with vendor_aliases

    Returns:
        Normalized key (e.g., "thermofisher") or None if not found
    """
    if not raw_name:
        return None
    return config._vendor_lookup.get(raw_name.lower().strip())


def vendor_names(raw_name: str, config: Config) -> frozenset[str]:
    """
    Every name a vendor hint may appear under on offers.

    A hint found in the alias table expands to its canonical key and all of
    that key's aliases; the hint itself is always included.

    Args:
        raw_name: Vendor hint as typed on a purchase row (e.g., "Sigma-Aldrich")
        config: Loaded configuration with vendor_aliases

    Returns:
        Lowercased names, empty if the hint is blank
    """
    if not raw_name or not raw_name.strip():
        return frozenset()
    names = {raw_name.lower().strip()}
    key = normalize_vendor(raw_name, config)
    if key is not None:
        names.add(key.lower())
        names.update(alias.lower().strip() for alias in config.vendor_aliases.get(key, []))
    return frozenset(names)
