from __future__ import annotations

import os
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from . import rules

ENV_BUSINESS_UNITS = "INSIGHTDECK_BUSINESS_UNITS"
ENV_FALLBACK_UNIT = "INSIGHTDECK_FALLBACK_UNIT"


class ExtractorConfig(BaseModel):
    """Tunables for one report layout. Read-only and safe to share."""

    model_config = ConfigDict(frozen=True)

    business_units: Tuple[str, ...] = Field(default=rules.BUSINESS_UNITS)
    fallback_unit: str = rules.FALLBACK_UNIT
    concept_fields: Tuple[str, ...] = rules.CONCEPT_FIELDS
    category_fields: Tuple[str, ...] = rules.CATEGORY_FIELDS
    impact_fields: Tuple[str, ...] = rules.IMPACT_FIELDS
    total_field: str = rules.TOTAL_FIELD


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in value.split(",") if p.strip())


def load_config(environ: Optional[Mapping[str, str]] = None) -> ExtractorConfig:
    """
    Build the config from defaults, overridden by environment variables.

    - INSIGHTDECK_BUSINESS_UNITS: comma-separated vocabulary, in priority order
    - INSIGHTDECK_FALLBACK_UNIT: segment for money no unit claimed
    """
    env = os.environ if environ is None else environ
    overrides = {}

    units = env.get(ENV_BUSINESS_UNITS)
    if units and _split_list(units):
        overrides["business_units"] = _split_list(units)

    fallback = (env.get(ENV_FALLBACK_UNIT) or "").strip()
    if fallback:
        overrides["fallback_unit"] = fallback

    return ExtractorConfig(**overrides)
