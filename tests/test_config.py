from insightdeck.config import ExtractorConfig, load_config
from insightdeck.rules import BUSINESS_UNITS, FALLBACK_UNIT


def test_defaults():
    cfg = load_config({})
    assert cfg.business_units == BUSINESS_UNITS
    assert cfg.fallback_unit == FALLBACK_UNIT


def test_environment_overrides():
    cfg = load_config({
        "INSIGHTDECK_BUSINESS_UNITS": "Norte, Sur ,,Centro",
        "INSIGHTDECK_FALLBACK_UNIT": " Centro ",
    })
    assert cfg.business_units == ("Norte", "Sur", "Centro")
    assert cfg.fallback_unit == "Centro"


def test_blank_overrides_are_ignored():
    cfg = load_config({"INSIGHTDECK_BUSINESS_UNITS": " , ", "INSIGHTDECK_FALLBACK_UNIT": ""})
    assert cfg == ExtractorConfig()
