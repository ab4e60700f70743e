import pytest

from insightdeck.text import normalize_key, repair_text


@pytest.mark.parametrize("broken,fixed", [
    ("LogÃ\xadstica", "Logística"),
    ("CrÃ©dito", "Crédito"),
    ("DescripciÃ³n", "Descripción"),
    ("CompaÃ±ia", "Compañia"),
    ("Ã\x81rea", "Área"),
    ("TesorerÃa", "Tesorería"),
])
def test_repair_text_fixes_mojibake(broken, fixed):
    assert repair_text(broken) == fixed


def test_repair_text_strips_bom_quotes_and_whitespace():
    assert repair_text('\ufeff"Concepto"') == "Concepto"
    assert repair_text('  Liverpool  ') == "Liverpool"
    assert repair_text('"Arco Norte') == "Arco Norte"


def test_repair_text_is_total():
    assert repair_text(None) == ""
    assert repair_text("") == ""
    assert repair_text(1500) == "1500"


@pytest.mark.parametrize("value", ["Renta oficina", "Total Gastos", "ER", "mmm"])
def test_repair_text_idempotent_on_clean_input(value):
    assert repair_text(repair_text(value)) == repair_text(value)


@pytest.mark.parametrize("a,b", [
    ("Logística", "LOGISTICA"),
    ("Tesorería", "tesoreria"),
    ("Servicios Compartidos", "servicios_compartidos"),
    ("Impacto BG/ER", "impacto bg-er"),
    ("Descripción", "descripcion"),
    ("Compañía", "Compania"),
])
def test_normalize_key_ignores_accents_case_and_punctuation(a, b):
    assert normalize_key(a) == normalize_key(b)


def test_normalize_key_output_is_ascii_alphanumeric():
    assert normalize_key(" Crédito (MXN) ") == "creditomxn"
    assert normalize_key(None) == ""
