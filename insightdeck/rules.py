"""
Deterministic extraction rules.

Defaults for the business-unit vocabulary, sentinels and field synonyms live
here so that the matching logic never hides them as literals. Everything in
this file can be overridden through ``ExtractorConfig``.
"""

# Business-unit column names recognized in the report header, in priority
# order. Accent variants are listed as exported by the source workbooks.
BUSINESS_UNITS = (
    "Liverpool",
    "Boutiques",
    "Automotriz",
    "Suburbia",
    "Galerias",
    "Crédito",
    "Seguros",
    "Servicios Compartidos",
    "Financiera",
    "Logistica",
    "Logística",
    "Tesoreria",
    "Tesorería",
    "Inmobiliaria",
    "Sfera",
    "Arco Norte",
)

# Segment used when a row carries money but no unit claimed it.
FALLBACK_UNIT = "Liverpool"

UNATTRIBUTED = "N/A"
UNCLASSIFIED = "-"
# Category values collapsed into UNCLASSIFIED.
DEGENERATE_CATEGORIES = ("mmm", UNATTRIBUTED)
# Hidden from the category selector, still valid on records.
HIDDEN_CATEGORIES = (UNATTRIBUTED, UNCLASSIFIED)

CONCEPT_FIELDS = ("asunto", "descripcion", "concepto")
CATEGORY_FIELDS = ("tipo", "categoria")
IMPACT_FIELDS = ("impacto", "impacto bg/er")
TOTAL_FIELD = "total"

NO_DESCRIPTION = ("Sin descripción",)
SUMMARY_PREFIXES = ("total", "suma")
CREDIT_NOTE_PREFIX = "nota"
CREDIT_NOTE_MARKERS = ("credito", "crédito")

# Latin-1-as-UTF-8 sequences, applied in order. The lone "Ã" goes last: it
# covers "Ã\xad" (í) when the soft hyphen was dropped on the way in.
MOJIBAKE = (
    ("Ã¡", "á"),
    ("Ã©", "é"),
    ("Ã\xad", "í"),
    ("Ã³", "ó"),
    ("Ãº", "ú"),
    ("Ã¼", "ü"),
    ("Ã±", "ñ"),
    ("Ã\x81", "Á"),
    ("Ã\x89", "É"),
    ("Ã\x8d", "Í"),
    ("Ã\x93", "Ó"),
    ("Ã\x9a", "Ú"),
    ("Ã\x9c", "Ü"),
    ("Ã\x91", "Ñ"),
    ("ÃÑ", "Ñ"),
    ("Ã", "í"),
)

BOM = "\ufeff"

SOURCE_ENCODINGS = ("utf_8", "latin_1", "cp1252")
FALLBACK_ENCODING = "latin_1"
SNIFF_DELIMITERS = [",", ";", "\t", "|"]
DEFAULT_DELIMITER = ","

# Segment filter threshold used by the dashboard.
SEGMENT_EPSILON = 0.001
