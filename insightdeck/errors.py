"""Failures that abort a whole parse. Row-level problems never raise."""


class InsightDeckError(ValueError):
    """Base class for parse failures surfaced to the caller."""


class EmptyInputError(InsightDeckError):
    """The file had no header or no data rows."""


class NoValidRecordsError(InsightDeckError):
    """Every row was dropped by the extraction rules."""


class UnreadableInputError(InsightDeckError):
    """The CSV reader could not split the file into rows."""
