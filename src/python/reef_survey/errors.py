"""
Exceptions and warnings raised on bad survey data.

All errors subclass ValueError so callers that already guard config and
loader problems with `except ValueError` keep working.
"""

from __future__ import annotations


class SurveyDataError(ValueError):
    """Base class for survey data problems that abort the run."""


class MissingSheetError(SurveyDataError):
    def __init__(self, sheet: str, workbook, available: list[str]):
        self.sheet = sheet
        self.available = list(available)
        super().__init__(
            f"sheet '{sheet}' not found in {workbook} (available: {', '.join(self.available) or 'none'})"
        )


class MissingColumnError(SurveyDataError):
    def __init__(self, sheet: str, missing: list[str]):
        self.sheet = sheet
        self.missing = list(missing)
        super().__init__(f"sheet '{sheet}': missing required column(s): {', '.join(self.missing)}")


class UnmappedCodeError(SurveyDataError):
    def __init__(self, table: str, codes: list[str], source: str = "codes.yml", missing: str = "class"):
        self.table = table
        self.codes = sorted(codes)
        super().__init__(f"{source}:{table}: no {missing} for code(s): {', '.join(self.codes)}")


class MetadataIntegrityError(SurveyDataError):
    """A code resolves to zero or several metadata rows."""


class CoverTotalError(SurveyDataError):
    """Category totals within a grouping key do not reconstruct the expected total."""


class UnmappedCodeWarning(UserWarning):
    pass
