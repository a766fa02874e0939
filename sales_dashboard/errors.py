"""Exceptions raised by the sales dashboard pipeline."""

from .config import EXPECTED_SHEETS


class SalesDashboardError(Exception):
    """Base class for all package errors."""


class UnreadableFileError(SalesDashboardError):
    """The input could not be decoded as a spreadsheet workbook."""

    def __init__(self, detail: str = ""):
        message = "File might be corrupted or in an unexpected format."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class NoUsableDataError(SalesDashboardError):
    """None of the expected sheets produced any records."""

    def __init__(self, sheets: tuple[str, ...] = EXPECTED_SHEETS):
        self.sheets = sheets
        names = ", ".join(f'"{s}"' for s in sheets)
        super().__init__(
            f"No data found. Ensure at least one of {names} sheets are present."
        )


class InsightsUnavailableError(SalesDashboardError):
    """The AI summarisation service could not produce a result."""
