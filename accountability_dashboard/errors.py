"""Exception types raised by the reporting package."""


class DashboardError(Exception):
    """Base class for all reporting errors."""


class ValidationError(DashboardError):
    """A form or registry record is missing required fields or is inconsistent.

    The message is user-facing (Portuguese) and is shown as-is by the UI.
    """


class ReadOnlyYearError(DashboardError):
    """A mutation was attempted while a historical year is selected."""

    def __init__(self, year: int):
        super().__init__(f"O ano {year} é histórico e está disponível apenas para leitura.")
        self.year = year


class UnknownYearError(DashboardError):
    """The requested fiscal year is not one of the selectable years."""

    def __init__(self, year: int):
        super().__init__(f"Ano {year} não está disponível para seleção.")
        self.year = year


class NotFoundError(DashboardError):
    """A referenced sector, action or delivery does not exist."""
