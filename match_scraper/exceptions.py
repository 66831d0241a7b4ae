class MatchScraperError(Exception):
    """Base class for match scraper errors."""


class UnknownCategoryError(MatchScraperError, KeyError):
    """Raised when a category name is not one of the known fields."""

    def __init__(self: "UnknownCategoryError", category: object) -> None:
        super().__init__(f"Unknown category: {category!r}")
        self.category = category


class ConfigurationError(MatchScraperError, ValueError):
    """Raised for malformed recovery or scraper configuration."""


class DocumentError(MatchScraperError):
    """Raised by a document session when the browser collaborator fails."""


class NavigationError(DocumentError):
    """Navigation or reload failed or timed out."""


class EvaluationError(DocumentError):
    """A query function could not be run against the live document."""
