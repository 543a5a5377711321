"""Error kinds raised by the analysis pipeline.

Each user-facing kind carries a short message the API and CLI show as-is.
"""


class AnalysisError(Exception):
    message = "Analysis failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(detail or self.message)


class DataSourceUnavailable(AnalysisError):
    message = "Analysis service unavailable, please try again"


class BusinessNotFound(DataSourceUnavailable):
    message = "Could not find that business"


class NoPeersFound(AnalysisError):
    message = "No competitors found nearby"


class NoVenuesFound(NoPeersFound):
    message = "Nothing found near this location"


class OnlyNonCompetingVenues(NoPeersFound):
    message = "Found the area but no competitors (only non-competing venues nearby)"


class ClassificationMalformed(AnalysisError):
    message = "Analysis service returned an unusable response, please try again"


class InvariantViolation(AssertionError):
    """Programmer error: a pipeline stage ran before its inputs were ready."""
