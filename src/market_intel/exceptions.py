"""Custom exceptions for the market intelligence dashboard.

Fetch-layer errors never escape their accessor; they exist so parsing
code can signal a bad payload and let the accessor pick its fallback.
"""


class DashboardError(Exception):
    """Base exception for all dashboard errors."""


class UpstreamDataError(DashboardError):
    """Raised when an upstream payload is missing fields or holds non-numeric values."""


class AnalysisUnavailableError(DashboardError):
    """Raised when the generative-analysis provider fails (quota, auth, network)."""
