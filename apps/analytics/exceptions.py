"""
Domain exceptions for analytics app.

These are raised by AnalyticsQueries for invalid query input and are
mapped to HTTP 400 responses in the views.

Exception Hierarchy:
    AnalyticsServiceError (base)
    ├── InvalidDateRangeError
    └── InvalidLimitError
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics errors.

        try:
            data = AnalyticsQueries.dashboard(start_date, end_date)
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidDateRangeError(AnalyticsServiceError):
    """Raised when start_date is after end_date."""

    pass


class InvalidLimitError(AnalyticsServiceError):
    """Raised when a result limit is out of the allowed range."""

    pass
