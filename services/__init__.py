# ===== SERVICES INTEGRATION LAYER =====
"""
Shared service layer for the CenterScope backend.

Holds the exception taxonomy used by the import pipeline, the geocoding
adapter and the census demographics aggregator. Row-level errors are
recovered by the import reconciler; only CSVParseError aborts an import.
"""


# =============================================================================
# SERVICE INTEGRATION EXCEPTIONS
# =============================================================================

class ServiceIntegrationError(Exception):
    """Base exception for service integration errors."""
    pass


class RowValidationError(ServiceIntegrationError):
    """A CSV row is missing a required value; the row is skipped and counted."""
    pass


class EnrichmentError(ServiceIntegrationError):
    """Raised when a geocoding or census lookup fails."""
    pass


class PartialDataError(EnrichmentError):
    """Raised when a census area yields no usable block groups."""
    pass


class StorageError(ServiceIntegrationError):
    """Raised when a persistence operation fails for a row."""
    pass


class CSVParseError(ServiceIntegrationError):
    """
    Raised when the CSV file itself cannot be parsed.

    This is the only error that aborts an import as a whole.
    """
    pass


# =============================================================================
# EXPORT FOR EASY IMPORTS
# =============================================================================

__all__ = [
    'ServiceIntegrationError',
    'RowValidationError',
    'EnrichmentError',
    'PartialDataError',
    'StorageError',
    'CSVParseError',
]
