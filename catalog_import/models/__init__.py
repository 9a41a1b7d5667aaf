"""Domain models for the product catalog importer."""

from .config_models import BusinessRulesConfig, DatabaseConfig, ImportConfig
from .error_record import ErrorRecord
from .processing_result import ImportSummary, RowOutcome, RowStatus
from .product import Currency, NormalizedProduct
from .row_data import RawRow, RowValidation, ValidationFailure

__all__ = [
    # Configuration models
    "BusinessRulesConfig",
    "DatabaseConfig",
    "ImportConfig",
    # Row / product models
    "Currency",
    "NormalizedProduct",
    "RawRow",
    "RowValidation",
    "ValidationFailure",
    # Result models
    "ErrorRecord",
    "ImportSummary",
    "RowOutcome",
    "RowStatus",
]
