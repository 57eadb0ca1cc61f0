"""Public interface for the ``statement_ingest`` package.

Only symbol re-exports live here; there is no runtime logic.
"""

from .api import (
    IngestResult,
    detect_duplicates,
    generate_csv_template,
    parse_and_categorize_csv,
    parse_csv,
    parse_csv_file,
    read_csv_rows,
)
from .bank_formats import BANK_FORMATS, UNKNOWN_FORMAT, BankFormatDescriptor, get_bank_format
from .categorization import CategorizationEngine
from .detection import DetectedFormat, describe_detection_failure, detect_bank_format
from .models import (
    CategorizationStats,
    CategoryAssignment,
    DuplicateDetectionResult,
    DuplicateGroup,
    HeaderClassification,
    Transaction,
    ValidationResult,
)
from .stats import calculate_categorization_stats

__all__ = [
    # API
    "parse_csv",
    "parse_csv_file",
    "parse_and_categorize_csv",
    "read_csv_rows",
    "detect_bank_format",
    "describe_detection_failure",
    "detect_duplicates",
    "calculate_categorization_stats",
    "generate_csv_template",
    "get_bank_format",
    # Models / types
    "BANK_FORMATS",
    "UNKNOWN_FORMAT",
    "BankFormatDescriptor",
    "CategorizationEngine",
    "CategorizationStats",
    "CategoryAssignment",
    "DetectedFormat",
    "DuplicateDetectionResult",
    "DuplicateGroup",
    "HeaderClassification",
    "IngestResult",
    "Transaction",
    "ValidationResult",
]
