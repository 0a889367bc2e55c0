"""Custom exceptions used across EdiFlow."""


class EdiFlowError(Exception):
    """Base error for the application."""


class ConfigError(EdiFlowError):
    """Configuration related error."""


class DetectionError(EdiFlowError):
    """Raised when a worksheet cannot be scanned for table regions."""


class ExtractionError(EdiFlowError):
    """Raised when an ingestion run cannot read or write its documents."""


class MappingError(EdiFlowError):
    """Raised when mapping configuration is invalid or cannot be applied."""


class CoercionError(MappingError, ValueError):
    """Raised when a value cannot be coerced to the requested data type."""


class ConversionError(EdiFlowError):
    """Raised when JSON/XML conversion fails."""


class ValidationError(EdiFlowError):
    """Raised when a document fails validation and the caller asked to fail fast."""


class RoutingError(EdiFlowError):
    """Raised when a message cannot be routed to its receiver."""
