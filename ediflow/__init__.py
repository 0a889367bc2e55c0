"""EdiFlow: spreadsheet EDI standard ingestion and message mapping."""

__version__ = "0.1.0"
