"""Schema Radar - Schema.org structured data extraction."""

__version__ = "1.0.0"
