"""aisast: pattern-based SAST scanning with optional LLM enrichment and fixes."""

__version__ = "0.1.0"
