"""globcat: concatenate files selected by glob patterns for pasting into an LLM chat."""

__version__ = "0.1.0"
