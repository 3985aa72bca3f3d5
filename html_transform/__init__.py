"""html-transform: apply risk-gated Python transform modules to HTML documents."""

__version__ = "0.1.0"
