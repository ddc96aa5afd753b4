"""Item Scout - market-grounded listing drafts for photographed items."""

__version__ = "1.0.0"
