"""mode-manager: browse a catalog of modes, pick and order a selection."""

__version__ = "0.3.0"
