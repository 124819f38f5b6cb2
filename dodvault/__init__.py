"""dodvault — local character sheet vault bridging a Qt UI and a document store."""

__version__ = "0.1.0"
