"""Google Drive file mirror with batch CID lookup."""

__version__ = "0.1.0"
