"""xaladownloader: catalog resolution and streaming download proxy."""

__version__ = "0.3.0"
