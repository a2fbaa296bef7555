"""Picture-password login for young students."""

__version__ = "0.3.0"
