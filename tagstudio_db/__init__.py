"""Access to TagStudio library databases: libraries, pooled connections, tags, entries, fields and searches."""

__version__ = "0.1.0"