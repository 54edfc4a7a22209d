"""Bank statement import with offline-first sync to a finance API."""

__version__ = "0.1.0"
