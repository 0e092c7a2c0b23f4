"""Multi-session synchronisation of live-event production records."""

__version__ = "0.1.0"
