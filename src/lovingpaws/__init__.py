"""LovingPaws: local pet health store with offline sync."""

__version__ = "0.1.0"
