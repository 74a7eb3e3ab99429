"""Occupancy and billing ledger for the hostel management system."""

__version__ = "0.1.0"
