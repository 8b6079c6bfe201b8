"""Hostel booking, shuttle and payment reconciliation service."""

__version__ = "1.0.0"
