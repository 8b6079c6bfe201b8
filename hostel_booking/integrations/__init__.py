"""
External service integrations.
"""

from hostel_booking.integrations.paystack import PaystackClient, generate_payment_reference

__all__ = ["PaystackClient", "generate_payment_reference"]
