"""
Utility helpers: dates, email, QR codes and message signing.
"""
