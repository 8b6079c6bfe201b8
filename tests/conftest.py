import os

# Settings are read once at import time, so the test environment has to be
# in place before anything imports hostel_booking.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-for-the-suite-0123456789")
os.environ.setdefault("PAYSTACK_SECRET_KEY", "sk_test_secret")
os.environ.setdefault("PAYSTACK_WEBHOOK_SECRET", "whsec_test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
