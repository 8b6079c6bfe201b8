"""
Message signing helpers for gateway webhooks.
"""

import hashlib
import hmac
from typing import Optional, Union


class SignatureHelper:
    """HMAC signing and constant-time verification"""

    @staticmethod
    def sign(secret: str, payload: Union[bytes, str], algorithm: str = "sha512") -> str:
        """Hex HMAC of ``payload`` keyed with ``secret``"""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        digest = getattr(hashlib, algorithm)
        return hmac.new(secret.encode("utf-8"), payload, digest).hexdigest()

    @classmethod
    def verify(
        cls,
        secret: Optional[str],
        payload: bytes,
        signature: Optional[str],
        algorithm: str = "sha512",
    ) -> bool:
        """False when the secret or signature is missing, or they do not match"""
        if not secret or not signature:
            return False
        expected = cls.sign(secret, payload, algorithm)
        provided = signature.strip().lower().encode("latin-1", "replace")
        return hmac.compare_digest(expected.encode("ascii"), provided)
