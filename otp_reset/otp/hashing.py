"""
OTP Hashing Utilities
=====================
Code generation and one-way hashing for OTP storage.
"""

import hashlib
import hmac
import secrets


def generate_otp(length: int = 6) -> str:
    """
    Generate a numeric OTP with no leading zero.

    Uniform over [10^(length-1), 10^length - 1], e.g. 100000-999999 for
    six digits, drawn from the secrets CSPRNG.

    Args:
        length: Number of digits

    Returns:
        OTP string
    """
    if length < 1:
        raise ValueError("OTP length must be positive")
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def hash_otp(otp: str, secret: str = "") -> str:
    """
    Hash an OTP for storage.

    Plain SHA-256 hex when no secret is configured, HMAC-SHA256 keyed with
    the server-side secret otherwise. Deterministic for a given secret.

    Args:
        otp: Plain OTP
        secret: Optional server-side pepper

    Returns:
        Hex digest
    """
    if secret:
        return hmac.new(secret.encode(), otp.encode(), hashlib.sha256).hexdigest()
    return hashlib.sha256(otp.encode()).hexdigest()


def verify_otp_hash(otp: str, stored_hash: str, secret: str = "") -> bool:
    """
    Verify an OTP against its stored hash.

    Uses constant-time comparison.
    """
    return hmac.compare_digest(hash_otp(otp, secret), stored_hash)
