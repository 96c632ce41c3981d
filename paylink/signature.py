import hashlib
import hmac

SIGNATURE_HEADER = "X-Razorpay-Signature"


def compute_signature(secret: str, body: bytes) -> str:
    """Compute the hex HMAC-SHA256 of the raw body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, signature: str, body: bytes) -> bool:
    """
    Verify a webhook signature against the exact bytes that were received.

    Args:
        secret: Webhook secret shared with the provider.
        signature: Hex digest from the X-Razorpay-Signature header.
        body: Raw request body bytes, before any JSON parsing.

    Returns:
        True if the signature matches.

    Raises:
        ValueError: If the signature is missing or does not match.
    """
    if not signature:
        raise ValueError("Missing or empty signature header.")

    expected = compute_signature(secret, body)
    # Non-ASCII header values cannot match a hex digest; compare_digest rejects them for str.
    if not hmac.compare_digest(expected.encode(), signature.encode("utf-8", "surrogateescape")):
        raise ValueError("Signature mismatch.")

    return True
