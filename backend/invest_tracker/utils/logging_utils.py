"""Logging utilities for PII redaction and secure logging."""

import hashlib
from typing import Optional


def redact_username(username: Optional[str]) -> str:
    """
    Redact a username for logging while keeping it distinguishable.

    Examples:
        >>> redact_username("investor42")
        'i***2'
        >>> redact_username("ab")
        'hash:...'
        >>> redact_username(None)
        'N/A'
    """
    if not username:
        return "N/A"

    # Too short to mask meaningfully, hash it
    if len(username) < 3:
        return f"hash:{hashlib.sha256(username.encode()).hexdigest()[:6]}"

    return f"{username[0]}***{username[-1]}"


def redact_email(email: Optional[str]) -> str:
    """
    Redact email address for logging while maintaining uniqueness.

    Examples:
        >>> redact_email("user@example.com")
        'u***@example.com'
        >>> redact_email(None)
        'N/A'
    """
    if not email:
        return "N/A"

    try:
        local, domain = email.split("@", 1)

        if len(local) < 3:
            email_hash = hashlib.sha256(email.encode()).hexdigest()[:6]
            return f"hash:{email_hash}@{domain}"

        return f"{local[0]}***@{domain}"

    except ValueError:
        # Malformed email
        email_hash = hashlib.sha256(str(email).encode()).hexdigest()[:6]
        return f"hash:{email_hash}"


def redact_ip(ip_address: Optional[str]) -> str:
    """
    Redact IP address for logging while maintaining network info.

    Examples:
        >>> redact_ip("192.168.1.100")
        '192.168.1.***'
        >>> redact_ip(None)
        'N/A'
    """
    if not ip_address:
        return "N/A"

    # IPv4
    if "." in ip_address:
        parts = ip_address.split(".")
        if len(parts) == 4:
            return f"{parts[0]}.{parts[1]}.{parts[2]}.***"

    # IPv6 (simplified)
    if ":" in ip_address:
        parts = ip_address.split(":")
        if len(parts) >= 4:
            return ":".join(parts[:3]) + ":***"

    ip_hash = hashlib.sha256(str(ip_address).encode()).hexdigest()[:6]
    return f"hash:{ip_hash}"
