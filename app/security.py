"""
Security module for the webhook and client bridge.
Implements the Meta verification handshake, X-Hub-Signature-256 payload
checks and passkey authentication for the client bridge.
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from app import config

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="

def hash_passkey(passkey: str) -> str:
    """Create a SHA-256 hash of the passkey for logging (never log raw passkey)."""
    return hashlib.sha256(passkey.encode()).hexdigest()[:8]

def get_client_ip(request: Request) -> str:
    """Extract real client IP from request, handling proxies and load balancers."""
    forwarded_for = request.headers.get('X-Forwarded-For')
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, use the first one
        return forwarded_for.split(',')[0].strip()
    
    real_ip = request.headers.get('X-Real-IP')
    if real_ip:
        return real_ip.strip()
    
    return str(request.client.host) if request.client else "unknown"

def log_security_event(
    event_type: str, 
    ip_address: str, 
    details: Dict[str, Any], 
    severity: str = "WARNING"
) -> None:
    """
    Log security events with structured data for monitoring and analysis.
    
    Args:
        event_type: Type of security event (auth_failure, auth_success, etc.)
        ip_address: Source IP address
        details: Additional event details
        severity: Log severity level
    """
    log_entry = {
        "event": event_type,
        "ip": ip_address,
        "severity": severity,
        **details
    }
    
    if severity == "CRITICAL":
        logger.critical(f"[SECURITY] {log_entry}")
    elif severity == "ERROR":
        logger.error(f"[SECURITY] {log_entry}")
    elif severity == "INFO":
        logger.info(f"[SECURITY] {log_entry}")
    else:
        logger.warning(f"[SECURITY] {log_entry}")

def verify_subscription(mode: Optional[str], token: Optional[str], challenge: Optional[str]) -> Optional[str]:
    """
    Check the webhook verification request sent by the Meta dashboard.
    
    Returns:
        The challenge to echo back, or None if verification fails.
    """
    if not config.VERIFY_TOKEN:
        logger.error("[SECURITY] VERIFY_TOKEN is not configured, rejecting webhook verification")
        return None
    if mode == "subscribe" and token is not None and hmac.compare_digest(token.encode(), config.VERIFY_TOKEN.encode()):
        logger.info("[SECURITY] Webhook verified")
        return challenge or ""
    return None

def verify_signature(body: bytes, signature_header: Optional[str]) -> bool:
    """
    Validate the X-Hub-Signature-256 header against APP_SECRET.
    
    Signature checks are skipped when APP_SECRET is not configured.
    """
    if not config.APP_SECRET:
        return True
    if not signature_header or not signature_header.startswith(SIGNATURE_PREFIX):
        return False
    expected = hmac.new(config.APP_SECRET.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature_header[len(SIGNATURE_PREFIX):].encode(), expected.encode())

def validate_bridge_auth(request: Request, payload: Dict[str, Any]) -> bool:
    """
    Validate client bridge authentication using the passkey in the request body.
    
    Raises:
        HTTPException: 401 if the passkey is missing or wrong, 503 if none is configured
    """
    client_ip = get_client_ip(request)
    user_agent = request.headers.get('User-Agent', 'unknown')

    if not config.BRIDGE_PASSKEY:
        log_security_event(
            "bridge_disabled",
            client_ip,
            {"reason": "BRIDGE_PASSKEY not configured"},
            severity="ERROR"
        )
        raise HTTPException(status_code=503, detail="Bridge not configured")

    provided_passkey = payload.get('passkey')
    if not provided_passkey:
        log_security_event(
            "auth_failure_missing_passkey",
            client_ip,
            {
                "reason": "Missing passkey in request body",
                "payload_keys": list(payload.keys()),
                "user_agent": user_agent
            },
            severity="CRITICAL"
        )
        raise HTTPException(status_code=401, detail="Authentication required")
    
    if not hmac.compare_digest(str(provided_passkey).encode(), config.BRIDGE_PASSKEY.encode()):
        log_security_event(
            "auth_failure_invalid_passkey",
            client_ip,
            {
                "reason": "Invalid passkey provided",
                "passkey_hash": hash_passkey(str(provided_passkey)),
                "user_agent": user_agent
            },
            severity="CRITICAL"
        )
        raise HTTPException(status_code=401, detail="Authentication failed")
    
    return True
