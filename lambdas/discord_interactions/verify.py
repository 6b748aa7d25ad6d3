import base64

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

SIGNATURE_HEADER = "x-signature-ed25519"
TIMESTAMP_HEADER = "x-signature-timestamp"


def header(event: dict, name: str) -> str | None:
    # REST APIs keep the client's casing, HTTP APIs lowercase everything
    name = name.lower()
    for k, v in (event.get("headers") or {}).items():
        if k.lower() == name:
            return v
    return None


def raw_body_from_event(event: dict) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    if isinstance(body, bytes):
        return body
    return body.encode()


def verify_signature(public_key: str, signature: str | None, timestamp: str | None, body: bytes) -> bool:
    """Check Discord's Ed25519 signature over timestamp + raw body."""
    if not public_key or not signature or not timestamp:
        return False
    try:
        verify_key = VerifyKey(bytes.fromhex(public_key))
        verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
    except (BadSignatureError, ValueError, TypeError):
        return False
    return True
