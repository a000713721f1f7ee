import hashlib
from typing import Optional


def mask_secret(text: str, secret: Optional[str]) -> str:
    return text.replace(secret, f"{secret[:4]}****") if secret else text


def secret_fingerprint(secret: Optional[str]) -> str:
    """Stable identifier for a secret that is safe to log."""
    if not secret:
        return "<empty>"
    digest = hashlib.sha256(secret.encode("utf-8")).hexdigest()[:12]
    return f"len={len(secret)} sha256={digest}"
