import hmac
from flask import request, abort

SIGNATURE_HEADER = "X-Cognito-Signature"

def verify_shared_secret(secret: str):
    """Abort with 401 unless the request carries the configured secret.

    Cognito sends the secret verbatim (no HMAC), so this is a constant-time
    string compare. An empty secret disables the check.
    """
    if not secret:
        return
    theirs = request.headers.get(SIGNATURE_HEADER, "")
    if not hmac.compare_digest(theirs.encode(), secret.encode()):
        abort(401, description="Invalid signature")
