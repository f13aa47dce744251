import secrets

from fastapi import HTTPException, Request, status

API_KEY_HEADER = "x-api-key"


def api_key_dependency(request: Request) -> None:
    """Reject requests without the configured key; open access when none is set."""
    expected = request.app.state.api_key
    if not expected:
        return
    provided = request.headers.get(API_KEY_HEADER) or ""
    if not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")
