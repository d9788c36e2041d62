import httpx

# Upstream statuses passed through as-is; everything else becomes a 500.
PASSTHROUGH_STATUSES = (400, 401, 404)


def upstream_status(exc: Exception) -> int:
    """Local HTTP status for a failure raised while calling Dixa or Voyado."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status in PASSTHROUGH_STATUSES:
            return status
    return 500


def upstream_detail(exc: Exception):
    """Upstream error body when there is one, for the error response."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            return exc.response.json()
        except ValueError:
            return exc.response.text or None
    return None
