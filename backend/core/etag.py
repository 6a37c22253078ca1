"""
ETag support for RtF read endpoints.

The tag is a quoted SHA-1 of the canonical JSON payload with volatile
diagnostics removed (cache HIT/MISS marker, per-request cache stats), so a
cache hit and a cache miss for the same data share one ETag.
"""

import hashlib
import json
from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

VOLATILE_KEYS = frozenset({"_cache", "cacheStats"})


def compute_etag(payload: Dict[str, Any]) -> str:
    stable = {k: v for k, v in payload.items() if k not in VOLATILE_KEYS}
    body = json.dumps(stable, sort_keys=True, separators=(",", ":"), default=str)
    return '"' + hashlib.sha1(body.encode("utf-8")).hexdigest() + '"'


def _matches(if_none_match: Optional[str], etag: str) -> bool:
    if not if_none_match:
        return False
    candidates = [c.strip() for c in if_none_match.split(",")]
    weak = "W/" + etag
    return "*" in candidates or etag in candidates or weak in candidates


def conditional_json(request: Request, payload: Dict[str, Any], enabled: bool = True) -> Response:
    """
    JSON response with an ETag, or 304 when If-None-Match matches.

    Args:
        request: Incoming request (reads If-None-Match).
        payload: JSON-compatible body.
        enabled: When False, return plain JSON without an ETag.
    """
    if not enabled:
        return JSONResponse(payload)
    etag = compute_etag(payload)
    if _matches(request.headers.get("if-none-match"), etag):
        return Response(status_code=304, headers={"ETag": etag})
    return JSONResponse(payload, headers={"ETag": etag})
