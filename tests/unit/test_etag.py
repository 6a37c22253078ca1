"""
Unit tests for backend/core/etag.py
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from backend.core.etag import compute_etag, conditional_json

PAYLOAD = {"routineId": "r1", "week": 2, "goals": [{"workingWeightKg": 75.0}]}


@pytest.mark.unit
class TestComputeEtag:

    def test_quoted_and_stable(self):
        etag = compute_etag(PAYLOAD)
        assert etag.startswith('"') and etag.endswith('"')
        assert compute_etag(dict(reversed(list(PAYLOAD.items())))) == etag

    def test_ignores_cache_diagnostics(self):
        hit = {**PAYLOAD, "_cache": "HIT"}
        miss = {**PAYLOAD, "_cache": "MISS", "cacheStats": {"hits": 0, "misses": 3}}
        assert compute_etag(hit) == compute_etag(miss) == compute_etag(PAYLOAD)

    def test_changes_with_content(self):
        changed = {**PAYLOAD, "goals": [{"workingWeightKg": 77.5}]}
        assert compute_etag(changed) != compute_etag(PAYLOAD)


def _app(enabled=True):
    app = FastAPI()

    @app.get("/goals")
    def goals(request: Request):
        return conditional_json(request, {**PAYLOAD, "_cache": "MISS"}, enabled=enabled)

    return TestClient(app)


@pytest.mark.unit
class TestConditionalJson:

    def test_sets_etag(self):
        response = _app().get("/goals")
        assert response.status_code == 200
        assert response.headers["ETag"] == compute_etag(PAYLOAD)
        assert response.json()["_cache"] == "MISS"

    def test_matching_if_none_match_returns_304(self):
        client = _app()
        etag = client.get("/goals").headers["ETag"]

        response = client.get("/goals", headers={"If-None-Match": etag})

        assert response.status_code == 304
        assert response.headers["ETag"] == etag
        assert response.content == b""

    @pytest.mark.parametrize("header", ['"other", {etag}', "W/{etag}", "*"])
    def test_list_weak_and_wildcard_match(self, header):
        client = _app()
        etag = compute_etag(PAYLOAD)
        response = client.get("/goals", headers={"If-None-Match": header.format(etag=etag)})
        assert response.status_code == 304

    def test_stale_tag_returns_body(self):
        response = _app().get("/goals", headers={"If-None-Match": '"stale"'})
        assert response.status_code == 200

    def test_disabled_skips_etag(self):
        client = _app(enabled=False)
        response = client.get("/goals", headers={"If-None-Match": "*"})
        assert response.status_code == 200
        assert "etag" not in response.headers
