"""
Substitution lookup against a mocked recommendation service.
"""

import json

import httpx
import pytest

from pharmapos.errors import ServerError, ValidationError
from pharmapos.services import substitution_service


UPSTREAM_URL = "http://recommender.test/api/substitutes"


@pytest.fixture
def configured(app, monkeypatch):
    monkeypatch.setitem(app.config, "SUBSTITUTION_API_URL", UPSTREAM_URL)
    monkeypatch.setitem(app.config, "SUBSTITUTION_API_KEY", "s3cret")


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestLookupSubstitutes:

    def test_forwards_message(self, db_session, configured):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"recommendations": [{"name": "Ibuprofen 400mg"}]})

        result = substitution_service.lookup_substitutes("  pengganti paracetamol  ", client=mock_client(handler))

        assert result == {"recommendations": [{"name": "Ibuprofen 400mg"}]}
        assert seen == {
            "url": UPSTREAM_URL,
            "auth": "Bearer s3cret",
            "body": {"message": "pengganti paracetamol"},
        }

    def test_missing_recommendations_default_to_empty(self, db_session, configured):
        client = mock_client(lambda request: httpx.Response(200, json={"answer": "none"}))

        result = substitution_service.lookup_substitutes("amoxicillin", client=client)

        assert result == {"answer": "none", "recommendations": []}

    @pytest.mark.parametrize("message", [None, "", "   ", 42, "x" * 2001])
    def test_invalid_message(self, db_session, configured, message):
        with pytest.raises(ValidationError):
            substitution_service.lookup_substitutes(message, client=mock_client(lambda r: httpx.Response(200)))

    def test_not_configured(self, db_session):
        with pytest.raises(ServerError, match="not configured"):
            substitution_service.lookup_substitutes("amoxicillin")

    def test_upstream_error(self, db_session, configured):
        client = mock_client(lambda request: httpx.Response(500, json={"error": "boom"}))

        with pytest.raises(ServerError, match="unavailable"):
            substitution_service.lookup_substitutes("amoxicillin", client=client)

    def test_upstream_unreachable(self, db_session, configured):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ServerError, match="unavailable"):
            substitution_service.lookup_substitutes("amoxicillin", client=mock_client(handler))

    @pytest.mark.parametrize("response", [
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json=["not", "an", "object"]),
    ])
    def test_invalid_response(self, db_session, configured, response):
        with pytest.raises(ServerError, match="invalid response"):
            substitution_service.lookup_substitutes("amoxicillin", client=mock_client(lambda r: response))


class TestSubstitutionRoute:

    @pytest.fixture
    def upstream(self, monkeypatch, configured):
        real_client = httpx.Client

        def handler(request):
            return httpx.Response(200, json={"recommendations": [{"name": "Cetirizine 10mg"}]})

        monkeypatch.setattr(
            substitution_service.httpx,
            "Client",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    def test_lookup(self, client, admin_headers, upstream):
        resp = client.post("/api/substitutions", headers=admin_headers, json={"message": "pengganti loratadine"})

        assert resp.status_code == 200
        assert resp.json["recommendations"] == [{"name": "Cetirizine 10mg"}]

    def test_empty_message(self, client, admin_headers, upstream):
        resp = client.post("/api/substitutions", headers=admin_headers, json={})
        assert resp.status_code == 400

    def test_unconfigured_is_server_error(self, client, admin_headers):
        resp = client.post("/api/substitutions", headers=admin_headers, json={"message": "x"})
        assert resp.status_code == 500
        assert resp.json["message"] == "Substitution service is not configured"

    def test_requires_permission(self, client, cashier_headers, upstream):
        resp = client.post("/api/substitutions", headers=cashier_headers, json={"message": "x"})
        assert resp.status_code == 403
