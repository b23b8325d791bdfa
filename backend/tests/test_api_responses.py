"""Tests for responses API endpoints."""

import pytest
from datetime import datetime, timedelta

from conftest import make_category, make_response, set_created_at


VALID_BODY = {
    "title": "What are the Mansion Worlds?",
    "question": "What happens on the Mansion Worlds?",
    "answer": "<p>They are seven transitional worlds.</p>",
    "excerpt": "Seven transitional worlds...",
}


class TestListResponses:
    """Listing, paging and filtering."""

    def test_list_empty(self, client):
        """Should return an empty page."""
        response = client.get("/api/responses")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"] == []
        assert data["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 0,
            "totalPages": 0,
            "hasMore": False,
        }

    def test_list_summary_fields(self, client, sample_response):
        """List items carry summary fields only."""
        response = client.get("/api/responses")
        item = response.json()["data"][0]
        assert item["title"] == sample_response.title
        assert item["tags"] == ["God", "Trinity"]
        assert item["categories"][0]["slug"] == "deity"
        assert "createdAt" in item
        assert "answer" not in item
        assert "references" not in item

    def test_pagination_metadata(self, client, sql_store):
        for i in range(25):
            make_response(sql_store, f"Response {i}")

        first = client.get("/api/responses", params={"page": 1, "limit": 10}).json()
        assert len(first["data"]) == 10
        assert first["pagination"]["totalPages"] == 3
        assert first["pagination"]["hasMore"] is True

        last = client.get("/api/responses", params={"page": 3, "limit": 10}).json()
        assert len(last["data"]) == 5
        assert last["pagination"]["hasMore"] is False

        beyond = client.get("/api/responses", params={"page": 9, "limit": 10}).json()
        assert beyond["data"] == []
        assert beyond["pagination"]["total"] == 25
        assert beyond["pagination"]["hasMore"] is False

    def test_invalid_page_is_rejected(self, client):
        response = client.get("/api/responses", params={"page": 0})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_sort_and_unknown_sort_fallback(self, client, sql_store):
        base = datetime(2024, 1, 1)
        for i, title in enumerate(["b", "a", "c"]):
            created = make_response(sql_store, title)
            set_created_at(sql_store, created.id, base + timedelta(days=i))

        def titles(sort):
            return [r["title"] for r in client.get("/api/responses", params={"sort": sort}).json()["data"]]

        assert titles("az") == ["a", "b", "c"]
        assert titles("za") == ["c", "b", "a"]
        assert titles("oldest") == ["b", "a", "c"]
        assert titles("newest") == ["c", "a", "b"]
        assert titles("-createdAt") == ["c", "a", "b"]

    def test_filter_by_category_slug_and_tag(self, client, sql_store, sample_response):
        make_response(sql_store, "Untagged")

        by_category = client.get("/api/responses", params={"category": "deity"}).json()
        assert [r["id"] for r in by_category["data"]] == [sample_response.id]

        by_tag = client.get("/api/responses", params={"tag": "Trinity"}).json()
        assert [r["id"] for r in by_tag["data"]] == [sample_response.id]

        none = client.get("/api/responses", params={"category": "deity", "tag": "Other"}).json()
        assert none["data"] == []
        assert none["success"] is True


class TestGetResponse:
    """Single response retrieval."""

    def test_get_response(self, client, sample_response, sample_category):
        response = client.get(f"/api/responses/{sample_response.id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["answer"].startswith("<p>")
        assert data["references"] == [
            {"paper": 10, "section": 0, "paragraph": 1, "quote": "The Paradise Trinity"}
        ]
        assert data["categories"] == [
            {"id": sample_category.id, "name": "Deity", "slug": "deity"}
        ]
        assert data["author"] == "Test Author"

    def test_get_missing_response(self, client):
        response = client.get("/api/responses/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Response not found"}

    def test_pdf_stub(self, client, sample_response):
        response = client.get(f"/api/responses/{sample_response.id}/pdf")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == sample_response.title
        assert data["pdfUrl"] == f"/pdfs/{sample_response.id}.pdf"

    def test_pdf_missing_response(self, client):
        assert client.get("/api/responses/nope/pdf").status_code == 404


class TestCreateResponse:
    """Creating responses."""

    def test_create_as_editor(self, client, editor_headers, sample_category):
        body = dict(VALID_BODY, categories=[sample_category.id], tags=["Morontia"])
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == VALID_BODY["title"]
        assert data["author"] == "Eddie Editor"
        assert data["references"] == []
        assert data["categories"][0]["name"] == "Deity"

    def test_author_cannot_be_spoofed(self, client, editor_headers):
        body = dict(VALID_BODY, author="Someone Else")
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 201
        assert response.json()["data"]["author"] == "Eddie Editor"

    @pytest.mark.parametrize("missing", ["title", "question", "answer", "excerpt"])
    def test_missing_required_field(self, client, editor_headers, missing):
        body = {k: v for k, v in VALID_BODY.items() if k != missing}
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 400
        assert missing in response.json()["message"]

        listing = client.get("/api/responses").json()
        assert listing["pagination"]["total"] == 0

    def test_blank_title_rejected(self, client, editor_headers):
        body = dict(VALID_BODY, title="   ")
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["question", "answer", "excerpt"])
    def test_blank_text_fields_rejected(self, client, editor_headers, field):
        body = dict(VALID_BODY, **{field: "  "})
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 400
        assert field in response.json()["message"]

    def test_unknown_category_rejected(self, client, editor_headers):
        body = dict(VALID_BODY, categories=["missing-category"])
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 400
        assert "missing-category" in response.json()["message"]

    def test_invalid_reference_rejected(self, client, editor_headers):
        body = dict(VALID_BODY, references=[{"paper": 1, "section": 2}])
        response = client.post("/api/responses", json=body, headers=editor_headers)
        assert response.status_code == 400

    def test_viewer_cannot_create(self, client, viewer_headers):
        response = client.post("/api/responses", json=VALID_BODY, headers=viewer_headers)
        assert response.status_code == 403


class TestUpdateResponse:
    """Updating responses."""

    def test_partial_update(self, client, editor_headers, sample_response):
        response = client.put(
            f"/api/responses/{sample_response.id}",
            json={"excerpt": "Updated excerpt"},
            headers=editor_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["excerpt"] == "Updated excerpt"
        assert data["title"] == sample_response.title
        assert data["tags"] == ["God", "Trinity"]

    def test_update_replaces_tags(self, client, editor_headers, sample_response):
        response = client.put(
            f"/api/responses/{sample_response.id}",
            json={"tags": ["Paradise"], "categories": []},
            headers=editor_headers,
        )
        data = response.json()["data"]
        assert data["tags"] == ["Paradise"]
        assert data["categories"] == []

    def test_update_cannot_blank_required_field(self, client, editor_headers, sample_response):
        response = client.put(
            f"/api/responses/{sample_response.id}",
            json={"title": ""},
            headers=editor_headers,
        )
        assert response.status_code == 400

    def test_update_missing(self, client, editor_headers):
        response = client.put("/api/responses/missing", json={"title": "x"}, headers=editor_headers)
        assert response.status_code == 404


class TestDeleteResponse:
    """Deleting responses."""

    def test_viewer_forbidden_admin_allowed(self, client, viewer_headers, admin_headers, sample_response):
        url = f"/api/responses/{sample_response.id}"

        forbidden = client.delete(url, headers=viewer_headers)
        assert forbidden.status_code == 403
        assert client.get(url).status_code == 200

        allowed = client.delete(url, headers=admin_headers)
        assert allowed.status_code == 200
        assert allowed.json()["message"] == "Response deleted successfully"
        assert client.get(url).status_code == 404

    def test_editor_cannot_delete(self, client, editor_headers, sample_response):
        response = client.delete(f"/api/responses/{sample_response.id}", headers=editor_headers)
        assert response.status_code == 403

    def test_delete_missing(self, client, admin_headers):
        assert client.delete("/api/responses/missing", headers=admin_headers).status_code == 404

    def test_delete_keeps_category(self, client, admin_headers, sample_response, sample_category):
        client.delete(f"/api/responses/{sample_response.id}", headers=admin_headers)
        assert client.get(f"/api/categories/{sample_category.id}").status_code == 200


class TestSearchResponses:
    """Search endpoint."""

    def test_search_requires_query(self, client):
        assert client.get("/api/responses/search").status_code == 400
        assert client.get("/api/responses/search", params={"q": "  "}).status_code == 400

    def test_search_returns_summaries(self, client, sample_response):
        response = client.get("/api/responses/search", params={"q": "trinity"})
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["data"][0]["id"] == sample_response.id
        assert "answer" not in data["data"][0]

    def test_search_capped_at_twenty(self, client, sql_store):
        for i in range(25):
            make_response(sql_store, f"Trinity {i}")
        data = client.get("/api/responses/search", params={"q": "trinity"}).json()
        assert data["count"] == 20


class TestMemoryBackend:
    """The same API served from the in-memory store."""

    def test_round_trip(self, memory_client):
        store = memory_client.store
        category = make_category(store, "Afterlife")
        make_response(store, "Mansion Worlds", categories=[category.id])

        listing = memory_client.get("/api/responses", params={"category": "afterlife"}).json()
        assert [r["title"] for r in listing["data"]] == ["Mansion Worlds"]
