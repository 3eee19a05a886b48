"""Integration tests for the FastAPI endpoints using TestClient."""

from __future__ import annotations

import time
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from library_catalog.api.middleware import ErrorHandlingMiddleware
from library_catalog.api.routes import router as api_router
from library_catalog.config.settings import Settings
from library_catalog.main import create_app
from library_catalog.models.report import ReportStatus, TaskRecord
from library_catalog.services.report_service import ReportService
from library_catalog.utils.errors import TaskNotFoundError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def client(test_settings: Settings):  # noqa: ANN201
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client


def _poll_status(client: TestClient, task_id: str, timeout: float = 5.0) -> dict:
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(f"/api/v1/logs/reports/{task_id}/status").json()
        if body["status"] in ("COMPLETED", "FAILED") or time.monotonic() > deadline:
            return body
        time.sleep(0.02)


def _create_stub_report_app(record: TaskRecord | None, artifact: Path | None) -> FastAPI:
    """App whose report service is a mock returning fixed answers."""
    app = FastAPI()
    app.add_middleware(ErrorHandlingMiddleware)
    app.include_router(api_router)

    service = MagicMock(spec=ReportService)
    if record is None:
        service.get_status.side_effect = TaskNotFoundError("missing")
    else:
        service.get_status.return_value = record
    service.get_artifact_path.return_value = artifact
    app.state.report_service = service
    return app


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------


class TestAuthorEndpoints:
    def test_create_get_and_list(self, client: TestClient) -> None:
        created = client.post("/api/v1/authors", json={"name": "Ada Palmer"})
        assert created.status_code == 201
        author_id = created.json()["author_id"]

        assert client.get(f"/api/v1/authors/{author_id}").json()["name"] == "Ada Palmer"
        assert [a["name"] for a in client.get("/api/v1/authors").json()] == ["Ada Palmer"]

    def test_duplicate_name_returns_409(self, client: TestClient) -> None:
        client.post("/api/v1/authors", json={"name": "Ada Palmer"})
        resp = client.post("/api/v1/authors", json={"name": "ada palmer"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "AlreadyExistsError"

    def test_unknown_author_returns_404(self, client: TestClient) -> None:
        resp = client.get("/api/v1/authors/999")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Author not found with id: 999"

    def test_search_with_no_match_returns_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/authors/search", params={"name": "zzz"}).status_code == 404

    def test_update_and_delete(self, client: TestClient) -> None:
        author_id = client.post("/api/v1/authors", json={"name": "Old"}).json()["author_id"]

        renamed = client.put(f"/api/v1/authors/{author_id}", json={"name": "New"})
        assert renamed.status_code == 200
        assert client.get("/api/v1/authors/search", params={"name": "new"}).status_code == 200

        assert client.delete(f"/api/v1/authors/{author_id}").status_code == 204
        assert client.get(f"/api/v1/authors/{author_id}").status_code == 404

    def test_blank_name_rejected(self, client: TestClient) -> None:
        assert client.post("/api/v1/authors", json={"name": ""}).status_code == 422

    def test_whitespace_only_name_rejected_on_create_and_update(
        self, client: TestClient
    ) -> None:
        assert client.post("/api/v1/authors", json={"name": "   "}).status_code == 422

        author_id = client.post("/api/v1/authors", json={"name": "Kept"}).json()["author_id"]
        assert client.put(f"/api/v1/authors/{author_id}", json={"name": "   "}).status_code == 422
        assert client.get(f"/api/v1/authors/{author_id}").json()["name"] == "Kept"

    def test_name_is_stripped(self, client: TestClient) -> None:
        created = client.post("/api/v1/authors", json={"name": "  Ursula Le Guin "})
        assert created.json()["name"] == "Ursula Le Guin"


# ---------------------------------------------------------------------------
# Books and categories
# ---------------------------------------------------------------------------


class TestBookAndCategoryEndpoints:
    def test_book_with_unknown_author_returns_400(self, client: TestClient) -> None:
        resp = client.post("/api/v1/books", json={"title": "Orphan", "author_id": 42})
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidReferenceError"

    def test_bulk_create_and_lookups(self, client: TestClient) -> None:
        author_id = client.post("/api/v1/authors", json={"name": "N. K. Jemisin"}).json()[
            "author_id"
        ]
        resp = client.post(
            "/api/v1/books/bulk",
            json={
                "books": [
                    {"title": "The Fifth Season", "author_id": author_id},
                    {"title": "The Obelisk Gate", "author_id": author_id},
                ]
            },
        )
        assert resp.status_code == 201
        assert len(resp.json()) == 2

        by_author = client.get(f"/api/v1/books/by-author/{author_id}").json()
        assert {b["title"] for b in by_author} == {"The Fifth Season", "The Obelisk Gate"}
        assert len(client.get("/api/v1/books/search", params={"title": "gate"}).json()) == 1

    def test_category_embeds_books_and_tracks_updates(self, client: TestClient) -> None:
        book = client.post("/api/v1/books", json={"title": "Piranesi"}).json()
        category = client.post(
            "/api/v1/categories", json={"name": "Fantasy", "book_ids": [book["book_id"]]}
        ).json()
        assert category["books"] == [{"book_id": book["book_id"], "title": "Piranesi"}]

        client.put(f"/api/v1/books/{book['book_id']}", json={"title": "Piranesi (2020)"})

        refreshed = client.get(f"/api/v1/categories/{category['category_id']}").json()
        assert refreshed["books"][0]["title"] == "Piranesi (2020)"

        by_name = client.get("/api/v1/books/by-category", params={"category": "fantasy"})
        assert [b["book_id"] for b in by_name.json()] == [book["book_id"]]
        by_id = client.get(f"/api/v1/books/by-category/{category['category_id']}")
        assert by_id.status_code == 200

        by_book = client.get("/api/v1/categories/by-book", params={"title": "piranesi"})
        assert [c["name"] for c in by_book.json()] == ["Fantasy"]

    def test_cross_entity_lookups_follow_mutations(self, client: TestClient) -> None:
        author = client.post("/api/v1/authors", json={"name": "Susanna Clarke"}).json()
        book = client.post(
            "/api/v1/books", json={"title": "Piranesi", "author_id": author["author_id"]}
        ).json()
        category = client.post(
            "/api/v1/categories", json={"name": "Fantasy", "book_ids": [book["book_id"]]}
        ).json()

        authors = client.get("/api/v1/authors/by-category", params={"category": "fanta"})
        assert [a["name"] for a in authors.json()] == ["Susanna Clarke"]
        books = client.get("/api/v1/books/by-author", params={"author": "susanna"})
        assert [b["title"] for b in books.json()] == ["Piranesi"]
        categories = client.get(f"/api/v1/categories/by-book/{book['book_id']}")
        assert [c["name"] for c in categories.json()] == ["Fantasy"]

        client.put(f"/api/v1/authors/{author['author_id']}", json={"name": "S. Clarke"})
        client.put(f"/api/v1/categories/{category['category_id']}", json={"name": "Myth"})

        stale = client.get("/api/v1/authors/by-category", params={"category": "fanta"})
        assert stale.status_code == 404
        stale = client.get("/api/v1/books/by-author", params={"author": "susanna"})
        assert stale.status_code == 404
        categories = client.get(f"/api/v1/categories/by-book/{book['book_id']}")
        assert [c["name"] for c in categories.json()] == ["Myth"]
        assert client.get("/api/v1/categories/by-book/999").status_code == 404

    def test_delete_category(self, client: TestClient) -> None:
        category_id = client.post("/api/v1/categories", json={"name": "Temp"}).json()[
            "category_id"
        ]
        assert client.delete(f"/api/v1/categories/{category_id}").status_code == 204
        assert client.get(f"/api/v1/categories/{category_id}").status_code == 404
        assert client.get("/api/v1/categories/search", params={"name": "temp"}).status_code == 404

    def test_whitespace_only_title_and_category_name_rejected(self, client: TestClient) -> None:
        assert client.post("/api/v1/books", json={"title": " \t "}).status_code == 422
        bulk = client.post("/api/v1/books/bulk", json={"books": [{"title": " "}]})
        assert bulk.status_code == 422
        assert client.post("/api/v1/categories", json={"name": "  "}).status_code == 422

        book_id = client.post("/api/v1/books", json={"title": "Real"}).json()["book_id"]
        assert client.put(f"/api/v1/books/{book_id}", json={"title": "  "}).status_code == 422
        category_id = client.post("/api/v1/categories", json={"name": "Real"}).json()[
            "category_id"
        ]
        resp = client.put(f"/api/v1/categories/{category_id}", json={"name": "  "})
        assert resp.status_code == 422

    def test_delete_book(self, client: TestClient) -> None:
        book_id = client.post("/api/v1/books", json={"title": "Gone"}).json()["book_id"]
        assert client.delete(f"/api/v1/books/{book_id}").status_code == 204
        assert client.delete(f"/api/v1/books/{book_id}").status_code == 404


# ---------------------------------------------------------------------------
# Logs and reports
# ---------------------------------------------------------------------------


class TestLogEndpoints:
    def test_download_source_log(self, client: TestClient, source_log: Path) -> None:
        resp = client.get("/api/v1/logs", params={"date": "2024-01-01"})
        assert resp.status_code == 200
        assert resp.text == source_log.read_text(encoding="utf-8")

    def test_download_missing_source_log(self, client: TestClient) -> None:
        assert client.get("/api/v1/logs", params={"date": "1999-12-31"}).status_code == 404

    def test_report_lifecycle(self, client: TestClient, source_log: Path) -> None:
        resp = client.post("/api/v1/logs/reports", params={"date": "2024-01-01"})
        assert resp.status_code == 202
        task_id = resp.json()["task_id"]

        status = _poll_status(client, task_id)
        assert status["status"] == "COMPLETED"
        assert status["report_date"] == "2024-01-01"

        download = client.get(f"/api/v1/logs/reports/{task_id}/download")
        assert download.status_code == 200
        assert download.text == source_log.read_text(encoding="utf-8")

        listing = client.get("/api/v1/logs/reports").json()
        assert listing["total"] == 1
        assert listing["tasks"][0]["task_id"] == task_id

    def test_failed_report_download_returns_500(self, client: TestClient) -> None:
        task_id = client.post("/api/v1/logs/reports", params={"date": "2024-01-01"}).json()[
            "task_id"
        ]
        status = _poll_status(client, task_id)
        assert status["status"] == "FAILED"
        assert "Source log file not found" in status["error_message"]

        resp = client.get(f"/api/v1/logs/reports/{task_id}/download")
        assert resp.status_code == 500
        assert "Source log file not found" in resp.json()["detail"]

    def test_unknown_task_returns_404(self, client: TestClient) -> None:
        assert client.get("/api/v1/logs/reports/nope/status").status_code == 404
        assert client.get("/api/v1/logs/reports/nope/download").status_code == 404

    def test_invalid_date_rejected(self, client: TestClient) -> None:
        resp = client.post("/api/v1/logs/reports", params={"date": "not-a-date"})
        assert resp.status_code == 422

    def test_pending_report_download_returns_202(self) -> None:
        record = TaskRecord(task_id="t1", report_date=date(2024, 1, 1))
        client = TestClient(_create_stub_report_app(record, None))

        resp = client.get("/api/v1/logs/reports/t1/download")
        assert resp.status_code == 202
        assert resp.json()["status"] == "PENDING"

    def test_in_progress_report_download_returns_202(self) -> None:
        record = TaskRecord(task_id="t1").with_status(ReportStatus.IN_PROGRESS)
        client = TestClient(_create_stub_report_app(record, None))

        resp = client.get("/api/v1/logs/reports/t1/download")
        assert resp.status_code == 202
        assert resp.json()["status"] == "IN_PROGRESS"

    def test_completed_report_with_missing_file_returns_404(self, tmp_path: Path) -> None:
        missing = tmp_path / "gone.log"
        record = TaskRecord(task_id="t1").completed(str(missing))
        client = TestClient(_create_stub_report_app(record, missing))

        assert client.get("/api/v1/logs/reports/t1/download").status_code == 404

    def test_stub_unknown_task_returns_404(self) -> None:
        client = TestClient(_create_stub_report_app(None, None))
        resp = client.get("/api/v1/logs/reports/missing/status")
        assert resp.status_code == 404
        assert resp.json()["error"] == "TaskNotFoundError"


# ---------------------------------------------------------------------------
# Operational
# ---------------------------------------------------------------------------


class TestOperationalEndpoints:
    def test_health(self, client: TestClient) -> None:
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"
        assert set(body["caches"]) == {"author", "book", "category"}

    def test_cache_stats_reflect_reads(self, client: TestClient) -> None:
        client.post("/api/v1/authors", json={"name": "Le Guin"})
        client.get("/api/v1/authors")
        client.get("/api/v1/authors")

        stats = {s["name"]: s for s in client.get("/api/v1/cache/stats").json()}
        assert stats["author"]["hits"] == 1
        assert stats["author"]["size"] == 1
        assert stats["author"]["capacity"] == 100
