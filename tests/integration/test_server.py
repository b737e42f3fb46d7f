"""HTTP-level tests for the Starlette app in server.py.

Requests go through httpx's ASGI transport; redirects are not followed so
their status and location can be asserted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dromedary import __version__
from dromedary.server import create_app, lifespan

if TYPE_CHECKING:
    from pathlib import Path

    import httpx

    from dromedary.state import AppState


class TestHome:
    async def test_index(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.headers["x-powered-by"] == f"Dromedary/{__version__}"
        assert "<title>Test Blog</title>" in response.text

    async def test_explicit_page(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/", params={"p": "1"})
        assert response.status_code == 200

    async def test_out_of_range_page_redirects(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/", params={"p": "9"})
        assert response.status_code == 302
        assert response.headers["location"] == "/"

    async def test_non_numeric_page_redirects_home(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/", params={"p": "two"})
        assert response.status_code == 302
        assert response.headers["location"] == "/"

    async def test_render_failure_is_json_error(
        self, client: httpx.AsyncClient, site: Path
    ) -> None:
        (site / "posts" / "index.md").write_text("@@DayTemplate={% if %}\n", encoding="utf-8")
        response = await client.get("/")
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "RENDER_FAILED"


class TestDocuments:
    async def test_post(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/3/17/birthday")
        assert response.status_code == 200
        assert "<title>Birthday &mdash; Test Blog</title>" in response.text

    async def test_page(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/about")
        assert response.status_code == 200
        assert "About this site." in response.text

    async def test_raw_markdown(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/3/17/cake.md")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/x-markdown")
        assert response.text.startswith("@@Title=Cake")

    async def test_redirect(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/old-name")
        assert response.status_code == 301
        assert response.headers["location"] == "/about"

    async def test_missing_without_404_document(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/no-such-page")
        assert response.status_code == 404
        assert response.text == "Not found"

    async def test_missing_with_404_document(
        self, client: httpx.AsyncClient, site: Path
    ) -> None:
        (site / "posts" / "404.md").write_text(
            "@@Title=Lost\n\nNothing lives here.\n", encoding="utf-8"
        )
        response = await client.get("/2014/3/17/no-such-post")
        assert response.status_code == 404
        assert "Nothing lives here." in response.text
        assert "<title>Lost &mdash; Test Blog</title>" in response.text

    async def test_non_numeric_date_segments(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/march/17/birthday")
        assert response.status_code == 404


class TestListings:
    async def test_year(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014")
        assert response.status_code == 200
        assert "Posts for 2014" in response.text

    async def test_small_number_is_not_a_year(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/1999")
        assert response.status_code == 404

    async def test_month(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/3")
        assert response.status_code == 200
        assert "Monday, March 17" in response.text

    async def test_day(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/3/17")
        assert response.status_code == 200
        assert "Birthday" in response.text

    async def test_non_numeric_month(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/march")
        assert response.status_code == 404

    async def test_superscript_digit_is_not_a_year(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/%C2%B2")
        assert response.status_code == 404

    async def test_superscript_digit_month(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/%C2%B2")
        assert response.status_code == 404

    async def test_month_out_of_integer_range(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/" + "9" * 30)
        assert response.status_code == 404

    async def test_year_past_digit_limit(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/" + "9" * 5000)
        assert response.status_code == 404

    async def test_impossible_date(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/2014/2/30")
        assert response.status_code == 404


class TestFeedAndAdmin:
    async def test_rss(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/rss")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/rss+xml")
        assert "<rss" in response.text

    async def test_count(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/count")
        assert response.status_code == 200
        assert response.text == "4 articles, across 3 days that have at least one post."

    async def test_tosscache(self, client: httpx.AsyncClient, app_state: AppState) -> None:
        await client.get("/2014/3/17/birthday")
        assert len(app_state.cache) == 1

        response = await client.get("/tosscache")

        assert response.status_code == 205
        assert len(app_state.cache) == 0


async def test_lifespan_starts_and_cancels_scheduler(app_state: AppState) -> None:
    app = create_app(app_state)
    async with lifespan(app):
        pass
