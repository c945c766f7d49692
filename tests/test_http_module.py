from __future__ import annotations

import allure
import httpx

from nanoheads.http.fetcher import HttpFetcher
from nanoheads.http.html_extractor import extract_text

pytestmark = [
    allure.epic("Source Input"),
    allure.feature("URL Fetching"),
]

ARTICLE_HTML = """
<html>
  <head><title>Rains lash Hyderabad</title></head>
  <body>
    <nav>Home | World | Sports</nav>
    <article>
      <h1>Rains lash Hyderabad</h1>
      <p>Heavy rain flooded several low-lying areas of Hyderabad on Tuesday evening,
      according to the Greater Hyderabad Municipal Corporation.</p>
      <p>Officials said relief teams were deployed in Mehdipatnam and Tolichowki and
      that schools would remain closed on Wednesday as a precaution.</p>
      <p>The India Meteorological Department forecast more showers for the rest of the week,
      and asked residents to avoid travelling unless necessary.</p>
    </article>
    <footer>Copyright 2026</footer>
  </body>
</html>
"""


def _fetcher(handler, **kwargs) -> HttpFetcher:
    return HttpFetcher(transport=httpx.MockTransport(handler), **kwargs)


def test_fetch_returns_decoded_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "NanoheadsBot" in request.headers["User-Agent"]
        return httpx.Response(
            200,
            content="<p>వర్షం</p>".encode(),
            headers={"content-type": "text/html; charset=utf-8"},
        )

    with _fetcher(handler) as fetcher:
        result = fetcher.fetch("https://example.com/story")

    assert result.is_success
    assert result.status_code == 200
    assert result.content == "<p>వర్షం</p>"
    assert result.content_type.startswith("text/html")
    assert not result.truncated


def test_fetch_reports_error_status() -> None:
    with _fetcher(lambda request: httpx.Response(404, text="missing")) as fetcher:
        result = fetcher.fetch("https://example.com/missing")

    assert not result.is_success
    assert result.status_code == 404
    assert result.content == ""
    assert result.error == "url returned status 404"


def test_fetch_caps_large_bodies() -> None:
    with _fetcher(lambda request: httpx.Response(200, content=b"a" * 100), max_bytes=10) as fetcher:
        result = fetcher.fetch("https://example.com/large")

    assert result.is_success
    assert result.truncated
    assert result.content == "a" * 10


def test_fetch_keeps_body_of_exactly_max_bytes() -> None:
    with _fetcher(lambda request: httpx.Response(200, content=b"a" * 10), max_bytes=10) as fetcher:
        result = fetcher.fetch("https://example.com/exact")

    assert result.content == "a" * 10
    assert not result.truncated


def test_fetch_converts_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def slow_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with _fetcher(handler) as fetcher:
        failed = fetcher.fetch("https://example.com/down")
    with _fetcher(slow_handler) as fetcher:
        timed_out = fetcher.fetch("https://example.com/slow")

    assert not failed.is_success
    assert failed.error == "connection refused"
    assert not timed_out.is_success
    assert timed_out.error == "timeout"


def test_fetch_follows_redirects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(301, headers={"location": "https://example.com/new"})
        return httpx.Response(200, text="moved")

    with _fetcher(handler) as fetcher:
        result = fetcher.fetch("https://example.com/old")

    assert result.is_success
    assert result.content == "moved"
    assert result.url == "https://example.com/old"


def test_extract_text_finds_article_body() -> None:
    result = extract_text(ARTICLE_HTML, url="https://example.com/story")

    assert result.is_success
    assert result.method.startswith("trafilatura")
    assert "Heavy rain flooded several low-lying areas" in result.text


def test_extract_text_rejects_empty_input() -> None:
    result = extract_text("   ")

    assert not result.is_success
    assert result.error == "empty HTML input"


def test_extract_text_falls_back_to_tag_stripping() -> None:
    result = extract_text("<div>tiny</div>")

    assert result.is_success
    assert result.text == "tiny"
    assert result.method in {"regex", "trafilatura-precision", "trafilatura-recall"}
