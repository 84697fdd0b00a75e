"""Tests for web UI routes (server-rendered form and report)."""

import httpx
from httpx import AsyncClient


def _fetch_returning(html=None, exc=None):
    async def fake_fetch(client, url):
        if exc is not None:
            raise exc
        return html

    return fake_fetch


async def test_index_page(client: AsyncClient):
    """Form renders without a URL."""
    resp = await client.get("/")
    assert resp.status_code == 200
    assert 'action="/report"' in resp.text
    assert "GEO Audit" in resp.text


async def test_report_without_url(client: AsyncClient):
    resp = await client.get("/report")
    assert resp.status_code == 400
    assert "URL is required" in resp.text


async def test_report_page(client: AsyncClient, rich_page, monkeypatch):
    """Report page lists every category and check."""
    monkeypatch.setattr("app.services.geo_audit_service.fetch_page", _fetch_returning(rich_page))
    resp = await client.get("/report", params={"url": "example.com/post"})
    assert resp.status_code == 200
    assert "What Is GEO? A Practical Guide to AI Search" in resp.text
    assert "GRADE A+" in resp.text
    for category in ("Schema Markup", "Content Structure", "E-E-A-T Signals", "Meta &amp; Technical"):
        assert category in resp.text
    assert "Statistics &amp; Data Points" in resp.text
    assert "dot-passed" in resp.text
    assert "Search Intelligence" not in resp.text


async def test_report_page_shows_recommendations(client: AsyncClient, bare_page, monkeypatch):
    monkeypatch.setattr("app.services.geo_audit_service.fetch_page", _fetch_returning(bare_page))
    resp = await client.get("/report", params={"url": "example.com"})
    assert resp.status_code == 200
    assert "Untitled Page" in resp.text
    assert "dot-failed" in resp.text
    assert "dot-warning" in resp.text
    assert "Add JSON-LD schema markup to help AI understand your content structure" in resp.text


async def test_report_fetch_error_inline(client: AsyncClient, monkeypatch):
    request = httpx.Request("GET", "https://example.com")
    exc = httpx.HTTPStatusError("404", request=request, response=httpx.Response(404, request=request))
    monkeypatch.setattr("app.services.geo_audit_service.fetch_page", _fetch_returning(exc=exc))
    resp = await client.get("/report", params={"url": "example.com/missing"})
    assert resp.status_code == 400
    assert "Page not found (404). Please check the URL." in resp.text
    assert 'value="example.com/missing"' in resp.text


async def test_report_unexpected_error(client: AsyncClient, monkeypatch):
    monkeypatch.setattr("app.services.geo_audit_service.fetch_page", _fetch_returning(exc=RuntimeError("x")))
    resp = await client.get("/report", params={"url": "example.com"})
    assert resp.status_code == 500
    assert "Failed to analyze the URL. Please try again." in resp.text
