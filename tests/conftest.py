from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import settings

# Override settings for tests: no external providers, no email delivery
settings.app_env = "development"
settings.dataforseo_login = ""
settings.dataforseo_password = ""
settings.resend_api_key = ""
settings.contact_url = ""

from app.core.rate_limit import limiter  # noqa: E402
from app.main import app  # noqa: E402

limiter.enabled = False

PAGE_URL = "https://example.com/blog/what-is-geo"

# 42 chars, three times, stripped -> 125 chars
META_DESCRIPTION = "Generative engine optimisation explained. " * 3

# Passes every HTML check
RICH_PAGE = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <title>What Is GEO? A Practical Guide to AI Search</title>
  <meta name="description" content="{META_DESCRIPTION}">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link rel="canonical" href="{PAGE_URL}">
  <script type="application/ld+json">
  {{"@context": "https://schema.org", "@graph": [
    {{"@type": "FAQPage"}},
    {{"@type": "Article", "headline": "What is GEO?"}},
    {{"@type": "Person", "name": "Jane Smith"}}
  ]}}
  </script>
</head>
<body>
  <h1>What Is GEO?</h1>
  <p class="byline">Written by Jane Smith &middot; <time datetime="2024-03-01">March 1, 2024</time></p>
  <div class="key-takeaways">
    <p>Key takeaways: answer engines quote pages that answer questions directly.</p>
  </div>
  <h2>What is generative engine optimisation?</h2>
  <p>GEO is a practice for making content easy for AI answer engines to quote.</p>
  <p>Around 40% of searches now show an AI generated answer above the links.</p>
  <h2>How does it work?</h2>
  <ul>
    <li>Answer the question in the first sentence</li>
    <li>Mark up the page with structured data</li>
    <li>Cite primary sources</li>
  </ul>
  <ol>
    <li>Audit your top pages</li>
    <li>Add FAQ markup</li>
    <li>Measure AI citations</li>
  </ol>
  <p>Sources: <a href="https://www.google.com/search/docs">Google</a> and
     <a href="https://schema.org/FAQPage">schema.org</a>.</p>
  <div class="author-bio"><p>Jane Smith is a search consultant with ten years of experience.</p></div>
</body>
</html>
"""

# Fails every HTML check except a warning on paragraph length
BARE_PAGE = "<html><head></head><body><p>Hello</p></body></html>"


@pytest.fixture
def rich_page() -> str:
    return RICH_PAGE


@pytest.fixture
def bare_page() -> str:
    return BARE_PAGE


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
