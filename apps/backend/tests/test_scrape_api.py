"""
Tests for POST /api/scrape.
"""

import httpx
from prometheus_client import REGISTRY

from core.net import HTTPClient, get_page_fetcher
from pipeline.errors import ParseError


def scrape_count(outcome):
    return REGISTRY.get_sample_value("tracker_scrape_requests_total", {"outcome": outcome}) or 0.0


def use_fetcher(app, fetcher):
    app.dependency_overrides[get_page_fetcher] = lambda: fetcher


class TestMissingUrl:

    def test_empty_body_object(self, app, client, make_fetcher):
        fetcher = make_fetcher(html="<h1>x</h1>")
        use_fetcher(app, fetcher)

        response = client.post("/api/scrape", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing URL"}
        assert fetcher.calls == []

    def test_blank_url(self, app, client, make_fetcher):
        fetcher = make_fetcher(html="<h1>x</h1>")
        use_fetcher(app, fetcher)

        response = client.post("/api/scrape", json={"url": "   "})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing URL"}
        assert fetcher.calls == []

    def test_no_body(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher())
        response = client.post("/api/scrape")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing URL"}

    def test_non_json_body(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher())
        response = client.post(
            "/api/scrape", content=b"url=https://x.com", headers={"Content-Type": "text/plain"}
        )
        assert response.status_code == 400

    def test_missing_url_is_counted(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher())
        before = scrape_count("missing_url")
        client.post("/api/scrape", json={})
        assert scrape_count("missing_url") == before + 1


class TestSuccess:

    def test_remote_posting(self, app, client, make_fetcher):
        html = """
        <html>
          <head><meta property="og:title" content="Backend Intern"></head>
          <body><p>Location: Remote, USA</p></body>
        </html>
        """
        fetcher = make_fetcher(html=html)
        use_fetcher(app, fetcher)

        response = client.post("/api/scrape", json={"url": "https://jobs.example.com/backend-intern"})

        assert response.status_code == 200
        assert response.json() == {"title": "Backend Intern", "company": "", "location": "Remote"}
        assert fetcher.calls == ["https://jobs.example.com/backend-intern"]

    def test_onsite_posting(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher(html='<h1>Software Engineer</h1><div class="company-name">Acme Corp</div>'))

        response = client.post("/api/scrape", json={"url": "https://acme.example.com/jobs/1"})

        assert response.status_code == 200
        assert response.json() == {"title": "Software Engineer", "company": "Acme Corp", "location": "N/A"}

    def test_response_always_has_three_string_fields(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher(html=""))

        data = client.post("/api/scrape", json={"url": "https://example.com"}).json()

        assert set(data) == {"title", "company", "location"}
        assert data == {"title": "", "company": "", "location": "N/A"}


class TestFailures:

    def test_unreachable_host(self, app, client):
        def handler(request):
            raise httpx.ConnectError("Name or service not known", request=request)

        use_fetcher(app, HTTPClient(transport=httpx.MockTransport(handler)))
        before = scrape_count("fetch_error")

        response = client.post("/api/scrape", json={"url": "https://unreachable.invalid/job"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to parse job posting."}
        assert scrape_count("fetch_error") == before + 1

    def test_non_success_status(self, app, client):
        use_fetcher(app, HTTPClient(transport=httpx.MockTransport(lambda r: httpx.Response(404))))

        response = client.post("/api/scrape", json={"url": "https://example.com/expired"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to parse job posting."}

    def test_unsupported_scheme(self, app, client, make_fetcher):
        use_fetcher(app, HTTPClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))

        response = client.post("/api/scrape", json={"url": "file:///etc/passwd"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to parse job posting."}

    def test_malformed_ipv6_url(self, app, client):
        use_fetcher(app, HTTPClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
        before = scrape_count("fetch_error")

        response = client.post("/api/scrape", json={"url": "http://[::1/job"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to parse job posting."}
        assert scrape_count("fetch_error") == before + 1

    def test_unexpected_error_does_not_leak(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher(error=RuntimeError("socket pool exhausted: secret detail")))
        before = scrape_count("error")

        response = client.post("/api/scrape", json={"url": "https://example.com/job"})

        assert response.status_code == 500
        assert "secret" not in response.text
        assert response.json() == {"error": "Failed to parse job posting."}
        assert scrape_count("error") == before + 1

    def test_parse_error_does_not_leak(self, app, client, make_fetcher):
        use_fetcher(app, make_fetcher(error=ParseError("parser exploded: secret detail")))

        response = client.post("/api/scrape", json={"url": "https://example.com"})

        assert response.status_code == 500
        assert "secret" not in response.text
        assert response.json() == {"error": "Failed to parse job posting."}
