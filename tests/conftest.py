"""Shared test fixtures: settings, fake upstream providers and an app client."""

import json

import httpx
import pytest

from friction_agent.config import Settings
from friction_agent.firecrawl import FirecrawlClient
from friction_agent.perplexity import PerplexityClient
from friction_agent.rate_limit import FixedWindowRateLimiter


class FakeFirecrawl:
    """Answers /v1/scrape and /v1/map like Firecrawl would.

    ``maps`` is keyed by the endpoint URL; an endpoint that is missing answers
    with ``success: false``.
    """

    def __init__(self, markdown='', links=None, extract=None, maps=None, fail=False):
        self.markdown = markdown
        self.links = links or []
        self.extract = extract
        self.maps = maps or {}
        self.fail = fail
        self.calls = []

    def handler(self, request):
        payload = json.loads(request.content)
        self.calls.append((request.url.path, payload))
        if self.fail:
            raise httpx.ConnectError('connection refused', request=request)

        if request.url.path == '/v1/map':
            links = self.maps.get(payload['url'])
            if links is None:
                return httpx.Response(200, json={'success': False, 'error': 'Failed to map'})
            return httpx.Response(200, json={'success': True, 'links': links})

        if payload.get('formats') == ['extract']:
            if self.extract is None:
                return httpx.Response(500, json={'success': False, 'error': 'extract failed'})
            return httpx.Response(200, json={'success': True, 'data': {'extract': self.extract}})

        return httpx.Response(200, json={
            'success': True,
            'data': {'markdown': self.markdown, 'links': self.links},
        })

    def client(self):
        return FirecrawlClient('fc-test', transport=httpx.MockTransport(self.handler))


class FakePerplexity:
    """Answers chat completions, choosing the reply by the domain filter."""

    def __init__(self, reviews=None, community=None, help_center=None, fail=False):
        self.answers = {'reviews': reviews, 'community': community, 'help_center': help_center}
        self.fail = fail
        self.calls = []

    def handler(self, request):
        payload = json.loads(request.content)
        self.calls.append(payload)
        if self.fail:
            raise httpx.ReadTimeout('timed out', request=request)

        domains = payload.get('search_domain_filter') or []
        if 'g2.com' in domains:
            answer = self.answers['reviews']
        elif 'reddit.com' in domains:
            answer = self.answers['community']
        else:
            answer = self.answers['help_center']

        if answer is None:
            return httpx.Response(503, text='unavailable')
        content, citations = answer
        return httpx.Response(200, json={
            'choices': [{'message': {'role': 'assistant', 'content': content}}],
            'citations': citations,
        })

    def client(self):
        return PerplexityClient('pplx-test', transport=httpx.MockTransport(self.handler))


def make_settings(**overrides):
    values = dict(
        firecrawl_api_key='fc-test',
        firecrawl_base_url='https://api.firecrawl.dev',
        perplexity_api_key='pplx-test',
        perplexity_base_url='https://api.perplexity.ai',
        perplexity_model='sonar',
        upstream_timeout_s=5.0,
        rate_limit_max=10,
        rate_limit_window_s=3600,
        cors_origins=['*'],
        log_level='INFO',
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def api_keys(monkeypatch):
    monkeypatch.setenv('FIRECRAWL_API_KEY', 'fc-test')
    monkeypatch.setenv('PERPLEXITY_API_KEY', 'pplx-test')


@pytest.fixture
def self_serve_site():
    """A small unknown product with sign-up, templates and a docs portal."""
    return FakeFirecrawl(
        markdown='Acme helps teams ship. Sign up free and pick from 40 templates.',
        links=['https://acme.io/pricing', 'https://acme.io/signup'],
        extract={'mainNavItems': ['Product', 'Pricing', 'Docs'], 'dropdownMenuItems': [], 'totalNavDepth': 1},
        maps={
            'https://acme.io': ['https://acme.io/docs/start', 'https://acme.io/blog/launch'],
            'https://docs.acme.io': ['https://docs.acme.io/docs/api', 'https://docs.acme.io/guide/setup'],
        },
    )


@pytest.fixture
def app_client(monkeypatch, api_keys):
    """TestClient with a fresh rate limiter and fake upstream providers."""
    from fastapi.testclient import TestClient

    import friction_agent.analyzer as analyzer
    import friction_agent.main as main

    firecrawl = FakeFirecrawl()
    perplexity = FakePerplexity()
    monkeypatch.setattr(main, 'rate_limiter', FixedWindowRateLimiter(max_requests=10, window_seconds=3600))
    monkeypatch.setattr(analyzer, '_build_clients', lambda s: (firecrawl.client(), perplexity.client()))

    with TestClient(main.app) as client:
        client.firecrawl = firecrawl
        client.perplexity = perplexity
        yield client
