"""End-to-end pipeline tests with fake Firecrawl and Perplexity providers."""

import pytest

from conftest import FakeFirecrawl, FakePerplexity, make_settings
from friction_agent.analyzer import NavigationProfile, analyze
from friction_agent.errors import ForbiddenTarget, MissingCredentials, ValidationFailed
from friction_agent.models import AnalyzeRequest


def run(url, firecrawl, perplexity, settings=None, debug=False):
    return analyze(
        AnalyzeRequest(url=url, debug=debug),
        settings or make_settings(),
        scraper=firecrawl.client(),
        search=perplexity.client(),
    )


def assert_bounded(result):
    for value in (
        result.click_tax_score,
        result.total_cognitive_load,
        result.overall_score,
        result.documentation_score,
        result.community_health_score,
    ):
        assert 0 <= value <= 100
    sentiment = result.review_sentiment
    assert sentiment.positive + sentiment.neutral + sentiment.negative == 100
    expected = max(0, min(100, int(100 - 0.5 * result.click_tax_score - 0.5 * result.total_cognitive_load + 0.5)))
    assert result.overall_score == expected


class TestKnownProduct:

    def test_all_upstreams_down_still_scores_from_baseline(self):
        result = run('linear.app', FakeFirecrawl(fail=True), FakePerplexity(fail=True))

        assert result.product_name == 'Linear'
        assert result.url == 'https://linear.app/'
        assert 10 <= result.click_tax_score <= 35
        assert 5 <= result.total_cognitive_load <= 30
        assert result.click_tax_score == 22
        assert result.total_cognitive_load == 17
        assert result.documentation_score == 40
        assert result.community_health_score == 30
        assert result.data_counts.docs_found == 0
        assert result.data_counts.reviews_scanned == 25
        assert result.data_counts.reddit_threads == 8
        assert result.data_counts.help_articles == 5
        assert_bounded(result)

    def test_one_source_per_category_when_scrape_fails(self):
        result = run('linear.app', FakeFirecrawl(fail=True), FakePerplexity(fail=True))

        categories = [s.category for s in result.external_sources]
        assert categories == ['documentation', 'reviews', 'community', 'help_center']
        assert result.external_sources[1].url == 'https://www.g2.com/search?query=Linear'
        assert result.external_sources[0].url == 'https://linear.app/docs'

    def test_known_product_skips_scope_check(self):
        firecrawl = FakeFirecrawl(markdown='Book a demo. Contact sales.')

        result = run('https://www.salesforce.com', firecrawl, FakePerplexity())

        assert result.product_name == 'Salesforce'
        assert 85 <= result.click_tax_score <= 100
        assert result.time_to_value_estimate.endswith('days') or result.time_to_value_estimate.endswith('weeks')


class TestUnknownProduct:

    def test_full_pipeline(self, self_serve_site):
        perplexity = FakePerplexity(
            reviews=('Users say it is easy and intuitive, with a quick setup.', ['https://g2.com/a', 'https://capterra.com/b']),
            community=('Some say settings are hard to find.', ['https://reddit.com/r/1', 'https://reddit.com/r/2', 'https://reddit.com/r/3']),
            help_center=('Email and chat support.', ['https://acme.io/help']),
        )

        result = run('acme.io', self_serve_site, perplexity, debug=True)

        assert result.product_name == 'Acme'
        assert result.data_counts.pages_analyzed == 3
        assert result.data_counts.nav_item_count == 3
        assert result.data_counts.nav_depth == 1
        assert result.data_counts.docs_found == 3
        assert result.documentation_score == pytest.approx(43.6)
        assert result.community_health_score == 60
        assert result.data_counts.reviews_scanned == 25
        assert result.data_counts.reddit_threads == 9
        assert result.data_counts.help_articles == 5
        assert [s.category for s in result.external_sources] == [
            'product', 'documentation', 'reviews', 'community', 'help_center',
        ]
        assert result.external_sources[1].url == 'https://acme.io/docs/start'
        assert result.debug_info['hasTemplates'] is True
        assert result.debug_info['signup']['hasSignup'] is True
        assert 'urlPattern' in result.debug_info['signup']
        assert result.debug_info['navComplexityCount'] == 1
        assert result.debug_info['knownBaseline'] is None
        assert 'total' in result.debug_info['timingsMs']
        assert 75 <= result.lighthouse_performance <= 95
        assert 85 <= result.lighthouse_accessibility <= 97
        assert_bounded(result)

    def test_debug_info_is_omitted_by_default(self, self_serve_site):
        result = run('acme.io', self_serve_site, FakePerplexity())

        assert result.debug_info is None

    def test_long_summaries_are_truncated(self, self_serve_site):
        perplexity = FakePerplexity(reviews=('x' * 400, []), help_center=('y' * 260, []))

        result = run('acme.io', self_serve_site, perplexity)
        by_category = {s.category: s for s in result.external_sources}

        assert by_category['reviews'].summary == 'x' * 300 + '...'
        assert by_category['help_center'].summary == 'y' * 250 + '...'
        assert by_category['community'].summary == ''

    def test_missing_signup_and_docs(self):
        firecrawl = FakeFirecrawl(markdown='Enterprise data platform. Request a demo.', links=['https://helix.ai/about'])

        with pytest.raises(ValidationFailed) as exc:
            run('helix.ai', firecrawl, FakePerplexity())

        assert 'sign-up' in exc.value.message
        assert 'documentation' in exc.value.message
        assert 'Helix' in exc.value.message

    def test_missing_signup_only(self):
        firecrawl = FakeFirecrawl(
            markdown='Try our platform. Request pricing today.',
            maps={'https://helix.ai': ['https://helix.ai/docs/intro']},
        )

        with pytest.raises(ValidationFailed, match='sign-up options. Helix'):
            run('helix.ai', firecrawl, FakePerplexity())

    def test_missing_docs_only(self):
        firecrawl = FakeFirecrawl(markdown='Sign up free', maps={'https://acme.io': ['https://acme.io/blog/1']})

        with pytest.raises(ValidationFailed, match='public documentation'):
            run('acme.io', firecrawl, FakePerplexity())

    def test_scope_failure_does_not_query_search(self):
        perplexity = FakePerplexity()

        with pytest.raises(ValidationFailed):
            run('helix.ai', FakeFirecrawl(), perplexity)

        assert perplexity.calls == []

    def test_partial_doc_mapping(self, self_serve_site):
        # docs.acme.io answers, help. and support. fail
        result = run('acme.io', self_serve_site, FakePerplexity())

        mapped = [payload['url'] for path, payload in self_serve_site.calls if path == '/v1/map']
        assert sorted(mapped) == sorted([
            'https://acme.io', 'https://docs.acme.io', 'https://help.acme.io', 'https://support.acme.io',
        ])
        assert all(payload['limit'] == 500 for path, payload in self_serve_site.calls if path == '/v1/map')
        assert result.data_counts.docs_found == 3

    def test_docs_found_is_capped(self):
        links = [f'https://big.io/docs/page-{i}' for i in range(500)]
        firecrawl = FakeFirecrawl(
            markdown='Sign up',
            maps={'https://big.io': links, 'https://docs.big.io': links, 'https://help.big.io': links},
        )

        result = run('big.io', firecrawl, FakePerplexity())

        assert result.data_counts.docs_found == 1000
        assert result.documentation_score == 100


class TestGuards:

    def test_private_target_rejected_before_upstream_calls(self):
        firecrawl, perplexity = FakeFirecrawl(), FakePerplexity()

        for url in ('http://127.0.0.1', 'http://169.254.169.254', 'http://127.1', 'http://169.254.169.254.'):
            with pytest.raises(ForbiddenTarget):
                run(url, firecrawl, perplexity)

        assert firecrawl.calls == []
        assert perplexity.calls == []

    def test_missing_credentials(self):
        firecrawl = FakeFirecrawl()

        with pytest.raises(MissingCredentials):
            run('linear.app', firecrawl, FakePerplexity(), settings=make_settings(perplexity_api_key=''))

        assert firecrawl.calls == []


class TestNavigationProfile:

    def test_from_extract_coerces_values(self):
        nav = NavigationProfile.from_extract({
            'mainNavItems': ['Product', '', None, 'Pricing'],
            'dropdownMenuItems': 'not a list',
            'totalNavDepth': '2.0',
        })

        assert nav.main_nav_items == ['Product', 'Pricing']
        assert nav.dropdown_items == []
        assert nav.depth == 2

    def test_fractional_depth_is_kept(self):
        assert NavigationProfile.from_extract({'totalNavDepth': 2.5}).depth == 2.5

    @pytest.mark.parametrize('depth', [None, 0, -3, 'deep', 'inf'])
    def test_depth_defaults_to_one(self, depth):
        assert NavigationProfile.from_extract({'totalNavDepth': depth}).depth == 1
