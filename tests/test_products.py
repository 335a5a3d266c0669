"""Tests for product naming and baseline lookup."""

from friction_agent.products import is_known_complex_product, lookup_baseline, resolve_product


class TestResolveProduct:

    def test_known_casing(self):
        product = resolve_product('hubspot.com')

        assert product.raw_name == 'hubspot'
        assert product.display_name == 'HubSpot'
        assert product.domain == 'hubspot.com'

    def test_special_names(self):
        assert resolve_product('monday.com').display_name == 'Monday.com'
        assert resolve_product('dynamics.microsoft.com').display_name == 'Dynamics 365'

    def test_unknown_product_is_capitalized(self):
        assert resolve_product('acme.io').display_name == 'Acme'
        assert resolve_product('Zeta-Labs.dev').raw_name == 'zeta-labs'


class TestBaselines:

    def test_known_baseline(self):
        baseline = lookup_baseline('linear')

        assert baseline.click_tax_base == 20
        assert baseline.cognitive_base == 15
        assert baseline.has_templates
        assert not baseline.is_complex

    def test_unknown_product_has_no_baseline(self):
        assert lookup_baseline('acme') is None
        # named but not scored
        assert lookup_baseline('github') is None

    def test_complex_products(self):
        assert is_known_complex_product('salesforce')
        assert is_known_complex_product('mysapportal')
        assert not is_known_complex_product('linear')
