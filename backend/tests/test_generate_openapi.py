"""Tests for the OpenAPI schema generator script."""

from scripts.generate_openapi import generate_schema


class TestGenerateSchema:
    def test_contains_storefront_paths(self):
        paths = generate_schema()["paths"]
        assert "/v1/orders/" in paths
        assert "/v1/orders/validate-coupon" in paths
        assert "/v1/orders/{order_id}/status" in paths
        assert "/v1/coupons/{code}/usage" in paths
        assert "/v1/reports/summary" in paths
        assert "/v1/plans/" in paths

    def test_documents_order_error_body(self):
        schema = generate_schema()
        responses = schema["paths"]["/v1/orders/"]["post"]["responses"]
        assert "400" in responses
        assert "500" in responses
        assert "OrderErrorResponse" in schema["components"]["schemas"]

    def test_tags(self):
        tags = {t["name"] for t in generate_schema()["tags"]}
        assert tags == {"Plans", "Orders", "Coupons", "Reports"}
