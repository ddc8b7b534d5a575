"""Tests for Prometheus metric helpers."""

from prometheus_client import REGISTRY

from partnercenter_bindings import metrics


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetrics:
    """Recording helpers update the registered collectors."""

    def test_credential_acquisition(self):
        """Counter and histogram both move."""
        before = sample(
            "partner_center_credential_acquisitions_total",
            strategy="direct_token",
            status="success",
        )
        count_before = sample(
            "partner_center_credential_acquisition_seconds_count", strategy="direct_token"
        )

        metrics.record_credential_acquisition("direct_token", "success", 0.01)

        assert (
            sample(
                "partner_center_credential_acquisitions_total",
                strategy="direct_token",
                status="success",
            )
            == before + 1
        )
        assert (
            sample(
                "partner_center_credential_acquisition_seconds_count",
                strategy="direct_token",
            )
            == count_before + 1
        )

    def test_http_retry(self):
        before = sample("partner_center_http_retries_total", reason="throttled")
        metrics.record_http_retry("throttled")
        assert sample("partner_center_http_retries_total", reason="throttled") == before + 1

    def test_cached_clients_gauge(self):
        metrics.set_cached_clients(4)
        assert sample("partner_center_cached_http_clients") == 4.0
