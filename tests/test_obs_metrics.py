"""Tests for healthboard.observability.metrics."""

import unittest
from unittest.mock import patch

from prometheus_client import REGISTRY

from healthboard.observability.testing import reset_metrics


class TestMetricFactories(unittest.TestCase):
    """Verify create_* functions and idempotent registration."""

    def setUp(self):
        reset_metrics()

    def tearDown(self):
        reset_metrics()

    def test_create_counter_basic(self):
        from healthboard.observability.metrics import create_counter

        c = create_counter("test_counter_basic", "A test counter")
        c.inc()
        self.assertEqual(c._value.get(), 1.0)

    def test_create_counter_idempotent(self):
        from healthboard.observability.metrics import create_counter

        c1 = create_counter("test_counter_idem", "counter")
        c2 = create_counter("test_counter_idem", "counter")
        self.assertIs(c1, c2)

    def test_create_counter_with_labels(self):
        from healthboard.observability.metrics import create_counter

        c = create_counter("test_counter_labels", "counter", ["endpoint", "outcome"])
        c.labels(endpoint="query", outcome="success").inc(3)
        self.assertEqual(c.labels(endpoint="query", outcome="success")._value.get(), 3.0)

    def test_create_histogram_with_buckets(self):
        from healthboard.observability.metrics import create_histogram

        h = create_histogram("test_hist_buckets", "A test histogram", buckets=[0.1, 0.5, 1.0])
        h.observe(0.3)
        self.assertGreater(h._sum.get(), 0)

    def test_create_histogram_idempotent(self):
        from healthboard.observability.metrics import create_histogram

        h1 = create_histogram("test_hist_idem", "hist", labelnames=["endpoint"])
        h2 = create_histogram("test_hist_idem", "hist", labelnames=["endpoint"])
        self.assertIs(h1, h2)

    def test_create_gauge(self):
        from healthboard.observability.metrics import create_gauge

        g = create_gauge("test_gauge_basic", "A test gauge")
        g.set(4)
        self.assertEqual(g._value.get(), 4.0)

    def test_create_service_info(self):
        from healthboard.observability.metrics import create_service_info

        create_service_info("test_service_info", "9.9.9", "staging")
        value = REGISTRY.get_sample_value(
            "test_service_info_info", {"version": "9.9.9", "environment": "staging"}
        )
        self.assertEqual(value, 1.0)


    def test_service_info_backend_label(self):
        from healthboard.observability.metrics import create_service_info

        create_service_info("test_backend_info", "1.2.3", "ci", backend_url="http://prom:9090")
        value = REGISTRY.get_sample_value(
            "test_backend_info_info",
            {"version": "1.2.3", "environment": "ci", "backend": "http://prom:9090"},
        )
        self.assertEqual(value, 1.0)


class TestStartMetricsServer(unittest.TestCase):
    @patch("healthboard.observability.metrics.start_http_server")
    def test_started(self, mock_start):
        from healthboard.observability.metrics import start_metrics_server

        self.assertTrue(start_metrics_server(9464))
        mock_start.assert_called_once_with(9464)

    @patch(
        "healthboard.observability.metrics.start_http_server",
        side_effect=OSError("address in use"),
    )
    def test_bind_failure_is_logged(self, mock_start):
        from healthboard.observability.metrics import start_metrics_server

        with self.assertLogs("healthboard.observability.metrics", level="WARNING") as logs:
            self.assertFalse(start_metrics_server(9464))
        self.assertIn("address in use", logs.output[0])


class TestResetMetrics(unittest.TestCase):
    def test_unregisters_user_collectors(self):
        from healthboard.observability.metrics import create_counter

        create_counter("test_counter_reset", "counter").inc()
        reset_metrics()
        self.assertIsNone(REGISTRY.get_sample_value("test_counter_reset_total"))


if __name__ == "__main__":
    unittest.main()
