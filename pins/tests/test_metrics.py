from unittest.mock import MagicMock, patch

import redis
from django.test import SimpleTestCase, override_settings

from pins.services import metrics


@override_settings(PIN_METRICS_ENABLED=True)
class MetricsTests(SimpleTestCase):
    @patch("pins.services.metrics._client")
    def test_redis_outage_is_swallowed(self, mock_client):
        mock_client.return_value.exists.side_effect = redis.ConnectionError("down")
        with self.assertLogs("pins.services.metrics", level="WARNING"):
            metrics.mark_redeemed()
        mock_client.return_value.get.side_effect = redis.ConnectionError("down")
        self.assertIsNone(metrics.get_metrics())

    @patch("pins.services.metrics._client")
    def test_failures_counted_by_code(self, mock_client):
        cli = MagicMock()
        cli.exists.return_value = True
        mock_client.return_value = cli
        metrics.mark_failed("pin_expired")
        cli.pipeline.return_value.hincrby.assert_called_once_with("metrics:pins:failures", "pin_expired", 1)

    @override_settings(PIN_METRICS_ENABLED=False)
    @patch("pins.services.metrics._client")
    def test_disabled_never_touches_redis(self, mock_client):
        metrics.mark_issued(10)
        mock_client.assert_not_called()

    @patch("pins.services.metrics._client")
    def test_snapshot(self, mock_client):
        values = {"metrics:pins:redeemed": b"3", "metrics:pins:failed": b"1", "metrics:pins:issued": b"10", "metrics:pins:start": None}
        cli = mock_client.return_value
        cli.get.side_effect = values.get
        cli.hgetall.return_value = {b"pin_expired": b"1"}
        data = metrics.get_metrics()
        self.assertEqual(data["issued"], 10)
        self.assertEqual(data["failures"], {"pin_expired": 1})
        self.assertEqual(data["success_rate"], 0.75)
        self.assertIsNone(data["elapsed_seconds"])
