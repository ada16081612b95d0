"""Unit tests for the blocking push orchestrator.

Pipeline ordering is checked with a recording transport: any failure before
the transmit stage must leave it without calls.
"""

from unittest.mock import patch

import httpx
import pytest
from prometheus_client import CONTENT_TYPE_LATEST, Counter

from prometheus_push.config import PushConfig
from prometheus_push.encoders import PrometheusTextEncoder
from prometheus_push.errors import (
    DeliveryError,
    EncodingError,
    InvalidNameError,
    InvalidURLError,
    LabelConflictError,
    LabelType,
)
from prometheus_push.models import PushMode
from prometheus_push.pusher import MetricsPusher
from prometheus_push.transports import HttpxTransport


@pytest.fixture
def pusher(recording_transport, base_url):
    return MetricsPusher(recording_transport, PrometheusTextEncoder(), base_url)


class TestConstruction:
    """Endpoint handling at construction time."""

    def test_job_root_derived_once(self, pusher, base_url):
        assert str(pusher.url) == f"{base_url}/metrics/job/"

    def test_invalid_base_url_rejected(self, recording_transport):
        with pytest.raises(InvalidURLError):
            MetricsPusher(recording_transport, PrometheusTextEncoder(), "gw:9091/x")

    def test_from_config(self):
        config = PushConfig(
            pushgateway_url="gw.internal:9091", pushgateway_strict_names=False
        )
        pusher = MetricsPusher.from_config(config)

        assert str(pusher.url) == "http://gw.internal:9091/metrics/job/"
        assert pusher.strict_names is False
        assert isinstance(pusher.transport, HttpxTransport)
        assert isinstance(pusher.encoder, PrometheusTextEncoder)
        pusher.close()

    def test_from_client_keeps_caller_client_open(self, base_url):
        client = httpx.Client()
        with MetricsPusher.from_client(client, base_url) as pusher:
            assert pusher.transport.client is client
        assert not client.is_closed
        client.close()

    def test_context_manager_closes_transport(self, recording_transport, base_url):
        with MetricsPusher(recording_transport, PrometheusTextEncoder(), base_url):
            pass
        assert recording_transport.closed


class TestPushModes:
    """Replace and add semantics at the transport boundary."""

    def test_push_all_scenario(self, pusher, recording_transport, counter_registry, base_url):
        pusher.push_all("batch1", {"instance": "host1"}, counter_registry.collect())

        assert len(recording_transport.calls) == 1
        call = recording_transport.calls[0]
        assert call.method == "PUT"
        assert str(call.url) == f"{base_url}/metrics/job/batch1/instance/host1"
        assert call.body
        assert call.content_type == CONTENT_TYPE_LATEST

    def test_push_add_issues_post(self, pusher, recording_transport, counter_registry):
        pusher.push_add("batch1", {"instance": "host1"}, counter_registry.collect())

        assert [c.method for c in recording_transport.calls] == ["POST"]

    def test_modes_share_url_and_payload(self, pusher, recording_transport, counter_registry):
        grouping = {"instance": "host1", "region": "eu"}
        pusher.push("batch1", grouping, counter_registry.collect(), PushMode.REPLACE)
        pusher.push("batch1", grouping, counter_registry.collect(), PushMode.ADD)

        put, post = recording_transport.calls
        assert (put.method, post.method) == ("PUT", "POST")
        assert put.url == post.url
        assert put.body == post.body
        assert put.content_type == post.content_type

    def test_grouping_key_named_job_allowed(self, pusher, recording_transport, counter_registry):
        pusher.push_all("batch1", {"job": "x"}, counter_registry.collect())

        assert recording_transport.calls[0].url.path == "/metrics/job/batch1/job/x"

    def test_empty_metric_set_still_pushed(self, pusher, recording_transport):
        pusher.push_all("cleanup", {}, [])

        assert len(recording_transport.calls) == 1
        assert recording_transport.calls[0].body == b""


class TestCollectors:
    """push_*_collectors gather collectors first."""

    def test_push_all_collectors(self, pusher, recording_transport):
        counter = Counter("files_total", "Files written", registry=None)
        counter.inc(5)

        pusher.push_all_collectors("export", {}, [counter])

        call = recording_transport.calls[0]
        assert call.method == "PUT"
        assert b"files_total 5.0" in call.body

    def test_push_add_collectors(self, pusher, recording_transport):
        counter = Counter("files_total", "Files written", registry=None)

        pusher.push_add_collectors("export", {}, [counter])

        assert recording_transport.calls[0].method == "POST"

    def test_registration_failure_sends_nothing(self, pusher, recording_transport):
        first = Counter("dup_total", "Duplicate", registry=None)
        second = Counter("dup_total", "Duplicate", registry=None)

        with pytest.raises(EncodingError):
            pusher.push_all_collectors("export", {}, [first, second])

        assert recording_transport.calls == []


class TestShortCircuit:
    """No network call after a validation or encoding failure."""

    def test_slash_in_job(self, pusher, recording_transport, counter_registry):
        with pytest.raises(InvalidNameError) as exc_info:
            pusher.push_all("a/b", {}, counter_registry.collect())

        assert exc_info.value.value == "a/b"
        assert recording_transport.calls == []

    def test_slash_in_grouping_value(self, pusher, recording_transport, counter_registry):
        with pytest.raises(InvalidNameError) as exc_info:
            pusher.push_add("batch1", {"dir": "tmp/out"}, counter_registry.collect())

        assert exc_info.value.value == "tmp/out"
        assert recording_transport.calls == []

    def test_slash_in_grouping_name_relaxed(self, recording_transport, counter_registry, base_url):
        pusher = MetricsPusher(
            recording_transport, PrometheusTextEncoder(), base_url, strict_names=False
        )
        pusher.push_all("batch1", {"a/b": "v"}, counter_registry.collect())

        assert len(recording_transport.calls) == 1

    def test_job_label_conflict(self, pusher, recording_transport, job_labelled_registry):
        with pytest.raises(LabelConflictError) as exc_info:
            pusher.push_all("batch1", {}, job_labelled_registry.collect())

        assert exc_info.value.label_type is LabelType.JOB
        assert exc_info.value.metric == "jobs_run"
        assert recording_transport.calls == []

    def test_grouping_label_conflict(
        self, pusher, recording_transport, instance_labelled_registry
    ):
        with pytest.raises(LabelConflictError) as exc_info:
            pusher.push_add(
                "batch1", {"instance": "host1"}, instance_labelled_registry.collect()
            )

        assert exc_info.value.label == "instance"
        assert exc_info.value.label_type is LabelType.GROUPING
        assert recording_transport.calls == []

    def test_conflict_detected_before_encoding(
        self, pusher, recording_transport, job_labelled_registry
    ):
        with patch.object(pusher.encoder, "encode") as mock_encode:
            with pytest.raises(LabelConflictError):
                pusher.push_all("batch1", {}, job_labelled_registry.collect())

        mock_encode.assert_not_called()

    def test_encoding_failure(self, pusher, recording_transport, counter_registry):
        with patch(
            "prometheus_push.encoders.text.generate_latest",
            side_effect=TypeError("unsupported value"),
        ):
            with pytest.raises(EncodingError):
                pusher.push_all("batch1", {}, counter_registry.collect())

        assert recording_transport.calls == []


class TestDelivery:
    """End to end over httpx.MockTransport."""

    def test_success_on_200(self, counter_registry, base_url):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        pusher = MetricsPusher.from_client(client, base_url)

        pusher.push_all("batch1", {"instance": "host1"}, counter_registry.collect())

        assert len(seen) == 1
        assert seen[0].method == "PUT"
        assert seen[0].url.path == "/metrics/job/batch1/instance/host1"
        assert seen[0].headers["Content-Type"] == CONTENT_TYPE_LATEST
        assert b"requests_total 1.0" in seen[0].content

    def test_delivery_error_carries_status_and_url(self, counter_registry, base_url):
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(400))
        )
        pusher = MetricsPusher.from_client(client, base_url)

        with pytest.raises(DeliveryError) as exc_info:
            pusher.push_add("batch1", {}, counter_registry.collect())

        assert exc_info.value.status_code == 400
        assert exc_info.value.url == f"{base_url}/metrics/job/batch1"


class TestLogging:
    """Structured push logging."""

    def test_success_logged_with_mode(self, pusher, counter_registry, caplog):
        pusher.push_add("batch1", {}, counter_registry.collect())

        record = next(r for r in caplog.records if r.getMessage() == "push_metrics_completed")
        assert record.job == "batch1"
        assert record.mode == "add"

    def test_failure_logged_with_stage(self, pusher, job_labelled_registry, caplog):
        with pytest.raises(LabelConflictError):
            pusher.push_all("batch1", {}, job_labelled_registry.collect())

        record = next(r for r in caplog.records if r.getMessage() == "push_metrics_failed")
        assert record.stage == "validate"
        assert record.error_type == "LabelConflictError"

    def test_collector_failure_logged_with_encode_stage(self, pusher, caplog):
        first = Counter("dup_total", "Duplicate", registry=None)
        second = Counter("dup_total", "Duplicate", registry=None)

        with pytest.raises(EncodingError):
            pusher.push_add_collectors("export", {}, [first, second])

        record = next(r for r in caplog.records if r.getMessage() == "push_metrics_failed")
        assert record.stage == "encode"
        assert record.mode == "add"

    def test_rejected_segment_logged_with_build_url_stage(
        self, pusher, recording_transport, counter_registry, caplog
    ):
        with pytest.raises(InvalidNameError):
            pusher.push_all("..", {"job": "x"}, counter_registry.collect())

        record = next(r for r in caplog.records if r.getMessage() == "push_metrics_failed")
        assert record.stage == "build_url"
        assert recording_transport.calls == []
