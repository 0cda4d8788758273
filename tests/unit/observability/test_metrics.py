"""MetricsCollector tests: counters, labels, histogram, thread safety, reset."""

import threading

from arcflow.observability.metrics import MetricsCollector


def test_metrics_counter_increment():
    m = MetricsCollector()
    m.increment("execution_count")
    m.increment("execution_count", 2)
    assert m.export_metrics()["counters"]["execution_count"] == 3
    assert m.get_counter("execution_count") == 3


def test_metrics_candidate_labels_separated():
    m = MetricsCollector()
    m.increment("provider_attempt_count", 1, candidate="gemini-3-flash")
    m.increment("provider_attempt_count", 2, candidate="gemini-2.5-flash")
    labels = m.export_metrics()["counters_by_labels"]["provider_attempt_count"]
    assert sum(labels.values()) == 3
    assert m.get_counter("provider_attempt_count", candidate="gemini-2.5-flash") == 2


def test_metrics_failure_count_by_category():
    m = MetricsCollector()
    m.increment("failure_count", 1, category="PROVIDER_ERROR")
    m.increment("failure_count", 1, category="PROVIDER_ERROR")
    m.increment("failure_count", 1, category="EXECUTION_ERROR")
    assert m.get_counter("failure_count", category="PROVIDER_ERROR") == 2
    assert m.get_counter("failure_count", category="EXECUTION_ERROR") == 1


def test_metrics_unknown_counter_is_zero():
    assert MetricsCollector().get_counter("nothing", candidate="x") == 0


def test_metrics_histogram_tracks_latency():
    m = MetricsCollector()
    m.observe_latency("execution_latency", 10.5)
    m.observe_latency("execution_latency", 20.0)
    m.observe_latency("provider_turn_latency", 5.0, candidate="gemini-3-flash")
    h = m.export_metrics()["histograms"]
    assert h["execution_latency"] == {"count": 2, "sum": 30.5}
    assert "provider_turn_latency:candidate=gemini-3-flash" in h


def test_metrics_thread_safe():
    m = MetricsCollector()

    def inc():
        for _ in range(100):
            m.increment("gate_decision_count")

    threads = [threading.Thread(target=inc) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert m.export_metrics()["counters"]["gate_decision_count"] == 1000


def test_metrics_reset():
    m = MetricsCollector()
    m.increment("x")
    m.increment("y", category="z")
    m.observe_latency("y", 1.0)
    m.reset()
    out = m.export_metrics()
    assert out["counters"] == {}
    assert out["counters_by_labels"] == {}
    assert out["histograms"] == {}
