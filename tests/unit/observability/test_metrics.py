"""MetricsCollector tests: counters, categories, histogram, thread safety."""

import threading

from app.observability.metrics import MetricsCollector


def test_metrics_counter_increment():
    m = MetricsCollector()
    m.increment("request_count")
    m.increment("request_count", 2)
    assert m.export_metrics()["counters"]["request_count"] == 3
    assert m.count("request_count") == 3


def test_metrics_categories_separated():
    m = MetricsCollector()
    m.increment("lock_contention", 1, category="register")
    m.increment("lock_contention", 2, category="update")
    labels = m.export_metrics()["counters_by_labels"]["lock_contention"]
    assert labels["lock_contention:category=register"] == 1
    assert m.count("lock_contention", category="update") == 2
    assert m.count("lock_contention") == 0


def test_metrics_histogram_tracks_latency():
    m = MetricsCollector()
    m.observe_latency("http_request_latency", 10.5, category="GET")
    m.observe_latency("http_request_latency", 20.0, category="GET")
    h = m.export_metrics()["histograms"]["http_request_latency:category=GET"]
    assert h["count"] == 2
    assert h["sum"] == 30.5


def test_metrics_thread_safe():
    m = MetricsCollector()

    def work():
        for _ in range(1000):
            m.increment("n")

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert m.count("n") == 4000


def test_metrics_reset():
    m = MetricsCollector()
    m.increment("n")
    m.reset()
    assert m.export_metrics()["counters"] == {}
