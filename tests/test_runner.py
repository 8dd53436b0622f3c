import asyncio

import requests

from telemetry_harness.agent.engine import TestValidation
from telemetry_harness.agent.runner import RunReport, TestRunner
from telemetry_harness.models.expectation import TestCase
from telemetry_harness.telemetry.ingestion import TelemetryStore

from conftest import envelope, metric_envelope, request_envelope


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code


class FakeSession:
    """Session stub recording requested URLs."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        response = self.responses.get(url, FakeResponse())
        if isinstance(response, Exception):
            raise response
        return response


def make_runner(store, expectations, responses=None):
    session = FakeSession(responses or {})
    sleeps = []

    async def sleep(seconds):
        sleeps.append(seconds)

    runner = TestRunner(
        TestValidation(store, expectations),
        base_url="http://app:9001/",
        session=session,
        timeout=3,
        sleep=sleep,
    )
    return runner, session, sleeps


def verdicts(report):
    return [(test.path, ok) for test, ok in report.results]


def test_run_issues_requests_then_validates(store, expectations):
    runner, session, sleeps = make_runner(store, expectations)

    report = runner.run([TestCase.of("/test", ["http_dependency"])], settle_seconds=2)

    assert session.calls == [("http://app:9001/test", 3)]
    assert sleeps == [2]
    assert verdicts(report) == [("/test", True)]
    assert report.perf_counters_passed is None
    assert report.passed


def test_failed_request_is_not_validated(store, expectations):
    responses = {
        "http://app:9001/down": requests.ConnectionError("refused"),
        "http://app:9001/broken": FakeResponse(500),
    }
    runner, _, _ = make_runner(store, expectations, responses)

    report = runner.run(
        [TestCase.of("/test", ["http_dependency"]), TestCase.of("/down", []), TestCase.of("/broken", [])],
        settle_seconds=0,
    )

    assert verdicts(report) == [("/test", True), ("/down", False), ("/broken", False)]
    assert not report.passed
    # failed requests never reached validation
    assert runner.validation.failed_count == 0


def test_tests_sharing_a_path_keep_their_own_verdicts(store, expectations):
    runner, session, _ = make_runner(store, expectations)
    passing = TestCase.of("/test", ["http_dependency"])
    failing = TestCase.of("/test", ["custom_event"])

    report = runner.run([passing, failing], settle_seconds=0)

    assert len(session.calls) == 2
    assert report.results == [(passing, True), (failing, False)]
    assert not report.passed


def test_collector_on_same_loop_receives_telemetry_during_settle(expectations):
    store = TelemetryStore([request_envelope("/test")])
    session = FakeSession({})
    runner = TestRunner(TestValidation(store, expectations), base_url="http://app:9001",
                        session=session, timeout=3)

    async def collector():
        await asyncio.sleep(0)
        store.add(envelope("RemoteDependencyData", {"name": "GET /", "type": "HTTP"}))

    async def scenario():
        task = asyncio.ensure_future(collector())
        report = await runner.run_async([TestCase.of("/test", ["http_dependency"])], settle_seconds=0.05)
        await task
        return report

    report = asyncio.run(scenario())

    assert verdicts(report) == [("/test", True)]


def test_perf_counters_are_part_of_the_report(expectations):
    store = TelemetryStore([metric_envelope("requests/count")])
    runner, _, _ = make_runner(store, expectations)

    report = runner.run([], settle_seconds=0, perf_counters=["requests/count"], min_count=2)

    assert report.perf_counters_passed is False
    assert not report.passed


def test_report_passed_semantics():
    test = TestCase.of("/a", [])

    assert RunReport().passed
    assert RunReport(results=[(test, True)], perf_counters_passed=True).passed
    assert not RunReport(results=[(test, False)]).passed
