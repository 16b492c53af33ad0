"""
Unit Tests for the retry decorator.
"""

from dataclasses import dataclass

import pytest

from crawler.retry import RetryPolicy, retrying


@dataclass
class Result:
    value: str
    retryable: bool = False


class TestRetrying:

    def test_non_retryable_result_returns_immediately(self):
        calls = []

        @retrying(RetryPolicy.no_wait(max_attempts=3))
        def stage():
            calls.append(1)
            return Result("ok")

        assert stage().value == "ok"
        assert len(calls) == 1

    def test_retries_until_result_is_not_retryable(self):
        results = iter([Result("fail", True), Result("fail", True), Result("ok")])

        @retrying(RetryPolicy.no_wait(max_attempts=3))
        def stage():
            return next(results)

        assert stage().value == "ok"

    def test_exhausted_attempts_return_last_result(self):
        calls = []

        @retrying(RetryPolicy.no_wait(max_attempts=2))
        def stage():
            calls.append(1)
            return Result(f"fail-{len(calls)}", True)

        result = stage()
        assert result.retryable
        assert result.value == "fail-2"
        assert len(calls) == 2

    def test_exceptions_are_not_retried(self):
        calls = []

        @retrying(RetryPolicy.no_wait(max_attempts=3))
        def stage():
            calls.append(1)
            raise KeyError("boom")

        with pytest.raises(KeyError):
            stage()
        assert len(calls) == 1

    def test_passes_arguments_through(self):
        @retrying(RetryPolicy.no_wait())
        def stage(a, b=0):
            return Result(f"{a}-{b}")

        assert stage("x", b=2).value == "x-2"
