"""
Tests for the error handling decorators.
"""
import asyncio
import logging

import pytest

from dynamoscan.exceptions import APIConnectionError, APITimeoutError, DynamoScanError, UpstreamFetchError
from dynamoscan.utils.error_handling import async_handle_errors, async_retry_on_failure


def run(coro):
    return asyncio.run(coro)


class TestAsyncHandleErrors:
    """Test cases for async_handle_errors."""

    def test_passthrough_on_success(self):
        @async_handle_errors()
        async def ok():
            return "ok"

        assert run(ok()) == "ok"

    def test_maps_by_most_specific_type(self):
        @async_handle_errors(
            exceptions=(LookupError,),
            log_level=logging.DEBUG,
            error_mapping={
                LookupError: lambda e: UpstreamFetchError(f"lookup: {e}"),
                KeyError: lambda e: APITimeoutError(f"key: {e}"),
            },
        )
        async def fails():
            raise KeyError("x")

        with pytest.raises(APITimeoutError):
            run(fails())

    def test_dynamoscan_errors_pass_through(self):
        @async_handle_errors(error_mapping={Exception: lambda e: UpstreamFetchError("mapped")})
        async def fails():
            raise APIConnectionError("original")

        with pytest.raises(APIConnectionError, match="original"):
            run(fails())

    def test_default_value(self):
        @async_handle_errors(exceptions=(ValueError,), default=[])
        async def fails():
            raise ValueError("bad")

        assert run(fails()) == []

    def test_unmapped_errors_reraise(self):
        @async_handle_errors(exceptions=(ValueError,))
        async def fails():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            run(fails())

    def test_uncaught_types_are_untouched(self):
        @async_handle_errors(exceptions=(ValueError,), default="ignored")
        async def fails():
            raise TypeError("other")

        with pytest.raises(TypeError):
            run(fails())


class TestAsyncRetryOnFailure:
    """Test cases for async_retry_on_failure."""

    def test_retries_until_success(self):
        calls = []

        @async_retry_on_failure(max_retries=3, initial_delay=0.001, exceptions=(APIConnectionError,))
        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise APIConnectionError("refused")
            return "ok"

        assert run(flaky()) == "ok"
        assert len(calls) == 3

    def test_gives_up_after_max_retries(self):
        calls = []

        @async_retry_on_failure(max_retries=2, initial_delay=0.001, exceptions=(APIConnectionError,))
        async def down():
            calls.append(1)
            raise APIConnectionError("refused")

        with pytest.raises(APIConnectionError):
            run(down())
        assert len(calls) == 3

    def test_non_retryable_errors_fail_fast(self):
        calls = []

        @async_retry_on_failure(max_retries=5, initial_delay=0.001, exceptions=(APIConnectionError,))
        async def broken():
            calls.append(1)
            raise DynamoScanError("fatal")

        with pytest.raises(DynamoScanError):
            run(broken())
        assert len(calls) == 1

    def test_instance_max_retries_takes_precedence(self):
        class Client:
            max_retries = 0
            calls = 0

            @async_retry_on_failure(max_retries=5, initial_delay=0.001, exceptions=(APITimeoutError,))
            async def fetch(self):
                self.calls += 1
                raise APITimeoutError("slow")

        client = Client()
        with pytest.raises(APITimeoutError):
            run(client.fetch())
        assert client.calls == 1
