"""Tests for retry attempt arithmetic and failure classification."""

import pytest

from job_status import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    RETRY_OFFSET,
    InMemoryStatusStore,
    JobDescriptor,
    Status,
    StatusMiddleware,
)


def descriptor(**kwargs) -> JobDescriptor:
    return JobDescriptor(job_class="TrackedJob", job_id="jid", **kwargs)


@pytest.fixture
def mw():
    return StatusMiddleware(InMemoryStatusStore())


class TestConstants:

    def test_defaults(self):
        assert DEFAULT_MAX_RETRY_ATTEMPTS == 25
        assert RETRY_OFFSET == 1


class TestAttemptNumber:
    """retry_attempt_number follows the processor's retry_count."""

    def test_first_attempt(self, mw):
        assert mw.retry_attempt_number(descriptor()) == 0

    def test_offset_applied(self, mw):
        assert mw.retry_attempt_number(descriptor(retry_count=0)) == 1
        assert mw.retry_attempt_number(descriptor(retry_count=23)) == 24

    def test_legacy_offset(self):
        mw = StatusMiddleware(InMemoryStatusStore(), retry_offset=0)

        assert mw.retry_attempt_number(descriptor(retry_count=23)) == 23


class TestRetryCap:

    def test_true_uses_default_cap(self, mw):
        assert mw.retry_attempts_from(True) == 25

    def test_integer_cap(self, mw):
        assert mw.retry_attempts_from(5) == 5

    def test_configured_default_cap(self):
        mw = StatusMiddleware(InMemoryStatusStore(), default_max_retry_attempts=3)

        assert mw.retry_attempts_from(True) == 3


class TestClassifyFailure:
    """classify_failure decides between retrying and failed."""

    @pytest.mark.parametrize("retry,retry_count,expected", [
        (None, None, Status.FAILED),
        (False, None, Status.FAILED),
        (0, None, Status.FAILED),
        (True, None, Status.RETRYING),
        (True, 23, Status.RETRYING),
        (True, 24, Status.FAILED),
        (True, 30, Status.FAILED),
        (1, None, Status.RETRYING),
        (1, 0, Status.FAILED),
        (3, 1, Status.RETRYING),
        (3, 2, Status.FAILED),
    ])
    def test_classification(self, mw, retry, retry_count, expected):
        assert mw.classify_failure(descriptor(retry=retry, retry_count=retry_count)) is expected

    def test_legacy_offset_allows_one_more_retry(self):
        mw = StatusMiddleware(InMemoryStatusStore(), retry_offset=0)

        assert mw.classify_failure(descriptor(retry=True, retry_count=24)) is Status.RETRYING
        assert mw.classify_failure(descriptor(retry=True, retry_count=25)) is Status.FAILED
