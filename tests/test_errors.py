"""
Tests for error kinds and tagged results
"""

import pytest

from tour_splitter.errors import ErrorKind, Result, SplitError


class TestErrorKind:
    """Test the numeric error kind enumeration"""

    def test_stable_codes(self):
        assert {kind.name: int(kind) for kind in ErrorKind} == {
            "INVALID_TOTAL": 1000,
            "INVALID_PARTICIPANT": 1001,
            "INVALID_ROLE": 1002,
            "TOUR_NOT_FOUND": 1003,
            "TOUR_CLOSED": 1004,
            "INVALID_AMOUNT": 1005,
            "ALREADY_REGISTERED": 1006,
            "AUTHORITY_NOT_SET": 1007,
            "NOT_AUTHORIZED": 1008,
            "INVALID_WEIGHT": 1009,
        }

    def test_compares_with_plain_integers(self):
        assert ErrorKind.TOUR_NOT_FOUND == 1003
        assert ErrorKind(1009) is ErrorKind.INVALID_WEIGHT


class TestResult:
    """Test Result construction and access"""

    def test_success(self):
        result = Result.success(200)

        assert result.ok
        assert result.value == 200
        assert result.error is None
        assert result.unwrap() == 200

    def test_failure(self):
        result = Result.failure(ErrorKind.TOUR_CLOSED)

        assert not result.ok
        assert result.value == 1004
        assert result.error is ErrorKind.TOUR_CLOSED

    def test_failure_from_raw_code(self):
        assert Result.failure(1006).error is ErrorKind.ALREADY_REGISTERED

    def test_unwrap_failure_raises(self):
        result = Result.failure(ErrorKind.NOT_AUTHORIZED)

        with pytest.raises(SplitError) as exc_info:
            result.unwrap()

        assert exc_info.value.kind is ErrorKind.NOT_AUTHORIZED
        assert "1008" in str(exc_info.value)

    def test_success_with_false_value_is_still_ok(self):
        result = Result.success(False)

        assert result.ok
        assert result.unwrap() is False

    def test_equality(self):
        assert Result.success(True) == Result(ok=True, value=True)
        assert Result.failure(ErrorKind.TOUR_NOT_FOUND) == Result(ok=False, value=1003)

    def test_immutable(self):
        result = Result.success(1)

        with pytest.raises(AttributeError):
            result.value = 2

    def test_to_dict(self):
        assert Result.success(250).to_dict() == {"ok": True, "value": 250}
        assert Result.failure(ErrorKind.INVALID_AMOUNT).to_dict() == {
            "ok": False, "value": 1005, "error": "INVALID_AMOUNT"
        }
