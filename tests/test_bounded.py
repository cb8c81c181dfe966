import logging

import pytest

import config
from generators import range_
from monads import Failure, Success, UnwrapError
from seq import SequenceTooLargeError, empty, from_array, to_list, to_list_unsafe


class TestLength:
    """Test capped and uncapped length"""

    def test_length_within_cap(self):
        assert from_array([1, 2, 3, 4, 5]).length(10) == Success(5)

    def test_length_exactly_at_cap(self):
        assert from_array([1, 2, 3]).length(3) == Success(3)

    def test_length_over_cap_is_a_failure_value(self):
        result = from_array([1, 2, 3, 4, 5]).length(2)
        assert result.is_failure()
        assert isinstance(result.cause, SequenceTooLargeError)
        assert result.cause.limit == 2
        assert result.cause.operation == "measure"

    def test_length_of_infinite_sequence_fails(self):
        result = range_(0).length(100)
        assert isinstance(result, Failure)
        assert isinstance(result.cause, SequenceTooLargeError)

    def test_length_stops_right_after_the_cap(self, tracker):
        ident = tracker()
        range_(0).map(ident).length(10)
        assert ident.count == 11

    def test_length_unsafe(self):
        assert range_(0, 12345).length_unsafe() == 12345

    def test_default_cap(self):
        assert range_(0, 10_000).length() == Success(10_000)
        assert range_(0, 10_001).length().is_failure()


class TestReverse:
    """Test capped and uncapped reverse"""

    def test_reverse(self):
        result = from_array([1, 2, 3]).reverse()
        assert result.is_success()
        assert result.unwrap().to_list_unsafe() == [3, 2, 1]

    def test_reverse_over_cap(self):
        result = range_(0).reverse(50)
        assert result.is_failure()
        assert result.cause.operation == "reverse"
        with pytest.raises(UnwrapError):
            result.unwrap()

    def test_reverse_unsafe(self):
        assert from_array("abc").reverse_unsafe().to_list_unsafe() == ["c", "b", "a"]


class TestToList:
    """Test module-level and method materialization"""

    def test_to_list(self):
        assert to_list(range_(0, 3)) == Success([0, 1, 2])
        assert range_(0, 3).to_list(5) == Success([0, 1, 2])

    def test_to_list_over_cap_returns_no_partial_value(self):
        result = to_list(range_(0), 5)
        assert result.is_failure()
        assert result.unwrap_or([]) == []

    def test_to_list_unsafe(self):
        assert to_list_unsafe(range_(0, 3)) == [0, 1, 2]

    @pytest.mark.parametrize("cap", [0, -1])
    def test_non_positive_cap_only_fits_the_empty_sequence(self, cap):
        """A cap below one is a value, not a programmer error"""
        assert empty().length(cap) == Success(0)
        assert to_list(empty(), cap) == Success([])
        result = from_array([1]).length(cap)
        assert result.is_failure()
        assert isinstance(result.cause, SequenceTooLargeError)
        assert range_(0, 3).reverse(cap).is_failure()

    def test_caller_errors_propagate(self):
        """Only the cap becomes a Failure; a crashing function still raises"""
        with pytest.raises(ZeroDivisionError):
            from_array([1, 0]).map(lambda x: 1 / x).length(10)

    def test_cap_failure_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="seq")
        to_list(range_(0), 3)
        assert "convert stopped at cap 3" in caplog.text


class TestConfiguredCap:
    """Test that configuration drives the default cap"""

    def test_configured_cap(self):
        config.configure(max_size=3)
        assert range_(0, 3).length() == Success(3)
        assert range_(0, 4).length().is_failure()
        assert to_list(range_(0, 4)).is_failure()

    def test_explicit_cap_overrides_configuration(self):
        config.configure(max_size=3)
        assert range_(0, 10).length(100) == Success(10)

    def test_environment_cap(self, monkeypatch):
        monkeypatch.setenv("LAZYSEQ_MAX_SIZE", "2")
        config.reset_settings()
        assert from_array([1, 2, 3]).reverse().is_failure()
        assert from_array([1, 2]).reverse().is_success()
