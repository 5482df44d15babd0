"""Tests for abnormality level streaming."""
import asyncio

import pytest

from cardio_dashboard.core import NetworkError, ValidationError
from cardio_dashboard.orchestration import ParameterStreamer, validate_level


class RecordingSender:
    """Stand-in for the gateway push; optionally fails for given levels."""

    def __init__(self, fail_on=()):
        self.sent: list[float] = []
        self.fail_on = set(fail_on)

    async def __call__(self, level: float) -> None:
        await asyncio.sleep(0)
        self.sent.append(level)
        if level in self.fail_on:
            raise NetworkError("could not reach backend")


class TestValidateLevel:
    """Tests for validate_level."""

    @pytest.mark.parametrize("value", [0, 0.0, 0.37, 1, 1.0])
    def test_accepts_unit_interval(self, value):
        """Test values in [0, 1] are accepted as floats."""
        assert validate_level(value) == float(value)

    @pytest.mark.parametrize("value", [-0.01, 1.01, float("nan"), float("inf"), "0.5", None, True])
    def test_rejects_everything_else(self, value):
        """Test out-of-range, non-finite and non-numeric values raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_level(value)


class TestParameterStreamer:
    """Tests for ParameterStreamer."""

    def test_default_level(self):
        """Test the level defaults to 0.5."""
        assert ParameterStreamer(RecordingSender()).level == 0.5

    def test_set_level_updates_and_pushes(self):
        """Test the local level changes at once and the value is pushed."""
        sender = RecordingSender()
        streamer = ParameterStreamer(sender)

        async def run():
            streamer.set_level(0.8)
            assert streamer.level == 0.8  # Updated before any push completes
            await streamer.wait_idle()

        asyncio.run(run())
        assert sender.sent == [0.8]

    def test_every_change_is_pushed(self):
        """Test rapid changes each produce a push and the last value is kept locally."""
        sender = RecordingSender()
        streamer = ParameterStreamer(sender)

        async def run():
            for level in (0.1, 0.2, 0.3):
                streamer.set_level(level)
            assert streamer.pending_pushes == 3
            await streamer.wait_idle()

        asyncio.run(run())
        assert sorted(sender.sent) == [0.1, 0.2, 0.3]
        assert streamer.level == 0.3

    def test_invalid_level_leaves_value_unchanged(self):
        """Test a rejected level sends nothing and keeps the previous value."""
        sender = RecordingSender()
        streamer = ParameterStreamer(sender, initial_level=0.4)

        async def run():
            with pytest.raises(ValidationError):
                streamer.set_level(1.5)
            await streamer.wait_idle()

        asyncio.run(run())
        assert streamer.level == 0.4
        assert sender.sent == []

    def test_failed_push_reported_not_rolled_back(self):
        """Test a failed push keeps the local value and reports the failure."""
        errors = []
        streamer = ParameterStreamer(RecordingSender(fail_on={0.9}), on_error=errors.append)

        async def run():
            streamer.set_level(0.9)
            await streamer.wait_idle()

        asyncio.run(run())
        assert streamer.level == 0.9
        assert len(errors) == 1
        assert errors[0].startswith("Failed to set abnormality level")

    def test_unexpected_push_error_reported(self):
        """Test an error outside the dashboard taxonomy is reported and wait_idle returns."""
        errors = []

        async def broken_send(level):
            raise RuntimeError("transport bug")

        streamer = ParameterStreamer(broken_send, on_error=errors.append)

        async def run():
            streamer.set_level(0.2)
            await streamer.wait_idle()

        asyncio.run(run())
        assert streamer.level == 0.2
        assert errors == ["Failed to set abnormality level: unexpected error (RuntimeError)"]

