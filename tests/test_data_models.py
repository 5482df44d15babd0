"""Unit tests for core data models."""
import base64

import numpy as np
import pytest

from cardio_dashboard.core import (
    ActiveChannel,
    ChartImage,
    InvalidTransition,
    ModelMetrics,
    OperationKind,
    OperationResult,
    RiskAssessment,
    RiskLevel,
    SignalBundle,
)


class TestEnums:
    """Tests for enumerations."""

    def test_operation_kinds_exist(self):
        """Test that all four operation kinds are defined with labels."""
        assert {k.value for k in OperationKind} == {
            "generate_signal", "train_model", "compute_risk", "render_chart"
        }
        assert OperationKind.COMPUTE_RISK.label == "Calculate Heart Failure Risk"

    def test_channel_tab_index_round_trip(self):
        """Test tab index mapping for both channels."""
        assert ActiveChannel.NORMAL.tab_index == 0
        assert ActiveChannel.from_tab_index(1) is ActiveChannel.ABNORMAL

    def test_risk_level_parse_case_insensitive(self):
        """Test backend risk level strings parse regardless of case."""
        assert RiskLevel.parse("high") is RiskLevel.HIGH
        assert RiskLevel.parse(" Moderate ") is RiskLevel.MODERATE

    def test_risk_level_parse_unknown(self):
        """Test unknown risk level raises."""
        with pytest.raises(ValueError, match="Unknown risk level"):
            RiskLevel.parse("extreme")


class TestSignalBundle:
    """Tests for SignalBundle data model."""

    def test_from_response(self):
        """Test parsing the backend generate-ecg payload."""
        bundle = SignalBundle.from_response(
            {"time": [0, 1, 2], "normal_ecg": [0.1, 0.2, 0.1], "abnormal_ecg": [0.9, 0.1, 0.9]}
        )
        assert bundle.num_samples == 3
        np.testing.assert_array_equal(bundle.amplitudes(ActiveChannel.ABNORMAL), [0.9, 0.1, 0.9])

    def test_arrays_are_read_only(self):
        """Test a received bundle cannot be patched in place."""
        bundle = SignalBundle(time=[0.0, 1.0], normal_amplitude=[1.0, 2.0], abnormal_amplitude=[3.0, 4.0])
        with pytest.raises(ValueError):
            bundle.normal_amplitude[0] = 99.0

    def test_source_array_is_copied(self):
        """Test mutating the source array does not leak into the bundle."""
        source = np.array([1.0, 2.0])
        bundle = SignalBundle(time=[0.0, 1.0], normal_amplitude=source, abnormal_amplitude=[3.0, 4.0])
        source[0] = 42.0
        assert bundle.normal_amplitude[0] == 1.0

    def test_mismatched_lengths_fail(self):
        """Test that sequences of different length raise error."""
        with pytest.raises(ValueError, match="must have same length"):
            SignalBundle(time=[0, 1, 2], normal_amplitude=[0.1, 0.2], abnormal_amplitude=[0.1, 0.2, 0.3])

    def test_non_finite_fails(self):
        """Test that NaN amplitudes are rejected."""
        with pytest.raises(ValueError, match="finite"):
            SignalBundle(time=[0, 1], normal_amplitude=[0.1, float("nan")], abnormal_amplitude=[0.1, 0.2])

    def test_empty_bundle_allowed(self):
        """Test an empty bundle is valid."""
        bundle = SignalBundle(time=[], normal_amplitude=[], abnormal_amplitude=[])
        assert bundle.num_samples == 0

    def test_missing_key_fails(self):
        """Test a payload without abnormal_ecg raises KeyError."""
        with pytest.raises(KeyError):
            SignalBundle.from_response({"time": [0], "normal_ecg": [0.1]})


class TestRiskAssessment:
    """Tests for RiskAssessment data model."""

    def test_from_response(self):
        """Test parsing the backend risk payload."""
        risk = RiskAssessment.from_response(
            {
                "heart_failure_probability": 73.5,
                "risk_level": "High",
                "risk_factors": ["QRS widening"],
                "recommendations": ["Echocardiogram", "Follow-up in 2 weeks"],
            },
            ActiveChannel.ABNORMAL,
        )
        assert risk.probability_percent == 73.5
        assert risk.risk_level is RiskLevel.HIGH
        assert risk.risk_factors == ("QRS widening",)
        assert risk.recommendations == ("Echocardiogram", "Follow-up in 2 weeks")
        assert risk.channel is ActiveChannel.ABNORMAL

    def test_probability_out_of_range(self):
        """Test probability above 100 is rejected."""
        with pytest.raises(ValueError, match=r"\[0, 100\]"):
            RiskAssessment(probability_percent=120, risk_level=RiskLevel.LOW)

    def test_factors_must_be_strings(self):
        """Test non-string risk factors are rejected."""
        with pytest.raises(TypeError):
            RiskAssessment(probability_percent=10, risk_level=RiskLevel.LOW, risk_factors=[1, 2])


class TestModelMetrics:
    """Tests for ModelMetrics data model."""

    def test_from_response(self):
        """Test parsing the backend train-model payload."""
        metrics = ModelMetrics.from_response({"accuracy": 0.91, "f1": 0.88, "roc_auc": 0.97})
        assert metrics.roc_auc == 0.97

    def test_metric_out_of_range(self):
        """Test metrics outside [0, 1] are rejected."""
        with pytest.raises(ValueError, match=r"\[0, 1\]"):
            ModelMetrics(accuracy=1.5, f1=0.5, roc_auc=0.5)


class TestChartImage:
    """Tests for ChartImage data model."""

    def test_decode_and_data_url(self):
        """Test a bare base64 payload decodes and renders as a PNG data URL."""
        payload = base64.b64encode(b"\x89PNG\r\n\x1a\n").decode()
        chart = ChartImage.from_response(payload)
        assert chart.to_bytes() == b"\x89PNG\r\n\x1a\n"
        assert chart.data_url() == f"data:image/png;base64,{payload}"

    def test_object_payload(self):
        """Test the {"image": ...} response shape is also accepted."""
        chart = ChartImage.from_response({"image": "AAAA", "mime_type": "image/svg+xml"})
        assert chart.mime_type == "image/svg+xml"

    def test_empty_payload_fails(self):
        """Test a blank payload is rejected as empty."""
        with pytest.raises(ValueError, match="empty"):
            ChartImage(data="  ")


class TestOperationResult:
    """Tests for OperationResult."""

    def test_ok_and_skipped(self):
        """Test ok is set without an error and skipped only for duplicates."""
        assert OperationResult(kind=OperationKind.TRAIN_MODEL, data=1).ok
        skipped = OperationResult(kind=OperationKind.TRAIN_MODEL, error=InvalidTransition("busy"))
        assert not skipped.ok
        assert skipped.skipped
