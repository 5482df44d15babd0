"""Tests for the operation status store."""
import pytest

from cardio_dashboard.core import (
    ActiveChannel,
    InvalidTransition,
    ModelMetrics,
    OperationKind,
    OperationStatus,
    OperationStatusStore,
    RiskAssessment,
    RiskLevel,
    SignalBundle,
)


@pytest.fixture
def store():
    """Fresh store with every kind Idle."""
    return OperationStatusStore()


@pytest.fixture
def bundle():
    """Three-sample bundle with distinct channels."""
    return SignalBundle(time=[0, 1, 2], normal_amplitude=[0.1, 0.2, 0.1], abnormal_amplitude=[0.9, 0.1, 0.9])


@pytest.fixture
def risk():
    """Low risk assessment computed on the normal channel."""
    return RiskAssessment(probability_percent=30, risk_level=RiskLevel.LOW, channel=ActiveChannel.NORMAL)


class TestInitialState:
    """Tests for the store's starting state."""

    def test_all_kinds_start_idle(self, store):
        """Test every operation kind starts Idle with no error and no result."""
        for kind in OperationKind:
            state = store.state(kind)
            assert state.status is OperationStatus.IDLE
            assert state.error_message is None
            assert store.result(kind) is None


class TestBegin:
    """Tests for OperationStatusStore.begin."""

    def test_begin_sets_pending(self, store):
        """Test begin moves an Idle kind to Pending."""
        store.begin(OperationKind.TRAIN_MODEL)
        assert store.is_pending(OperationKind.TRAIN_MODEL)

    def test_second_begin_rejected(self, store):
        """Test at most one begin per kind results in Pending."""
        store.begin(OperationKind.COMPUTE_RISK)
        for _ in range(3):
            with pytest.raises(InvalidTransition):
                store.begin(OperationKind.COMPUTE_RISK)
        assert store.is_pending(OperationKind.COMPUTE_RISK)

    def test_begin_clears_previous_error(self, store):
        """Test restarting a failed kind clears its message."""
        store.begin(OperationKind.TRAIN_MODEL)
        store.fail(OperationKind.TRAIN_MODEL, "boom")
        store.begin(OperationKind.TRAIN_MODEL)
        assert store.state(OperationKind.TRAIN_MODEL).error_message is None

    def test_kinds_are_independent(self, store):
        """Test one kind pending does not block another."""
        store.begin(OperationKind.TRAIN_MODEL)
        store.begin(OperationKind.GENERATE_SIGNAL)
        assert store.is_pending(OperationKind.TRAIN_MODEL)
        assert store.is_pending(OperationKind.GENERATE_SIGNAL)


class TestSucceed:
    """Tests for OperationStatusStore.succeed."""

    def test_succeed_stores_result(self, store, bundle):
        """Test success stores the bundle in its slot."""
        store.begin(OperationKind.GENERATE_SIGNAL)
        store.succeed(OperationKind.GENERATE_SIGNAL, bundle)
        assert store.state(OperationKind.GENERATE_SIGNAL).status is OperationStatus.SUCCEEDED
        assert store.signal_bundle is bundle

    def test_succeed_requires_pending(self, store, bundle):
        """Test succeed on an Idle kind raises InvalidTransition."""
        with pytest.raises(InvalidTransition):
            store.succeed(OperationKind.GENERATE_SIGNAL, bundle)

    def test_succeed_checks_slot_type(self, store, bundle):
        """Test a result of the wrong type for the kind is rejected."""
        store.begin(OperationKind.TRAIN_MODEL)
        with pytest.raises(TypeError, match="ModelMetrics"):
            store.succeed(OperationKind.TRAIN_MODEL, bundle)

    def test_new_bundle_clears_risk(self, store, bundle, risk):
        """Test generating a new bundle invalidates the risk assessment."""
        store.begin(OperationKind.COMPUTE_RISK)
        store.succeed(OperationKind.COMPUTE_RISK, risk)
        store.begin(OperationKind.GENERATE_SIGNAL)
        store.succeed(OperationKind.GENERATE_SIGNAL, bundle)
        assert store.risk_assessment is None

    def test_succeed_with_none_keeps_slot(self, store, risk):
        """Test a discarded result completes without touching the slot."""
        store.begin(OperationKind.COMPUTE_RISK)
        store.succeed(OperationKind.COMPUTE_RISK, risk)
        store.begin(OperationKind.COMPUTE_RISK)
        store.succeed(OperationKind.COMPUTE_RISK, None)
        assert store.risk_assessment is risk
        assert store.state(OperationKind.COMPUTE_RISK).status is OperationStatus.SUCCEEDED


class TestFail:
    """Tests for OperationStatusStore.fail."""

    def test_fail_keeps_stale_result(self, store):
        """Test a failure leaves the previous result visible."""
        metrics = ModelMetrics(accuracy=0.9, f1=0.8, roc_auc=0.95)
        store.begin(OperationKind.TRAIN_MODEL)
        store.succeed(OperationKind.TRAIN_MODEL, metrics)
        store.begin(OperationKind.TRAIN_MODEL)
        store.fail(OperationKind.TRAIN_MODEL, "Failed to train model")

        state = store.state(OperationKind.TRAIN_MODEL)
        assert state.status is OperationStatus.FAILED
        assert state.error_message == "Failed to train model"
        assert store.model_metrics is metrics

    def test_fail_requires_pending(self, store):
        """Test fail on an Idle kind raises InvalidTransition."""
        with pytest.raises(InvalidTransition):
            store.fail(OperationKind.RENDER_CHART, "nope")


class TestResetAndListeners:
    """Tests for reset, clear_risk and transition listeners."""

    def test_reset_returns_to_idle(self, store):
        """Test reset returns a failed kind to Idle without a message."""
        store.begin(OperationKind.RENDER_CHART)
        store.fail(OperationKind.RENDER_CHART, "err")
        store.reset(OperationKind.RENDER_CHART)
        state = store.state(OperationKind.RENDER_CHART)
        assert state.status is OperationStatus.IDLE
        assert state.error_message is None

    def test_clear_risk(self, store, risk):
        """Test clear_risk drops the stored assessment."""
        store.begin(OperationKind.COMPUTE_RISK)
        store.succeed(OperationKind.COMPUTE_RISK, risk)
        store.clear_risk()
        assert store.risk_assessment is None

    def test_listener_sees_each_transition(self, store):
        """Test listeners are called once per transition with the new state."""
        seen = []
        store.add_listener(lambda kind: seen.append((kind, store.state(kind).status)))
        store.begin(OperationKind.TRAIN_MODEL)
        store.fail(OperationKind.TRAIN_MODEL, "x")
        assert seen == [
            (OperationKind.TRAIN_MODEL, OperationStatus.PENDING),
            (OperationKind.TRAIN_MODEL, OperationStatus.FAILED),
        ]
