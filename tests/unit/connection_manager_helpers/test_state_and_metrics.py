from realtime_client.connection_manager_helpers import ConnectionStateManager, MetricsTracker
from realtime_client.connection_state import ConnectionState


class TestConnectionStateManager:
    def test_transition_logs_and_records_context(self, caplog) -> None:
        caplog.set_level("INFO")
        manager = ConnectionStateManager("test")

        manager.transition_state(ConnectionState.CONNECTING)
        manager.transition_state(ConnectionState.FAILED, "refused")

        assert manager.get_state() is ConnectionState.FAILED
        assert manager.last_error_context == "refused"
        assert "State transition: connecting -> failed (refused)" in caplog.text

    def test_same_state_is_noop(self) -> None:
        manager = ConnectionStateManager()
        changed_at = manager.state_change_time

        manager.transition_state(ConnectionState.IDLE)

        assert manager.state_change_time == changed_at

    def test_unexpected_transition_warns(self, caplog) -> None:
        manager = ConnectionStateManager()

        manager.transition_state(ConnectionState.CONNECTED)

        assert manager.state is ConnectionState.CONNECTED
        assert "Unexpected state transition: idle -> connected" in caplog.text

    def test_state_duration_is_non_negative(self) -> None:
        assert ConnectionStateManager().get_state_duration() >= 0


class TestMetricsTracker:
    def test_success_resets_failure_streak(self) -> None:
        tracker = MetricsTracker()
        tracker.record_failure()
        tracker.record_failure()
        tracker.set_backoff_delay(4.0)

        tracker.record_success()

        metrics = tracker.get_metrics()
        assert metrics.failed_connections == 2
        assert metrics.consecutive_failures == 0
        assert metrics.current_backoff_delay == 0.0
        assert metrics.last_connection_time is not None

    def test_snapshot_is_plain_dict(self) -> None:
        tracker = MetricsTracker()
        tracker.increment_total_connections()
        tracker.increment_reconnection_attempts()
        tracker.record_disconnect("ping timeout")

        snapshot = tracker.snapshot()

        assert snapshot["total_connections"] == 1
        assert snapshot["total_reconnection_attempts"] == 1
        assert snapshot["last_disconnect_reason"] == "ping timeout"
