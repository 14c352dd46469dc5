"""Status snapshot of the connection manager."""

from typing import Any, Dict


def build_status(manager: Any) -> Dict[str, Any]:
    """Collect state, identity, retry and metrics details into one dict."""
    identity = manager.identity
    scheduler = manager.scheduler
    return {
        "name": manager.name,
        "state": manager.state.value,
        "state_duration_seconds": manager.state_manager.get_state_duration(),
        "last_error_context": manager.state_manager.last_error_context,
        "is_connected": manager.is_connected(),
        "user_id": identity.user_id if identity else None,
        "organization_id": identity.organization_id if identity else None,
        "reconnect_attempt": scheduler.attempt,
        "max_reconnect_attempts": scheduler.policy.max_attempts,
        "reconnect_armed": scheduler.is_armed,
        "subscribed_events": manager.registry.events(),
        "metrics": manager.metrics_tracker.snapshot(),
    }
