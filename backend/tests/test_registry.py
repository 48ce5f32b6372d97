import pytest
from unittest.mock import Mock


class TestConnectionRegistry:
    """Test suite for the live connection registry"""

    def test_register_starts_unjoined(self, registry, make_transport):
        """Test a new connection has no room"""
        connection = registry.register("a", make_transport(), display_name="Ada")

        assert "a" in registry
        assert connection.room_id is None
        assert not connection.joined
        assert connection.display_name == "Ada"

    def test_unregister_returns_connection(self, registry, make_transport):
        """Test unregister hands back the removed entry"""
        transport = make_transport()
        registry.register("a", transport)

        removed = registry.unregister("a")

        assert removed.id == "a"
        assert removed.transport is transport
        assert "a" not in registry

    def test_unregister_is_idempotent(self, registry, make_transport):
        """Test duplicate disconnect signals are harmless"""
        registry.register("a", make_transport())

        registry.unregister("a")
        assert registry.unregister("a") is None
        assert registry.unregister("never-seen") is None
        assert len(registry) == 0

    def test_send_delivers_to_transport(self, registry, make_transport):
        """Test send hands the message to the connection's transport"""
        transport = make_transport()
        registry.register("a", transport)

        assert registry.send("a", {"type": "cursor-update"}) is True
        assert transport.messages == [{"type": "cursor-update"}]

    def test_send_to_unknown_connection_is_dropped(self, registry):
        """Test send to a departed connection is silently dropped"""
        assert registry.send("ghost", {"type": "cursor-update"}) is False

    def test_send_reports_transport_refusal(self, registry):
        """Test a transport that refuses delivery counts as a drop"""
        transport = Mock()
        transport.deliver.return_value = False
        registry.register("a", transport)

        assert registry.send("a", {"type": "code-update"}) is False
        transport.deliver.assert_called_once_with({"type": "code-update"})

    def test_room_of(self, registry, make_transport):
        """Test room lookup for known and unknown connections"""
        connection = registry.register("a", make_transport())
        connection.room_id = "ws-1"

        assert registry.room_of("a") == "ws-1"
        assert registry.room_of("ghost") is None

    def test_iteration_is_snapshot(self, registry, make_transport):
        """Test iterating while unregistering does not fail"""
        for cid in ("a", "b", "c"):
            registry.register(cid, make_transport())

        for connection in registry:
            registry.unregister(connection.id)

        assert len(registry) == 0
