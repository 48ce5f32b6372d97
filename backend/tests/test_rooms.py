import pytest


class TestRoomDirectory:
    """Test suite for room membership bookkeeping"""

    def test_join_creates_room(self, rooms):
        """Test first join creates the room"""
        rooms.join("ws-1", "a")

        assert "ws-1" in rooms
        assert rooms.members("ws-1") == {"a"}

    def test_join_is_idempotent(self, rooms):
        """Test joining twice keeps a single membership"""
        rooms.join("ws-1", "a")
        rooms.join("ws-1", "a")

        assert rooms.members("ws-1") == {"a"}
        assert rooms.summary() == {"ws-1": 1}

    def test_leave_last_member_deletes_room(self, rooms):
        """Test rooms are removed as soon as they are empty"""
        rooms.join("ws-1", "a")
        rooms.join("ws-1", "b")

        rooms.leave("ws-1", "a")
        assert rooms.members("ws-1") == {"b"}

        rooms.leave("ws-1", "b")
        assert "ws-1" not in rooms
        assert len(rooms) == 0

    def test_leave_is_idempotent(self, rooms):
        """Test leaving twice or leaving an unknown room is a no-op"""
        rooms.join("ws-1", "a")
        rooms.join("ws-1", "b")

        rooms.leave("ws-1", "a")
        rooms.leave("ws-1", "a")
        rooms.leave("missing", "a")

        assert rooms.summary() == {"ws-1": 1}

    def test_members_except(self, rooms):
        """Test peer lookup excludes the given connection"""
        for cid in ("a", "b", "c"):
            rooms.join("ws-1", cid)

        assert rooms.members_except("ws-1", "a") == {"b", "c"}
        assert rooms.members_except("ws-1", "zzz") == {"a", "b", "c"}

    def test_members_except_unknown_room(self, rooms):
        """Test unknown rooms have no members rather than raising"""
        assert rooms.members_except("nowhere", "a") == set()
        assert "nowhere" not in rooms

    def test_members_returns_copy(self, rooms):
        """Test callers cannot mutate the directory through a lookup"""
        rooms.join("ws-1", "a")

        members = rooms.members("ws-1")
        members.add("intruder")

        assert rooms.members("ws-1") == {"a"}

    def test_is_member(self, rooms):
        """Test membership check per room"""
        rooms.join("ws-1", "a")

        assert rooms.is_member("ws-1", "a")
        assert not rooms.is_member("ws-2", "a")
        assert not rooms.is_member("ws-1", "b")
