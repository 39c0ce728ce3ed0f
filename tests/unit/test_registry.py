from __future__ import annotations

import pytest

from src.state.role import Role
from src.relay.registry import ConnectionRegistry
from src.errors import RoleConflict, MalformedFrame


class _Channel:
    is_open = True

    def deliver(self, frame: dict) -> bool:
        return True


def _registry() -> ConnectionRegistry:
    t = [100.0]
    return ConnectionRegistry(now_fn=lambda: t[0])


def test_register_assigns_unique_ids() -> None:
    registry = _registry()
    ids = {registry.register(_Channel()) for _ in range(5)}
    assert len(ids) == 5
    for cid in ids:
        assert registry.get(cid).role is Role.UNKNOWN


def test_identify_client_binds_session() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    conn = registry.identify(cid, Role.CLIENT, client_session_id="s1")
    assert conn.role is Role.CLIENT
    assert registry.resolve("s1") == cid
    assert registry.is_session_live("s1")


def test_rebind_supersedes_previous_connection() -> None:
    registry = _registry()
    old = registry.register(_Channel())
    new = registry.register(_Channel())
    registry.identify(old, Role.CLIENT, client_session_id="s1")
    registry.identify(new, Role.CLIENT, client_session_id="s1")

    assert registry.resolve("s1") == new
    assert [c.connection_id for c in registry.clients()] == [new]


def test_late_close_of_superseded_connection_keeps_new_binding() -> None:
    registry = _registry()
    old = registry.register(_Channel())
    new = registry.register(_Channel())
    registry.identify(old, Role.CLIENT, client_session_id="s1")
    registry.identify(new, Role.CLIENT, client_session_id="s1")

    registry.remove(old)

    assert registry.resolve("s1") == new


def test_remove_current_binding_keeps_session_record() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    registry.identify(cid, Role.CLIENT, client_session_id="s1")

    removed = registry.remove(cid)

    assert removed is not None and removed.connection_id == cid
    assert registry.resolve("s1") is None
    assert registry.session("s1") is not None
    assert registry.remove(cid) is None


def test_identify_rejects_role_change() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    registry.identify(cid, Role.ADMIN)
    with pytest.raises(RoleConflict):
        registry.identify(cid, Role.CLIENT, client_session_id="s1")


def test_identify_rejects_session_change_on_same_connection() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    registry.identify(cid, Role.CLIENT, client_session_id="s1")
    with pytest.raises(RoleConflict):
        registry.identify(cid, Role.CLIENT, client_session_id="s2")


def test_identify_client_requires_session_id() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    with pytest.raises(MalformedFrame):
        registry.identify(cid, Role.CLIENT)


def test_identify_unknown_connection_raises_key_error() -> None:
    with pytest.raises(KeyError):
        _registry().identify("conn-404", Role.ADMIN)


def test_admin_identity_defaults_to_connection_id() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    conn = registry.identify(cid, Role.ADMIN)
    assert conn.admin_identity == cid
    assert registry.binding(cid).last_connection_id == cid


def test_admins_snapshot_and_counts() -> None:
    registry = _registry()
    a1 = registry.register(_Channel())
    a2 = registry.register(_Channel())
    c1 = registry.register(_Channel())
    registry.identify(a1, Role.ADMIN, admin_identity="ops")
    registry.identify(a2, Role.ADMIN, admin_identity="ops")
    registry.identify(c1, Role.CLIENT, client_session_id="s1")

    snapshot = registry.admins()
    registry.remove(a1)

    assert [c.connection_id for c in snapshot] == [a1, a2]
    assert registry.counts() == {
        "connections": 2,
        "admins": 1,
        "adminIdentities": 1,
        "clients": 1,
        "clientSessions": 1,
    }


def test_note_observed_records_sessions_per_admin() -> None:
    registry = _registry()
    cid = registry.register(_Channel())
    registry.identify(cid, Role.ADMIN, admin_identity="ops")
    registry.note_observed("ops", "s1")
    registry.note_observed("ops", "s2")
    registry.note_observed("nobody", "s3")
    assert registry.binding("ops").client_session_ids == {"s1", "s2"}
