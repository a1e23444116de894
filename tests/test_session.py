import asyncio

import pytest

from orderdesk.services.session import SessionManager, SessionState, SessionValidationError

TTL_MS = 15 * 60 * 1000
DOSA = {"id": "X", "name": "Masala Dosa", "price": 50}


@pytest.fixture
def manager(storage, clock):
    return SessionManager(storage, clock=clock)


def test_default_lifetime_is_fifteen_minutes(manager):
    assert manager.ttl_ms == TTL_MS


def test_create_persists_the_session(manager, storage, clock):
    session = manager.create("  Asha ", "9876543210", restaurant_ref=3)

    assert session.name == "Asha"
    assert storage.get("userSession") == {
        "name": "Asha",
        "phone": "9876543210",
        "restaurantRef": 3,
        "createdAt": clock.now,
    }
    assert manager.current() == session


@pytest.mark.parametrize(
    "name,phone,field",
    [
        ("", "9876543210", "name"),
        ("   ", "9876543210", "name"),
        ("Asha", "5876543210", "phone"),
        ("Asha", "98765", "phone"),
        ("Asha", "98765432101", "phone"),
        ("Asha", "98765abcde", "phone"),
        ("Asha", "9२१०३४५६७८", "phone"),
    ],
)
def test_invalid_entry_is_rejected(manager, storage, name, phone, field):
    with pytest.raises(SessionValidationError) as exc_info:
        manager.create(name, phone)

    assert field in exc_info.value.errors
    assert storage.get("userSession") is None


def test_new_session_starts_with_an_empty_cart(manager):
    manager.create("Asha", "9876543210")
    manager.cart.add(DOSA)

    manager.create("Ravi", "8765432109")
    assert manager.cart.is_empty()


async def test_activation_just_inside_the_lifetime(manager, clock):
    redirects = []
    manager.create("Asha", "9876543210")
    clock.advance(TTL_MS - 1)

    activation = manager.activate(on_redirect=redirects.append)

    assert activation.is_active
    assert activation.expires_in_ms == 1
    assert redirects == []
    manager.deactivate()


@pytest.mark.parametrize("elapsed", [TTL_MS, TTL_MS + 1])
async def test_activation_after_the_lifetime_evicts(manager, storage, clock, elapsed):
    redirects = []
    manager.create("Asha", "9876543210")
    manager.cart.add(DOSA)
    clock.advance(elapsed)

    activation = manager.activate(on_redirect=redirects.append)

    assert activation.state == SessionState.EXPIRED
    assert redirects == [SessionState.EXPIRED]
    assert storage.get("userSession") is None
    assert storage.get("selectedItems") is None


async def test_activation_without_a_session_redirects(manager):
    redirects = []
    activation = manager.activate(on_redirect=redirects.append)

    assert activation.state == SessionState.MISSING
    assert redirects == [SessionState.MISSING]
    assert not manager.has_pending_eviction


async def test_clock_skew_counts_as_a_fresh_session(manager, clock):
    manager.create("Asha", "9876543210")
    clock.advance(-60_000)

    activation = manager.activate()
    assert activation.expires_in_ms == TTL_MS
    manager.deactivate()


async def test_scheduled_eviction_fires(storage, clock):
    manager = SessionManager(storage, ttl_ms=20, clock=clock)
    redirects = []
    manager.create("Asha", "9876543210")
    manager.cart.add(DOSA)

    manager.activate(on_redirect=redirects.append)
    await asyncio.sleep(0.1)

    assert redirects == [SessionState.EXPIRED]
    assert manager.current() is None
    assert manager.cart.is_empty()
    assert not manager.has_pending_eviction


async def test_deactivate_cancels_the_eviction(storage, clock):
    manager = SessionManager(storage, ttl_ms=20, clock=clock)
    redirects = []
    manager.create("Asha", "9876543210")

    manager.activate(on_redirect=redirects.append)
    manager.deactivate()
    await asyncio.sleep(0.1)

    assert redirects == []
    assert manager.current() is not None


async def test_reactivation_keeps_a_single_eviction(storage, clock):
    manager = SessionManager(storage, ttl_ms=20, clock=clock)
    redirects = []
    manager.create("Asha", "9876543210")

    manager.activate(on_redirect=redirects.append)
    manager.activate(on_redirect=redirects.append)
    manager.activate(on_redirect=redirects.append)
    await asyncio.sleep(0.1)

    assert redirects == [SessionState.EXPIRED]


async def test_end_clears_without_redirect(manager, storage):
    redirects = []
    manager.create("Asha", "9876543210")
    manager.cart.add(DOSA)
    manager.activate(on_redirect=redirects.append)

    manager.end()

    assert redirects == []
    assert not manager.has_pending_eviction
    assert storage.get("userSession") is None
    assert storage.get("selectedItems") is None


def test_unreadable_session_is_discarded(manager, storage):
    storage.set("userSession", {"name": "Asha"})
    assert manager.current() is None
    assert storage.get("userSession") is None


def test_lifetime_comes_from_settings(monkeypatch, storage):
    monkeypatch.setenv("SESSION_TTL_MINUTES", "30")
    assert SessionManager(storage).ttl_ms == 30 * 60 * 1000


def test_live_session_evicts_once_expired(manager, storage, clock):
    manager.create("Asha", "9876543210")
    manager.cart.add(DOSA)

    clock.advance(TTL_MS - 1)
    assert manager.live_session() is not None

    clock.advance(1)
    assert manager.live_session() is None
    assert storage.get("userSession") is None
    assert storage.get("selectedItems") is None
