from datetime import datetime

import pytest

from badges.models import GuestIdentity, make_badge_id
from conftest import EVENT_ID


def test_make_badge_id():
    assert make_badge_id(EVENT_ID, now_ms=1700000000000) == "evt12345-1700000000000"
    prefix, millis = make_badge_id("abc").split("-")
    assert prefix == "abc"
    assert millis.isdigit()


def test_add_guest_derives_badge_id(store):
    guest = store.add_guest(EVENT_ID, "Ada", "Lovelace", "ada@x.com")
    assert isinstance(guest, GuestIdentity)
    assert guest.badge_id.startswith("evt12345-")
    assert guest.event_name == "Tech Summit"
    assert guest.company is None
    assert guest.phone == ""


def test_lookup_by_badge(store, registered):
    found = store.get_guest_by_badge(EVENT_ID, "evt12345-1700000000000")
    assert found == registered
    assert store.get_guest_by_badge("other-event", "evt12345-1700000000000") is None
    assert store.get_guest("missing") is None


def test_list_guests(store):
    store.add_guest(EVENT_ID, "Grace", "Hopper", "grace@navy.mil", guest_id="g-2", badge_id="b-2")
    store.add_guest(EVENT_ID, "Ada", "Lovelace", "ada@x.com", guest_id="g-1", badge_id="b-1")
    assert [g.id for g in store.list_guests(EVENT_ID)] == ["g-2", "g-1"]
    assert [g.id for g in store.list_guests(EVENT_ID, ["g-1"])] == ["g-1"]


def test_mark_badge_printed(store, registered):
    assert not store.badge_printed("g-1")
    store.mark_badge_printed(["g-1"])
    assert store.badge_printed("g-1")


def test_event_name_unknown(store):
    assert store.event_name("nope") == ""


def test_check_in(store, registered):
    assert store.check_in_time("g-1") is None
    at = datetime(2026, 10, 18, 9, 30)
    assert store.check_in("g-1", now=at) == ("2026-10-18T09:30:00", False)
    assert store.check_in_time("g-1") == "2026-10-18T09:30:00"


def test_check_in_keeps_first_time(store, registered):
    store.check_in("g-1", now=datetime(2026, 10, 18, 9, 30))
    assert store.check_in("g-1", now=datetime(2026, 10, 18, 11, 0)) == ("2026-10-18T09:30:00", True)
    assert store.check_in_time("g-1") == "2026-10-18T09:30:00"


def test_check_in_unknown_guest(store):
    with pytest.raises(KeyError):
        store.check_in("nobody")
