from geodash.adapters.history_memory import MemoryHistory
from geodash.adapters.keyboard_bus import KeyboardBus


def test_push_appends_and_replace_overwrites_current():
    history = MemoryHistory("/")
    history.push("/daily?date=2024-01-01")
    history.replace("/daily?date=2024-01-02")

    assert history.current() == "/daily?date=2024-01-02"
    assert history.entries == ["/", "/daily?date=2024-01-02"]


def test_push_after_sync_back_truncates_forward_entries():
    history = MemoryHistory("/")
    history.push("/daily?date=2024-01-01")
    history.push("/readings")

    history.sync("/daily?date=2024-01-01")
    history.push("/")

    assert history.entries == ["/", "/daily?date=2024-01-01", "/"]


def test_sync_follows_browser_back_and_forward():
    history = MemoryHistory("/")
    history.push("/daily")
    history.push("/readings")

    history.sync("/daily")
    assert history.current() == "/daily"
    history.sync("/readings")
    assert history.current() == "/readings"

    history.sync("/readings?page=2")
    assert history.entries[-1] == "/readings?page=2"
    assert history.current() == "/readings?page=2"


def test_keyboard_bus_uppercases_target_tag():
    bus = KeyboardBus()
    seen = []
    bus.add_listener(lambda key, tag: seen.append((key, tag)))

    bus.press("h", "input")
    bus.press("ArrowLeft", None)

    assert seen == [("h", "INPUT"), ("ArrowLeft", "BODY")]
    assert bus.listener_count == 1
