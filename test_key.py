from key import Key


def test_starts_released():
    key = Key()
    assert key.released()
    assert not key.pressed()


def test_edges_reach_updater_then_listeners():
    key = Key()
    calls = []
    key.set_updater(lambda state: calls.append(("updater", state)))
    key.register(lambda state: calls.append(("listener", state)))
    key.on_press()
    assert key.pressed()
    key.on_release()
    assert key.released()
    assert calls == [
        ("updater", True),
        ("listener", True),
        ("updater", False),
        ("listener", False),
    ]


def test_clear_updater():
    key = Key()
    calls = []
    key.set_updater(calls.append)
    key.clear_updater()
    key.on_press()
    assert calls == []


def test_listener_removing_itself_during_dispatch():
    key = Key()
    calls = []

    def once(state):
        calls.append(("once", state))
        key.unregister(once)

    key.register(once)
    key.register(lambda state: calls.append(("always", state)))
    key.on_press()
    key.on_release()
    assert calls == [("once", True), ("always", True), ("always", False)]


def test_listener_registered_during_dispatch_waits_for_next_edge():
    key = Key()
    calls = []

    def late(state):
        calls.append(("late", state))

    def first(state):
        calls.append(("first", state))
        key.register(late)

    key.register(first)
    key.on_press()
    assert calls == [("first", True)]
    key.unregister(first)
    key.on_release()
    assert calls == [("first", True), ("late", False)]
