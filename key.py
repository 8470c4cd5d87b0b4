"""
Single push button input latch.

The front end calls ``on_press()`` / ``on_release()`` on every physical or
emulated edge (space bar, mouse on the switch). The latch does not
deduplicate: the caller must not report a press while already pressed.
"""


def _none(state):
    pass


class Key:
    """
    Boolean button state with edge listeners.

    The updater is a single callback used to mirror the switch position on
    screen. Listeners are the transient subscriptions of the game logic;
    each is removed by its owner once it has seen the edge it waited for.
    """

    def __init__(self):
        self._updater = _none
        self._listeners = []
        self._state = False

    def set_updater(self, updater):
        self._updater = updater

    def clear_updater(self):
        self._updater = _none

    def register(self, listener):
        # copy-on-write: a dispatch in progress keeps iterating its snapshot
        self._listeners = self._listeners + [listener]

    def unregister(self, listener):
        self._listeners = [item for item in self._listeners if item is not listener]

    def on_press(self):
        self._set(True)

    def on_release(self):
        self._set(False)

    def _set(self, state):
        self._state = state
        self._updater(state)
        for listener in self._listeners:
            listener(state)

    def pressed(self):
        return self._state

    def released(self):
        return not self._state
