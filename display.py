"""
Seven-segment display sink for Seg Racer.

Holds the pattern currently lit on the single digit and forwards every
change to a registered observer (the pygame renderer on desktop). A pattern
is a string of segment ids taken from ``"abcdefgp"``, where ``p`` is the
decimal point::

      ---a---
     |       |
     f       b
     |       |
      ---g---
     |       |
     e       c
     |       |
      ---d---   . p

Characters are mapped through a fixed glyph table. Letters that a single
digit cannot render (k, v, w, x, z) and any other unknown character show
a blank display.
"""

SEGMENT_IDS = "abcdefgp"

DIGITS = (
    "abcdef",   # 0
    "bc",       # 1
    "abdeg",    # 2
    "abcdg",    # 3
    "bcfg",     # 4
    "acdfg",    # 5
    "acdefg",   # 6
    "abc",      # 7
    "abcdefg",  # 8
    "abcdfg",   # 9
)

LOWER = (
    "abcefg",   # A
    "cdefg",    # b
    "deg",      # c
    "bcdeg",    # d
    "adefg",    # E
    "aefg",     # F
    "acdef",    # G
    "cefg",     # h
    "e",        # i
    "bcde",     # J
    "",         # k
    "def",      # L
    "abcef",    # M
    "ceg",      # n
    "cdeg",     # o
    "abefg",    # P
    "abcfg",    # q
    "eg",       # r
    "acdfg",    # S
    "defg",     # t
    "cde",      # u
    "",         # v
    "",         # w
    "",         # x
    "bcdfg",    # y
    "",         # z
)

UPPER = (
    "abcefg",   # A
    "cdefg",    # b
    "adef",     # C
    "bcdeg",    # d
    "adefg",    # E
    "aefg",     # F
    "acdef",    # G
    "bcefg",    # H
    "ef",       # I
    "bcde",     # J
    "",         # k
    "def",      # L
    "abcef",    # M
    "ceg",      # n
    "abcdef",   # O
    "abefg",    # P
    "abcfg",    # q
    "eg",       # r
    "acdfg",    # S
    "defg",     # t
    "bcdef",    # U
    "",         # v
    "",         # w
    "",         # x
    "bcdfg",    # y
    "",         # z
)

SYMBOLS = {
    "-": "g",
    "_": "d",
    ".": "p",
}


def char_to_segs(char):
    """
    Map a character to the segments that draw it.

    Args:
        char (str): The character to look up. Only the first character of
            the string is used; an empty string maps to a blank pattern.

    Returns:
        str: The segment ids to light, or ``""`` when the character has no
        seven-segment representation.
    """
    if not char:
        return ""
    c = char[0]
    if "0" <= c <= "9":
        return DIGITS[ord(c) - ord("0")]
    if "A" <= c <= "Z":
        return UPPER[ord(c) - ord("A")]
    if "a" <= c <= "z":
        return LOWER[ord(c) - ord("a")]
    return SYMBOLS.get(c, "")


class Display:
    """
    The single-digit display shared by the VM, the UI helpers and the
    renderer.

    Only one observer is kept; registering a new one replaces the old.
    """

    def __init__(self):
        self._observer = None
        self._segments = ""

    @property
    def segments(self):
        """The pattern currently lit."""
        return self._segments

    def register(self, observer):
        """Attach the observer called with the new pattern on every write."""
        self._observer = observer

    def unregister(self):
        self._observer = None

    def show_segments(self, segments):
        """
        Light exactly the given segments.

        Args:
            segments (str): Segment ids from ``"abcdefgp"``, in any order.
        """
        self._segments = segments
        if self._observer:
            self._observer(segments)

    def show_char(self, char):
        self.show_segments(char_to_segs(char))

    def off(self):
        self.show_segments("")

    char_to_segs = staticmethod(char_to_segs)
