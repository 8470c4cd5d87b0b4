"""
Shared helpers for the Seg Racer front end.

Components:
- normalize_segments: canonical form of a segment pattern
- ShadowSegments: renderer wrapper that skips redundant redraws
"""

from display import SEGMENT_IDS


def normalize_segments(segments):
    """
    Return the pattern in canonical ``"abcdefgp"`` order without duplicates.

    Unknown ids are dropped, so ``"gax"`` becomes ``"ag"``.
    """
    return "".join(s for s in SEGMENT_IDS if s in segments)


class ShadowSegments:
    """
    Renderer wrapper that tracks what is on screen.

    The display sink notifies on every write, including the many writes of
    the same segment during scrolling and flashing. This wrapper keeps a
    shadow copy of the lit pattern and only forwards an update to the
    underlying renderer when the pattern actually changes, which keeps the
    desktop window from redrawing the same frame over and over.
    """

    def __init__(self, renderer):
        """
        Initialize the shadow.

        Args:
            renderer: Object with a ``draw_segments(segments)`` method.
        """
        self.renderer = renderer
        # None means "unknown", so the first update always goes through
        self.shadow = None

    def show_segments(self, segments):
        """
        Record a new pattern and forward it if it differs.

        Args:
            segments (str): Segment ids in any order.

        Returns:
            bool: True when the renderer was updated.
        """
        pattern = normalize_segments(segments)
        if pattern == self.shadow:
            return False
        self.shadow = pattern
        self.renderer.draw_segments(pattern)
        return True
