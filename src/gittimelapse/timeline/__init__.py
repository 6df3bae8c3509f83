"""Stepping through the revisions of one file.

Classes:
    Timeline: A file's history with revision pairs prepared for display.
    RevisionPair: A revision and its predecessor, ready to render.
    RevisionPane: One side of a revision pair.
    DisplayMode: Aligned or regular side-by-side rendering.
"""

from gittimelapse.timeline._models import DisplayMode, RevisionPair, RevisionPane
from gittimelapse.timeline._timeline import Timeline

__all__ = [
    "DisplayMode",
    "RevisionPair",
    "RevisionPane",
    "Timeline",
]
