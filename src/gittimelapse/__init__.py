"""Browse the history of a single file in a git repository.

Each revision of the file is shown next to the revision before it, with
added and deleted lines highlighted and, in aligned mode, placeholder rows
keeping corresponding lines on the same row.
"""

from gittimelapse.exceptions import TimelapseError
from gittimelapse.repository import CommitList, TimelapseRepository
from gittimelapse.timeline import DisplayMode, RevisionPair, RevisionPane, Timeline

__all__ = [
    "CommitList",
    "DisplayMode",
    "RevisionPair",
    "RevisionPane",
    "TimelapseError",
    "TimelapseRepository",
    "Timeline",
]
