"""Commit loading and metadata conversion."""

from datetime import datetime, timedelta, timezone
from typing import Final

from dulwich.object_store import BaseObjectStore
from dulwich.objects import Commit

from gittimelapse.exceptions import NoSuchRevisionError
from gittimelapse.repository._models import CommitId, CommitRecord, Identity
from gittimelapse.utils import decode_display

_SHA_HEX_LENGTH: Final = 40


def load_commit(store: BaseObjectStore, commit_id: CommitId) -> Commit:
    """Load a commit object by its full hex id.

    Args:
        store: Object store to read from.
        commit_id: Full 40-character hex commit id.

    Returns:
        The commit object.

    Raises:
        NoSuchRevisionError: If the id is malformed, unknown, or names an
            object that is not a commit.
    """
    if len(commit_id) != _SHA_HEX_LENGTH:
        msg = f"Not a full commit id: {commit_id}"
        raise NoSuchRevisionError(msg, revision=commit_id)
    try:
        obj = store[commit_id.encode("ascii")]
    except (KeyError, ValueError, UnicodeEncodeError) as e:
        msg = f"Commit not found: {commit_id}"
        raise NoSuchRevisionError(msg, revision=commit_id) from e
    if not isinstance(obj, Commit):
        msg = f"Object {commit_id} is a {obj.type_name.decode()}, not a commit"
        raise NoSuchRevisionError(msg, revision=commit_id)
    return obj


def parse_identity(signature: bytes, epoch: int, tz_offset: int) -> Identity:
    """Parse a git signature into an Identity.

    Args:
        signature: Signature bytes in "Name <email>" format.
        epoch: Unix timestamp.
        tz_offset: UTC offset in seconds, as stored by dulwich (east positive).

    Returns:
        The parsed identity with an aware timestamp.
    """
    text = decode_display(signature)
    if "<" in text and text.endswith(">"):
        name, _, email = text.rpartition("<")
        name = name.strip()
        email = email.rstrip(">")
    else:
        name = text.strip()
        email = ""

    tz = timezone(timedelta(seconds=tz_offset))
    timestamp = datetime.fromtimestamp(epoch, tz=tz)
    return Identity(name=name, email=email, timestamp=timestamp)


def to_commit_record(commit: Commit, *, include_message: bool = False) -> CommitRecord:
    """Convert a dulwich commit into a CommitRecord.

    Args:
        commit: The commit object.
        include_message: Decode and attach the commit message.

    Returns:
        The commit metadata.
    """
    author = parse_identity(commit.author, commit.author_time, commit.author_timezone)
    committer = parse_identity(
        commit.committer, commit.commit_time, commit.commit_timezone
    )
    return CommitRecord(
        id=commit.id.decode("ascii"),
        parent_ids=tuple(parent.decode("ascii") for parent in commit.parents),
        author=author,
        committer=committer,
        commit_time=committer.timestamp,
        message=decode_display(commit.message) if include_message else None,
    )
