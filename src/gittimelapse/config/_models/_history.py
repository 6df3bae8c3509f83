"""History walk configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from gittimelapse.repository import DEFAULT_RENAME_THRESHOLD


class HistoryConfig(BaseModel):
    """History configuration section.

    Attributes:
        revision: Revision the walk starts from.
        first_parent: Only follow first parents at merge commits.
        follow_renames: Keep following the file across renames.
        rename_threshold: Similarity percentage for rename detection.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    revision: str = Field(default="HEAD", min_length=1)
    first_parent: bool = False
    follow_renames: bool = False
    rename_threshold: int = Field(default=DEFAULT_RENAME_THRESHOLD, ge=0, le=100)
