"""Domain model for the documentation search index.

Value objects are immutable pydantic models:
- IndexTarget: one anchor link into a generated documentation page
- IndexEntry: a searchable keyword with its ordered target links
- IndexPartition: the decoded content of one generated data file
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator


_PARTITION_SUFFIX = re.compile(r"_\d+$")

DEFAULT_SECTION = "all"


def normalize_keyword(value: str) -> str:
    """Normalize a keyword or query term for case-insensitive matching."""
    return value.strip().lower()


def section_from_key(key: str) -> str:
    """Derive the Doxygen section from a partition key.

    ``functions_2`` -> ``functions``; keys without a counter suffix are
    their own section.
    """
    section = _PARTITION_SUFFIX.sub("", key)
    return section or DEFAULT_SECTION


class IndexTarget(BaseModel):
    """A single link from a keyword into the generated documentation."""

    model_config = ConfigDict(frozen=True)

    page_anchor: str = Field(min_length=1)
    owner_signature: str = ""

    @property
    def identity(self) -> tuple[str, str]:
        return (self.page_anchor, self.owner_signature)

    @property
    def page(self) -> str:
        """Page part of the anchor URL, without the fragment."""
        return self.page_anchor.partition("#")[0]

    @property
    def fragment(self) -> str:
        return self.page_anchor.partition("#")[2]


class IndexEntry(BaseModel):
    """A keyword and the ordered, de-duplicated links it resolves to."""

    model_config = ConfigDict(frozen=True)

    keyword: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    targets: tuple[IndexTarget, ...] = Field(min_length=1)
    sections: frozenset[str] = Field(default_factory=frozenset)
    aliases: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("keyword", mode="before")
    @classmethod
    def _normalize(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_keyword(value)
        return value

    @field_validator("targets")
    @classmethod
    def _dedupe_targets(cls, value: tuple[IndexTarget, ...]) -> tuple[IndexTarget, ...]:
        return dedupe_targets(value)

    @property
    def target_count(self) -> int:
        return len(self.targets)

    def merged_with(self, other: IndexEntry) -> IndexEntry:
        """Return a copy whose targets are this entry's followed by the other's new ones.

        The first display name is kept; any other spelling of the same keyword
        is recorded in ``aliases``.
        """
        aliases = self.aliases | other.aliases | {other.display_name}
        return IndexEntry(
            keyword=self.keyword,
            display_name=self.display_name,
            targets=self.targets + other.targets,
            sections=self.sections | other.sections,
            aliases=aliases - {self.display_name},
        )


class IndexPartition(BaseModel):
    """Decoded, read-only content of one generated partition file."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    entries: tuple[IndexEntry, ...] = ()
    section: str = DEFAULT_SECTION
    source: str | None = None
    skipped: int = Field(default=0, ge=0)

    def __len__(self) -> int:
        return len(self.entries)


def dedupe_targets(targets: tuple[IndexTarget, ...]) -> tuple[IndexTarget, ...]:
    """Drop repeated ``(page_anchor, owner_signature)`` pairs, keeping first-seen order."""
    seen: set[tuple[str, str]] = set()
    unique: list[IndexTarget] = []
    for target in targets:
        if target.identity in seen:
            continue
        seen.add(target.identity)
        unique.append(target)
    return tuple(unique)
