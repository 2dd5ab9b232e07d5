"""Candidate fields and the draft field applier.

A candidate field is a proposed value for one leaf of the résumé draft,
addressed by a typed path rather than a dotted string so that list indices
cannot be confused with keys:

    FieldPath.parse("workExperience[0].companyName")
        → segments ("workExperience", 0, "companyName")

Applying fields never mutates the caller's draft. Fields below the
confidence threshold are returned for confirmation instead of merged.
"""

import copy
import re
from dataclasses import dataclass, field
from typing import Any

# Default merge threshold; the service reads its own from settings.
DEFAULT_CONFIDENCE_THRESHOLD = 0.7

_KEY = r"[A-Za-z_][A-Za-z0-9_]*"
_PATH_PATTERN = re.compile(rf"^{_KEY}(?:\[\d+\])*(?:\.{_KEY}(?:\[\d+\])*)*$")
_TOKEN_PATTERN = re.compile(rf"({_KEY})|\[(\d+)\]")

PathSegment = str | int


@dataclass(frozen=True)
class FieldPath:
    """Path to one value in the draft.

    Attributes:
        segments: Keys (str) and list indices (int), outermost first.
    """

    segments: tuple[PathSegment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("FieldPath needs at least one segment")
        if not isinstance(self.segments[0], str):
            raise ValueError("FieldPath must start with a key")
        for segment in self.segments:
            # bool is an int subclass; reject it explicitly
            if isinstance(segment, bool) or not isinstance(segment, str | int):
                raise ValueError(f"Invalid path segment: {segment!r}")
            if isinstance(segment, int) and segment < 0:
                raise ValueError(f"Negative index in path: {segment}")

    @classmethod
    def parse(cls, text: str) -> "FieldPath":
        """Parse the wire form, e.g. ``education[1].degree``.

        Raises:
            ValueError: If the text is not a well-formed path.
        """
        if not isinstance(text, str) or not _PATH_PATTERN.match(text):
            raise ValueError(f"Malformed field path: {text!r}")
        segments: list[PathSegment] = []
        for key, index in _TOKEN_PATTERN.findall(text):
            segments.append(key if key else int(index))
        return cls(tuple(segments))

    @classmethod
    def of(cls, *segments: PathSegment) -> "FieldPath":
        """Build a path from segments: ``FieldPath.of("skills", "languages")``."""
        return cls(tuple(segments))

    @classmethod
    def entry(cls, list_key: str, index: int, name: str) -> "FieldPath":
        """Path to a field of one entry in a multi-entry list."""
        return cls((list_key, index, name))

    def __str__(self) -> str:
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, int):
                parts.append(f"[{segment}]")
            elif parts:
                parts.append(f".{segment}")
            else:
                parts.append(segment)
        return "".join(parts)


@dataclass(frozen=True)
class CandidateField:
    """A proposed draft value with the extractor's confidence in it."""

    path: FieldPath
    value: Any
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        """Wire form: ``{"path": "a[0].b", "value": ..., "confidence": ...}``."""
        return {"path": str(self.path), "value": self.value, "confidence": self.confidence}


@dataclass
class ApplyResult:
    """Outcome of applying candidate fields to a draft.

    Attributes:
        draft: New draft with the confident fields merged.
        applied: Fields that were merged.
        needs_confirmation: Fields below threshold, left out of the draft.
    """

    draft: dict[str, Any]
    applied: list[CandidateField] = field(default_factory=list)
    needs_confirmation: list[CandidateField] = field(default_factory=list)


def _empty_slot(next_segment: PathSegment | None) -> Any:
    """Placeholder for a slot whose child is addressed by ``next_segment``."""
    if next_segment is None:
        return None
    if isinstance(next_segment, int):
        return []
    return {}


def _set_path(draft: dict[str, Any], path: FieldPath, value: Any) -> None:
    """Write ``value`` at ``path``, creating containers along the way.

    A container of the wrong shape (a string where a list is needed) is
    replaced; the path always wins over stale data.
    """
    segments = path.segments
    container: Any = draft
    for position, segment in enumerate(segments):
        is_leaf = position == len(segments) - 1
        next_segment = None if is_leaf else segments[position + 1]

        if isinstance(segment, int):
            while len(container) <= segment:
                container.append(_empty_slot(next_segment))
            if is_leaf:
                container[segment] = copy.deepcopy(value)
                return
            child = container[segment]
            if not isinstance(child, list if isinstance(next_segment, int) else dict):
                child = _empty_slot(next_segment)
                container[segment] = child
            container = child
        else:
            if is_leaf:
                container[segment] = copy.deepcopy(value)
                return
            child = container.get(segment)
            if not isinstance(child, list if isinstance(next_segment, int) else dict):
                child = _empty_slot(next_segment)
                container[segment] = child
            container = child


def apply_fields(
    draft: dict[str, Any] | None,
    fields: list[CandidateField],
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> ApplyResult:
    """Merge confident fields into a copy of the draft.

    Fields are applied in order, so a later field for the same path wins.

    Args:
        draft: Current draft (not modified).
        fields: Candidate fields from this turn.
        threshold: Minimum confidence for a field to be merged.

    Returns:
        ApplyResult with the new draft and the split of applied and
        held-back fields.
    """
    result = ApplyResult(draft=copy.deepcopy(draft) if draft else {})
    for candidate in fields:
        if candidate.confidence >= threshold:
            _set_path(result.draft, candidate.path, candidate.value)
            result.applied.append(candidate)
        else:
            result.needs_confirmation.append(candidate)
    return result


def get_path(draft: dict[str, Any], path: FieldPath) -> Any:
    """Read the value at ``path``, or None if any step is missing."""
    current: Any = draft
    for segment in path.segments:
        if isinstance(segment, int):
            if not isinstance(current, list) or segment >= len(current):
                return None
        elif not isinstance(current, dict) or segment not in current:
            return None
        current = current[segment]
    return current
