"""Data models for dotenv merging."""

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional, Union


class LineKind(Enum):
    """Kinds of lines found in a dotenv file."""
    ASSIGNMENT = "assignment"
    COMMENT = "comment"
    BLANK = "blank"
    INVALID = "invalid"


class Side(Enum):
    """The two inputs of a merge."""
    TEMPLATE = "template"
    DESTINATION = "destination"


class DecisionKind(Enum):
    """Why a piece of output was emitted."""
    FROM_TEMPLATE = "template"
    FROM_DESTINATION = "destination"
    FROZEN_PRESERVED = "freeze_block"
    APPENDED = "added"
    RAW = "raw"


class AlignmentKind(Enum):
    """How a statement pairs up across template and destination."""
    MATCH = "match"
    TEMPLATE_ONLY = "template_only"
    DEST_ONLY = "dest_only"


@dataclass(frozen=True)
class Location:
    """Inclusive, 1-indexed line span of a statement."""
    start_line: int
    end_line: int

    def covers(self, line_number: int) -> bool:
        return self.start_line <= line_number <= self.end_line


@dataclass(frozen=True)
class EnvLine:
    """A single parsed line of a dotenv file."""
    raw: str
    line_number: int
    kind: LineKind
    key: Optional[str] = None
    value: Optional[str] = None
    export: bool = False

    @property
    def is_assignment(self) -> bool:
        return self.kind is LineKind.ASSIGNMENT

    @property
    def is_comment(self) -> bool:
        return self.kind is LineKind.COMMENT

    @property
    def is_blank(self) -> bool:
        return self.kind is LineKind.BLANK

    @property
    def is_invalid(self) -> bool:
        return self.kind is LineKind.INVALID

    @property
    def location(self) -> Location:
        return Location(self.line_number, self.line_number)

    @property
    def signature(self) -> Optional[tuple]:
        if not self.is_assignment:
            return None
        return ("env", self.key)

    @property
    def raw_lines(self) -> list[str]:
        return [self.raw]

    def __str__(self) -> str:
        return self.raw


@dataclass(frozen=True)
class FrozenBlock:
    """
    A span of destination lines protected by freeze markers.

    The contained lines include the opening and closing marker comments and
    are always emitted verbatim.
    """
    start_line: int
    end_line: int
    lines: tuple[EnvLine, ...]
    reason: Optional[str] = None

    @property
    def location(self) -> Location:
        return Location(self.start_line, self.end_line)

    @property
    def content(self) -> str:
        return "\n".join(line.raw for line in self.lines)

    @property
    def signature(self) -> tuple:
        return ("FrozenBlock", re.sub(r"\s+", " ", self.content).strip())

    @property
    def env_lines(self) -> list[EnvLine]:
        """Assignments inside the block."""
        return [line for line in self.lines if line.is_assignment]

    @property
    def raw_lines(self) -> list[str]:
        return [line.raw for line in self.lines]

    def __str__(self) -> str:
        return self.content


Statement = Union[EnvLine, FrozenBlock]


@dataclass(frozen=True)
class AlignmentEntry:
    """One row of an alignment between template and destination statements."""
    kind: AlignmentKind
    template_index: Optional[int] = None
    dest_index: Optional[int] = None
    signature: Optional[tuple] = None

    @classmethod
    def match(cls, template_index: int, dest_index: int, signature: tuple) -> "AlignmentEntry":
        return cls(AlignmentKind.MATCH, template_index, dest_index, signature)

    @classmethod
    def template_only(cls, template_index: int, signature: Optional[tuple] = None) -> "AlignmentEntry":
        return cls(AlignmentKind.TEMPLATE_ONLY, template_index=template_index, signature=signature)

    @classmethod
    def dest_only(cls, dest_index: int, signature: Optional[tuple] = None) -> "AlignmentEntry":
        return cls(AlignmentKind.DEST_ONLY, dest_index=dest_index, signature=signature)


@dataclass(frozen=True)
class DecisionRecord:
    """Audit record of one contribution to the merged output."""
    decision: DecisionKind
    source: Optional[Side]
    lines: int
    index: Optional[int] = None
    start_line: Optional[int] = None
    end_line: Optional[int] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["decision"] = self.decision.value
        data["source"] = self.source.value if self.source else "raw"
        return data


@dataclass
class FileInfo:
    """Information about a scanned file including its hash."""
    relative_path: str
    absolute_path: str
    hash: str
    size: int
