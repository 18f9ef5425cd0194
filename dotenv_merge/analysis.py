"""File analysis: statements, freeze blocks and signatures for one dotenv source."""

import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .errors import ParseError
from .logger import get_logger
from .models import EnvLine, FrozenBlock, Statement
from .parser import parse_lines

logger = get_logger(__name__)

DEFAULT_FREEZE_TOKEN = "dotenv-merge"

SignatureGenerator = Callable[[Statement], Any]


def freeze_marker_pattern(token: str) -> re.Pattern:
    """
    Build the regex matching ``# <token>:freeze [reason]`` and ``# <token>:unfreeze``.

    Group 1 is the marker type, group 2 the (possibly empty) trailing text.
    """
    return re.compile(rf"^\s*#\s*{re.escape(token)}:(freeze|unfreeze)\b\s*(.*)$")


@dataclass(frozen=True)
class FreezeMarker:
    """A freeze or unfreeze comment found in the source."""
    type: str
    line: int
    reason: Optional[str] = None


class FileAnalysis:
    """
    Parsed view of a dotenv source.

    ``lines`` holds every line as parsed. ``statements`` is the same sequence
    with each frozen range collapsed into a single FrozenBlock placed where
    its opening marker was.
    """

    def __init__(
        self,
        source: Union[str, bytes],
        freeze_token: str = DEFAULT_FREEZE_TOKEN,
        signature_generator: Optional[SignatureGenerator] = None
    ):
        if isinstance(source, bytes):
            try:
                source = source.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(content=source, errors=[e]) from e

        self.source = source
        self.freeze_token = freeze_token
        self.signature_generator = signature_generator

        self.lines: tuple[EnvLine, ...] = tuple(parse_lines(source))
        self.freeze_blocks: tuple[FrozenBlock, ...] = tuple(
            self._build_freeze_blocks(self._find_freeze_markers())
        )
        self.statements: tuple[Statement, ...] = tuple(self._integrate_freeze_blocks())

        self._key_index: dict[str, EnvLine] = {}
        for stmt in self.statements:
            if isinstance(stmt, EnvLine) and stmt.is_assignment:
                self._key_index.setdefault(stmt.key, stmt)

        logger.debug(
            "FileAnalysis initialized: signature_generator=%s lines=%d statements=%d "
            "freeze_blocks=%d assignments=%d",
            "custom" if signature_generator else "default",
            len(self.lines),
            len(self.statements),
            len(self.freeze_blocks),
            len(self.assignment_lines),
        )

    @property
    def valid(self) -> bool:
        """Text sources always analyze; malformed lines become invalid statements."""
        return True

    @property
    def assignment_lines(self) -> list[EnvLine]:
        """Assignments outside freeze blocks."""
        return [s for s in self.statements if isinstance(s, EnvLine) and s.is_assignment]

    @property
    def all_assignments(self) -> list[EnvLine]:
        """Assignments including those inside freeze blocks."""
        return [line for line in self.lines if line.is_assignment]

    @property
    def keys(self) -> list[str]:
        return [line.key for line in self.all_assignments]

    def statement_at(self, index: int) -> Optional[Statement]:
        """Get a statement by its 0-based position."""
        if 0 <= index < len(self.statements):
            return self.statements[index]
        return None

    def line_at(self, line_number: int) -> Optional[EnvLine]:
        """Get a parsed line by its 1-indexed line number."""
        if 1 <= line_number <= len(self.lines):
            return self.lines[line_number - 1]
        return None

    def env_var(self, key: str) -> Optional[EnvLine]:
        """First non-frozen assignment of ``key``, if any."""
        return self._key_index.get(key)

    def compute_node_signature(self, statement: Statement) -> Optional[tuple]:
        """Built-in signature for a statement."""
        if isinstance(statement, (EnvLine, FrozenBlock)):
            return statement.signature
        raise TypeError(f"Unsupported statement type: {type(statement).__name__}")

    def generate_signature(self, statement: Statement) -> Optional[tuple]:
        """
        Signature used to match a statement across files.

        A custom generator may return a signature, a statement (use that
        statement's built-in signature), or None (never match).
        """
        if self.signature_generator is None:
            return self.compute_node_signature(statement)

        result = self.signature_generator(statement)
        if result is None:
            return None
        if isinstance(result, (EnvLine, FrozenBlock)):
            return self.compute_node_signature(result)
        if isinstance(result, list):
            return tuple(result)
        return result

    def _find_freeze_markers(self) -> list[FreezeMarker]:
        pattern = freeze_marker_pattern(self.freeze_token)
        markers = []

        for line in self.lines:
            if not line.is_comment:
                continue
            match = pattern.match(line.raw)
            if match:
                reason = match.group(2).strip() or None
                markers.append(FreezeMarker(match.group(1), line.line_number, reason))

        return markers

    def _build_freeze_blocks(self, markers: list[FreezeMarker]) -> list[FrozenBlock]:
        blocks = []
        open_marker = None

        for marker in markers:
            if marker.type == "freeze":
                if open_marker:
                    logger.warning("Nested freeze block at line %d, ignoring", marker.line)
                else:
                    open_marker = marker
            elif open_marker:
                blocks.append(FrozenBlock(
                    start_line=open_marker.line,
                    end_line=marker.line,
                    lines=self.lines[open_marker.line - 1:marker.line],
                    reason=open_marker.reason
                ))
                open_marker = None
            else:
                logger.warning("Unfreeze without freeze at line %d, ignoring", marker.line)

        if open_marker:
            logger.warning("Unclosed freeze block starting at line %d, ignoring", open_marker.line)

        return blocks

    def _integrate_freeze_blocks(self) -> list[Statement]:
        if not self.freeze_blocks:
            return list(self.lines)

        starts = {block.start_line: block for block in self.freeze_blocks}
        result: list[Statement] = []
        frozen_until = 0

        for line in self.lines:
            if line.line_number in starts:
                block = starts[line.line_number]
                result.append(block)
                frozen_until = block.end_line
            elif line.line_number > frozen_until:
                result.append(line)

        return result
