"""Merge result: emitted lines plus the decision trail that produced them."""

from collections import Counter
from typing import TYPE_CHECKING

from .models import DecisionKind, DecisionRecord, EnvLine, FrozenBlock, Side, Statement

if TYPE_CHECKING:
    from .analysis import FileAnalysis


def extract_lines(statement: Statement) -> list[str]:
    """Raw output lines of a statement."""
    if isinstance(statement, (EnvLine, FrozenBlock)):
        return statement.raw_lines
    raise TypeError(f"Unsupported statement type: {type(statement).__name__}")


class MergeResult:
    """
    Append-only accumulator for one merge.

    Every contribution adds its lines to the output buffer and one
    DecisionRecord to the audit trail.
    """

    def __init__(self, template_analysis: "FileAnalysis", dest_analysis: "FileAnalysis"):
        self.template_analysis = template_analysis
        self.dest_analysis = dest_analysis
        self._lines: list[str] = []
        self._decisions: list[DecisionRecord] = []

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def decisions(self) -> tuple[DecisionRecord, ...]:
        return tuple(self._decisions)

    def add_from_template(self, index: int, decision: DecisionKind = DecisionKind.FROM_TEMPLATE) -> None:
        """Emit the template statement at ``index``."""
        statement = self.template_analysis.statement_at(index)
        if statement is None:
            return
        self._add_statement(statement, decision, Side.TEMPLATE, index)

    def add_from_destination(self, index: int, decision: DecisionKind = DecisionKind.FROM_DESTINATION) -> None:
        """Emit the destination statement at ``index``."""
        statement = self.dest_analysis.statement_at(index)
        if statement is None:
            return
        self._add_statement(statement, decision, Side.DESTINATION, index)

    def add_freeze_block(self, block: FrozenBlock) -> None:
        """Emit a destination freeze block verbatim, markers included."""
        lines = block.raw_lines
        self._lines.extend(lines)
        self._decisions.append(DecisionRecord(
            decision=DecisionKind.FROZEN_PRESERVED,
            source=Side.DESTINATION,
            lines=len(lines),
            start_line=block.start_line,
            end_line=block.end_line
        ))

    def add_raw(self, lines: list[str], decision: DecisionKind = DecisionKind.RAW) -> None:
        """Emit lines that do not come from either analysis."""
        self._lines.extend(lines)
        self._decisions.append(DecisionRecord(decision=decision, source=None, lines=len(lines)))

    def _add_statement(self, statement: Statement, decision: DecisionKind, source: Side, index: int) -> None:
        lines = extract_lines(statement)
        self._lines.extend(lines)
        self._decisions.append(DecisionRecord(
            decision=decision,
            source=source,
            lines=len(lines),
            index=index,
            start_line=statement.location.start_line,
            end_line=statement.location.end_line
        ))

    def is_empty(self) -> bool:
        return not self._lines

    def to_text(self) -> str:
        """Join output lines, ending the text with exactly one newline unless it is empty."""
        if not self._lines:
            return ""
        return "\n".join(self._lines).rstrip("\n") + "\n"

    def __str__(self) -> str:
        return self.to_text()

    def summary(self) -> dict:
        """Counts of decisions and lines, grouped by decision kind."""
        counts = Counter(record.decision.value for record in self._decisions)
        return {
            "total_decisions": len(self._decisions),
            "total_lines": len(self._lines),
            "by_decision": dict(counts),
        }
