"""Statement alignment between a template and a destination."""

from collections.abc import Sequence

from .analysis import FileAnalysis
from .logger import get_logger
from .models import AlignmentEntry, AlignmentKind, Statement

logger = get_logger(__name__)


def build_signature_map(statements: Sequence[Statement], analysis: FileAnalysis) -> dict:
    """Map each signature to the index of its first occurrence."""
    signatures = {}
    for index, stmt in enumerate(statements):
        sig = analysis.generate_signature(stmt)
        if sig is not None and sig not in signatures:
            signatures[sig] = index
    return signatures


def sort_alignment(entries: list[AlignmentEntry]) -> list[AlignmentEntry]:
    """
    Order entries for output.

    Matches and destination-only entries keep the destination's layout;
    template-only entries follow, in template order.
    """
    def sort_key(entry: AlignmentEntry) -> tuple[int, int]:
        if entry.kind is AlignmentKind.TEMPLATE_ONLY:
            return (1, entry.template_index)
        return (0, entry.dest_index)

    return sorted(entries, key=sort_key)


def align_statements(template: FileAnalysis, destination: FileAnalysis) -> list[AlignmentEntry]:
    """
    Pair template and destination statements by signature.

    Each destination statement is matched at most once; duplicates of a
    signature surface as destination-only entries.
    """
    dest_stmts = destination.statements
    dest_sigs = build_signature_map(dest_stmts, destination)

    entries = []
    consumed = set()

    for t_idx, stmt in enumerate(template.statements):
        sig = template.generate_signature(stmt)
        d_idx = dest_sigs.get(sig) if sig is not None else None

        if d_idx is not None and d_idx not in consumed:
            entries.append(AlignmentEntry.match(t_idx, d_idx, sig))
            consumed.add(d_idx)
        else:
            entries.append(AlignmentEntry.template_only(t_idx, sig))

    for d_idx, stmt in enumerate(dest_stmts):
        if d_idx not in consumed:
            entries.append(AlignmentEntry.dest_only(d_idx, destination.generate_signature(stmt)))

    alignment = sort_alignment(entries)

    logger.debug(
        "Alignment complete: total=%d matches=%d template_only=%d dest_only=%d",
        len(alignment),
        sum(1 for e in alignment if e.kind is AlignmentKind.MATCH),
        sum(1 for e in alignment if e.kind is AlignmentKind.TEMPLATE_ONLY),
        sum(1 for e in alignment if e.kind is AlignmentKind.DEST_ONLY),
    )
    return alignment
