"""Decision resolver: picks the surviving content for each alignment entry."""

from collections.abc import Container, Iterable, Sequence
from typing import Optional

from .analysis import FileAnalysis
from .config import DEFAULT_PREFERENCE_KEY, Classifier, MergeOptions, PreferenceSetting
from .models import (
    AlignmentEntry,
    AlignmentKind,
    DecisionKind,
    EnvLine,
    FrozenBlock,
    Side,
    Statement,
)
from .result import MergeResult


def classify_by_kind(statement: Statement) -> str:
    """Tag a statement with its variant name, e.g. ``"assignment"`` or ``"frozen_block"``."""
    if isinstance(statement, FrozenBlock):
        return "frozen_block"
    if isinstance(statement, EnvLine):
        return statement.kind.value
    raise TypeError(f"Unsupported statement type: {type(statement).__name__}")


def first_type_tag(
    statement: Statement,
    classifiers: Iterable[Classifier],
    fallback: Optional[str] = None,
    recognized: Optional[Container[str]] = None
) -> Optional[str]:
    """
    Return the first tag a classifier assigns to ``statement``, else ``fallback``.

    With ``recognized``, tags outside it are skipped and later classifiers
    are consulted.
    """
    for classifier in classifiers:
        tag = classifier(statement)
        if tag is None:
            continue
        if recognized is None or tag in recognized:
            return tag
    return fallback


def resolve_preference(
    preference: PreferenceSetting,
    template_stmt: Statement,
    dest_stmt: Statement,
    classifiers: Sequence[Classifier] = ()
) -> Side:
    """
    Decide which side wins a matched pair.

    For a typed mapping the template's first recognized tag is consulted,
    then the destination's, then the mapping's default. Destination wins
    when nothing applies.
    """
    if isinstance(preference, Side):
        return preference

    type_tags = {tag for tag in preference if tag != DEFAULT_PREFERENCE_KEY}
    for stmt in (template_stmt, dest_stmt):
        tag = first_type_tag(stmt, classifiers, recognized=type_tags)
        if tag is not None:
            return preference[tag]

    return preference.get(DEFAULT_PREFERENCE_KEY, Side.DESTINATION)


class DecisionResolver:
    """Applies freeze and preference rules to an alignment."""

    def __init__(self, template: FileAnalysis, destination: FileAnalysis, options: MergeOptions):
        self.template = template
        self.destination = destination
        self.options = options

    def apply(self, alignment: Iterable[AlignmentEntry], result: MergeResult) -> MergeResult:
        for entry in alignment:
            if entry.kind is AlignmentKind.MATCH:
                self._process_match(entry, result)
            elif entry.kind is AlignmentKind.TEMPLATE_ONLY:
                self._process_template_only(entry, result)
            elif entry.kind is AlignmentKind.DEST_ONLY:
                self._process_dest_only(entry, result)
            else:
                raise ValueError(f"Unknown alignment kind: {entry.kind}")
        return result

    def _process_match(self, entry: AlignmentEntry, result: MergeResult) -> None:
        dest_stmt = self.destination.statements[entry.dest_index]

        # Frozen destination content wins over any preference
        if isinstance(dest_stmt, FrozenBlock):
            result.add_freeze_block(dest_stmt)
            return

        template_stmt = self.template.statements[entry.template_index]
        side = resolve_preference(
            self.options.preference,
            template_stmt,
            dest_stmt,
            self.options.classification
        )
        if side is Side.TEMPLATE:
            result.add_from_template(entry.template_index, decision=DecisionKind.FROM_TEMPLATE)
        else:
            result.add_from_destination(entry.dest_index, decision=DecisionKind.FROM_DESTINATION)

    def _process_template_only(self, entry: AlignmentEntry, result: MergeResult) -> None:
        if not self.options.append_template_only:
            return

        stmt = self.template.statements[entry.template_index]
        # Template comments, blanks and invalid lines are never carried over
        if isinstance(stmt, EnvLine) and not stmt.is_assignment:
            return

        result.add_from_template(entry.template_index, decision=DecisionKind.APPENDED)

    def _process_dest_only(self, entry: AlignmentEntry, result: MergeResult) -> None:
        dest_stmt = self.destination.statements[entry.dest_index]

        if isinstance(dest_stmt, FrozenBlock):
            result.add_freeze_block(dest_stmt)
        else:
            result.add_from_destination(entry.dest_index, decision=DecisionKind.FROM_DESTINATION)
