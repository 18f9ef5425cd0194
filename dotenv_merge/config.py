"""Merge options."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .analysis import DEFAULT_FREEZE_TOKEN, SignatureGenerator
from .errors import ConfigurationError
from .models import Side, Statement

DEFAULT_PREFERENCE_KEY = "default"

Classifier = Callable[[Statement], Optional[str]]
PreferenceSetting = Union[Side, dict[str, Side]]


def coerce_side(value: Any) -> Side:
    """Turn ``Side``, ``"template"`` or ``"destination"`` into a Side."""
    if isinstance(value, Side):
        return value
    if isinstance(value, str):
        try:
            return Side(value.strip().lower())
        except ValueError:
            pass
    raise ConfigurationError(
        f"Invalid preference {value!r}: expected 'template' or 'destination'"
    )


def normalize_preference(value: Any) -> PreferenceSetting:
    """
    Validate a preference setting.

    Accepts a fixed side or a mapping of ``{"default": side, type_tag: side}``.
    Mapping keys are type tags produced by the classifiers.
    """
    if isinstance(value, Mapping):
        mapping = {}
        for tag, side in value.items():
            if not isinstance(tag, str) or not tag:
                raise ConfigurationError(f"Invalid preference type tag: {tag!r}")
            mapping[tag] = coerce_side(side)
        return mapping
    return coerce_side(value)


def normalize_classification(value: Any) -> tuple[Classifier, ...]:
    if value is None:
        return ()
    if callable(value):
        return (value,)
    if isinstance(value, Sequence) and not isinstance(value, str):
        for classifier in value:
            if not callable(classifier):
                raise ConfigurationError(f"Classifier is not callable: {classifier!r}")
        return tuple(value)
    raise ConfigurationError(f"Invalid classification: {value!r}")


@dataclass
class MergeOptions:
    """Options controlling one merge."""
    preference: PreferenceSetting = Side.DESTINATION
    append_template_only: bool = False
    freeze_token: str = DEFAULT_FREEZE_TOKEN
    signature_generator: Optional[SignatureGenerator] = None
    classification: tuple[Classifier, ...] = field(default_factory=tuple)

    def __post_init__(self):
        self.preference = normalize_preference(self.preference)
        self.classification = normalize_classification(self.classification)
        self.append_template_only = bool(self.append_template_only)

        if not isinstance(self.freeze_token, str) or not self.freeze_token.strip():
            raise ConfigurationError(f"Invalid freeze token: {self.freeze_token!r}")
        if self.signature_generator is not None and not callable(self.signature_generator):
            raise ConfigurationError("signature_generator must be callable")
