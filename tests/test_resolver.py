"""Tests for dotenv_merge.resolver module."""

import pytest

from dotenv_merge.alignment import align_statements
from dotenv_merge.analysis import FileAnalysis
from dotenv_merge.config import MergeOptions
from dotenv_merge.models import DecisionKind, Side
from dotenv_merge.parser import parse_line
from dotenv_merge.resolver import (
    DecisionResolver,
    classify_by_kind,
    first_type_tag,
    resolve_preference,
)
from dotenv_merge.result import MergeResult


def run(template_text, dest_text, **options):
    opts = MergeOptions(**options)
    template = FileAnalysis(template_text, opts.freeze_token, opts.signature_generator)
    destination = FileAnalysis(dest_text, opts.freeze_token, opts.signature_generator)
    resolver = DecisionResolver(template, destination, opts)
    return resolver.apply(align_statements(template, destination), MergeResult(template, destination))


class TestClassifyByKind:
    """Tests for classify_by_kind function."""

    def test_env_line_kinds(self):
        assert classify_by_kind(parse_line("A=1", 1)) == "assignment"
        assert classify_by_kind(parse_line("# c", 1)) == "comment"
        assert classify_by_kind(parse_line("", 1)) == "blank"
        assert classify_by_kind(parse_line("bad", 1)) == "invalid"

    def test_frozen_block(self):
        analysis = FileAnalysis("# dotenv-merge:freeze\n# dotenv-merge:unfreeze\n")
        assert classify_by_kind(analysis.statements[0]) == "frozen_block"

    def test_unsupported(self):
        with pytest.raises(TypeError):
            classify_by_kind(object())


class TestFirstTypeTag:
    """Tests for first_type_tag function."""

    def test_first_non_none_wins(self):
        stmt = parse_line("A=1", 1)
        classifiers = [lambda s: None, lambda s: "first", lambda s: "second"]
        assert first_type_tag(stmt, classifiers) == "first"

    def test_fallback(self):
        assert first_type_tag(parse_line("A=1", 1), [lambda s: None], fallback="x") == "x"
        assert first_type_tag(parse_line("A=1", 1), []) is None

    def test_recognized_filters_tags(self):
        stmt = parse_line("A=1", 1)
        classifiers = [lambda s: "unknown", lambda s: "assignment"]
        assert first_type_tag(stmt, classifiers, recognized={"assignment"}) == "assignment"
        assert first_type_tag(stmt, classifiers, fallback="x", recognized={"other"}) == "x"


class TestResolvePreference:
    """Tests for resolve_preference function."""

    def setup_method(self):
        self.template = parse_line("SECRET_TOKEN=t", 1)
        self.dest = parse_line("export SECRET_TOKEN=d", 1)

    def test_fixed_side(self):
        assert resolve_preference(Side.TEMPLATE, self.template, self.dest) is Side.TEMPLATE
        assert resolve_preference(Side.DESTINATION, self.template, self.dest) is Side.DESTINATION

    def test_mapping_default(self):
        preference = {"default": Side.TEMPLATE}
        assert resolve_preference(preference, self.template, self.dest) is Side.TEMPLATE

    def test_mapping_without_default_uses_destination(self):
        assert resolve_preference({"secret": Side.TEMPLATE}, self.template, self.dest) is Side.DESTINATION

    def test_template_tag_wins(self):
        def secret(stmt):
            return "secret" if "SECRET" in stmt.key else None

        preference = {"default": Side.DESTINATION, "secret": Side.TEMPLATE}
        assert resolve_preference(preference, self.template, self.dest, [secret]) is Side.TEMPLATE

    def test_template_tag_checked_before_destination_tag(self):
        def by_export(stmt):
            return "exported" if stmt.export else "plain"

        preference = {"exported": Side.DESTINATION, "plain": Side.TEMPLATE}
        assert resolve_preference(preference, self.template, self.dest, [by_export]) is Side.TEMPLATE

    def test_destination_tag_used_when_template_unrecognized(self):
        def by_export(stmt):
            return "exported" if stmt.export else "unknown"

        preference = {"default": Side.DESTINATION, "exported": Side.TEMPLATE}
        assert resolve_preference(preference, self.template, self.dest, [by_export]) is Side.TEMPLATE

    def test_later_classifier_tag_used_when_earlier_unrecognized(self):
        classifiers = (lambda s: "unknown", lambda s: "assignment")
        preference = {"assignment": Side.TEMPLATE}
        assert resolve_preference(preference, self.template, self.dest, classifiers) is Side.TEMPLATE

    def test_recognized_tag_wins_over_default(self):
        def template_only_tag(stmt):
            return None if stmt.export else "plain"

        classifiers = (template_only_tag, lambda s: "secret")
        preference = {"default": Side.DESTINATION, "secret": Side.TEMPLATE}
        assert resolve_preference(preference, self.template, self.dest, classifiers) is Side.TEMPLATE

    def test_default_tag_is_not_a_type_tag(self):
        preference = {"default": Side.DESTINATION}
        result = resolve_preference(preference, self.template, self.dest, [lambda s: "default"])
        assert result is Side.DESTINATION


class TestDecisionResolver:
    """Tests for DecisionResolver.apply."""

    def test_match_prefers_destination_by_default(self):
        result = run("API_KEY=a\n", "API_KEY=b\n")
        assert result.to_text() == "API_KEY=b\n"
        assert result.decisions[0].decision is DecisionKind.FROM_DESTINATION

    def test_match_prefers_template(self):
        result = run("API_KEY=a\n", "API_KEY=b\n", preference=Side.TEMPLATE)
        assert result.to_text() == "API_KEY=a\n"
        assert result.decisions[0].decision is DecisionKind.FROM_TEMPLATE

    def test_matched_frozen_block_beats_template_preference(self):
        frozen = "# dotenv-merge:freeze\nSECRET=x\n# dotenv-merge:unfreeze\n"
        result = run(frozen, frozen, preference="template")
        assert result.to_text() == frozen
        assert result.decisions[0].decision is DecisionKind.FROZEN_PRESERVED

    def test_frozen_block_matched_by_custom_signature(self):
        def freeze_all(stmt):
            return ("group",) if not getattr(stmt, "is_comment", False) else None

        template = "SECRET=y\n"
        destination = "# dotenv-merge:freeze\nSECRET=x\n# dotenv-merge:unfreeze\n"
        result = run(template, destination, preference="template", signature_generator=freeze_all)

        assert result.to_text() == destination
        assert [d.decision for d in result.decisions] == [DecisionKind.FROZEN_PRESERVED]

    def test_template_only_suppressed_by_default(self):
        result = run("NEW=1\n", "")
        assert result.to_text() == ""
        assert result.decisions == ()

    def test_template_only_appended(self):
        result = run("NEW=1\n", "OLD=0\n", append_template_only=True)
        assert result.to_text() == "OLD=0\nNEW=1\n"
        assert result.decisions[-1].decision is DecisionKind.APPENDED

    def test_template_comments_blanks_invalid_never_appended(self):
        result = run("# template comment\n\nnot valid\nNEW=1\n", "", append_template_only=True)
        assert result.to_text() == "NEW=1\n"

    def test_template_frozen_block_appended(self):
        template = "# dotenv-merge:freeze\nT=1\n# dotenv-merge:unfreeze\n"
        result = run(template, "", append_template_only=True)
        assert result.to_text() == template
        assert result.decisions[0].decision is DecisionKind.APPENDED

    def test_dest_only_kept_verbatim(self):
        destination = "# comment\n\nbad line\nCUSTOM=1\n"
        result = run("", destination)
        assert result.to_text() == destination
        assert all(d.decision is DecisionKind.FROM_DESTINATION for d in result.decisions)

    def test_dest_only_frozen_block(self):
        destination = "# dotenv-merge:freeze\nSECRET=x\n# dotenv-merge:unfreeze\n"
        result = run("SECRET=y\n", destination, preference="template")
        assert "SECRET=x" in result.to_text()
        assert "SECRET=y" not in result.to_text()
        assert result.decisions[0].decision is DecisionKind.FROZEN_PRESERVED

    def test_typed_preference_with_classifier(self):
        def is_url(stmt):
            return "url" if getattr(stmt, "key", "") and stmt.key.endswith("_URL") else None

        result = run(
            "DATABASE_URL=template\nPORT=80\n",
            "DATABASE_URL=dest\nPORT=8080\n",
            preference={"default": "destination", "url": "template"},
            classification=is_url,
        )
        assert result.to_text() == "DATABASE_URL=template\nPORT=8080\n"
