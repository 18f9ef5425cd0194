"""Core merge logic."""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from tqdm import tqdm

from .alignment import align_statements
from .analysis import FileAnalysis
from .config import MergeOptions
from .errors import ConfigurationError, DestinationParseError, ParseError, TemplateParseError
from .logger import get_logger, timed
from .resolver import DecisionResolver
from .result import MergeResult
from .scanner import DEFAULT_PATTERN, compute_file_hash, compute_text_hash, scan_folder

logger = get_logger(__name__)

Source = Union[str, bytes]


class SmartMerger:
    """
    Merges a template dotenv source into a destination.

    Destination layout and values are kept by default; frozen destination
    blocks are always kept verbatim.

    Example:
        merger = SmartMerger(template_text, dest_text, preference="template")
        merged_text = merger.merge()
    """

    def __init__(
        self,
        template_content: Source,
        dest_content: Source,
        options: Optional[MergeOptions] = None,
        **option_kwargs
    ):
        if options is None:
            options = MergeOptions(**option_kwargs)
        elif option_kwargs:
            raise ConfigurationError("Pass either a MergeOptions instance or keyword options, not both")
        self.options = options

        try:
            self.template_analysis = FileAnalysis(
                template_content,
                freeze_token=options.freeze_token,
                signature_generator=options.signature_generator
            )
        except ParseError as e:
            raise TemplateParseError(f"Template: {e}", content=e.content, errors=e.errors) from e

        try:
            self.dest_analysis = FileAnalysis(
                dest_content,
                freeze_token=options.freeze_token,
                signature_generator=options.signature_generator
            )
        except ParseError as e:
            raise DestinationParseError(f"Destination: {e}", content=e.content, errors=e.errors) from e

        self._merge_result: Optional[MergeResult] = None

    def merge_result(self) -> MergeResult:
        """Run the merge once and return the full result."""
        if self._merge_result is None:
            with timed(logger, "SmartMerger.merge"):
                alignment = align_statements(self.template_analysis, self.dest_analysis)
                resolver = DecisionResolver(self.template_analysis, self.dest_analysis, self.options)
                self._merge_result = resolver.apply(
                    alignment,
                    MergeResult(self.template_analysis, self.dest_analysis)
                )
        return self._merge_result

    def merge(self) -> str:
        """Run the merge and return the merged text."""
        return self.merge_result().to_text()


def merge(template_content: Source, dest_content: Source, **options) -> str:
    """Merge two dotenv sources and return the merged text."""
    return SmartMerger(template_content, dest_content, **options).merge()


@dataclass
class FileMergeOutcome:
    """Result of merging one template file into one destination file."""
    template_path: Path
    dest_path: Path
    output_path: Path
    changed: bool
    written: bool
    result: MergeResult


@dataclass
class MergeError:
    """Record of a file that could not be merged or copied."""
    relative_path: str
    error: str


@dataclass
class TreeMergeReport:
    """Per-category outcome of a tree merge, keyed by relative path."""
    merged: list[str] = field(default_factory=list)
    identical: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    seeded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)
    errors: list[MergeError] = field(default_factory=list)
    outcomes: dict[str, FileMergeOutcome] = field(default_factory=dict)


def write_text_file(path: Path, text: str) -> None:
    """Write UTF-8 text with LF newlines, creating parent directories if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))


def copy_file(src: Path, dst: Path) -> None:
    """Copy a file, creating parent directories if needed."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


def files_differ(src: Path, dst: Path) -> bool:
    return not dst.exists() or compute_file_hash(src) != compute_file_hash(dst)


def merge_files(
    template_path: Path,
    dest_path: Path,
    output_path: Optional[Path] = None,
    options: Optional[MergeOptions] = None,
    check: bool = False
) -> FileMergeOutcome:
    """
    Merge a template file into a destination file.

    A missing destination is treated as empty. The output defaults to the
    destination (in-place update) and is only rewritten when its content
    changes. With ``check`` nothing is written.
    """
    template_path = Path(template_path)
    dest_path = Path(dest_path)
    output_path = Path(output_path) if output_path else dest_path

    template_content = template_path.read_bytes()
    dest_content = dest_path.read_bytes() if dest_path.exists() else b""

    result = SmartMerger(template_content, dest_content, options or MergeOptions()).merge_result()
    text = result.to_text()

    changed = not output_path.exists() or compute_file_hash(output_path) != compute_text_hash(text)
    written = changed and not check
    if written:
        write_text_file(output_path, text)

    logger.debug("Merged %s into %s: changed=%s written=%s", template_path, output_path, changed, written)

    return FileMergeOutcome(
        template_path=template_path,
        dest_path=dest_path,
        output_path=output_path,
        changed=changed,
        written=written,
        result=result
    )


def merge_trees(
    template_dir: Path,
    dest_dir: Path,
    output_dir: Optional[Path] = None,
    options: Optional[MergeOptions] = None,
    pattern: str = DEFAULT_PATTERN,
    check: bool = False
) -> TreeMergeReport:
    """
    Merge every dotenv file of a template tree into a destination tree.

    Files are paired by relative path:

    - in both trees: merged; pairs with identical bytes are copied as is,
      keeping their original line endings
    - only in the destination: kept, copied when writing to another tree
    - only in the template: seeded against an empty destination when
      ``append_template_only`` is set, skipped otherwise

    Failures are recorded per file and do not stop the run.
    """
    template_dir = Path(template_dir)
    dest_dir = Path(dest_dir)
    output_dir = Path(output_dir) if output_dir else dest_dir
    options = options or MergeOptions()
    in_place = output_dir.resolve() == dest_dir.resolve()

    report = TreeMergeReport()

    template_files, template_errors = scan_folder(template_dir, "Scanning template", pattern)
    dest_files, dest_errors = scan_folder(dest_dir, "Scanning destination", pattern)
    for scan_error in template_errors + dest_errors:
        report.errors.append(MergeError(scan_error.relative_path, scan_error.error))

    in_both = sorted(set(template_files) & set(dest_files))
    only_in_dest = sorted(set(dest_files) - set(template_files))
    only_in_template = sorted(set(template_files) - set(dest_files))

    total = len(in_both) + len(only_in_template) + (0 if in_place else len(only_in_dest))

    with tqdm(total=total, desc="Merging", unit="file", disable=not total) as pbar:
        for path in in_both:
            try:
                if template_files[path].hash == dest_files[path].hash:
                    if not in_place and files_differ(dest_dir / path, output_dir / path):
                        if not check:
                            copy_file(dest_dir / path, output_dir / path)
                        report.changed.append(path)
                    report.identical.append(path)
                else:
                    outcome = merge_files(
                        template_dir / path, dest_dir / path, output_dir / path, options, check
                    )
                    report.merged.append(path)
                    report.outcomes[path] = outcome
                    if outcome.changed:
                        report.changed.append(path)
            except (OSError, ParseError) as e:
                report.errors.append(MergeError(path, str(e)))
            pbar.update(1)

        if not in_place:
            for path in only_in_dest:
                try:
                    if files_differ(dest_dir / path, output_dir / path):
                        if not check:
                            copy_file(dest_dir / path, output_dir / path)
                        report.changed.append(path)
                    report.copied.append(path)
                except OSError as e:
                    report.errors.append(MergeError(path, str(e)))
                pbar.update(1)

        for path in only_in_template:
            if not options.append_template_only:
                report.skipped.append(path)
                pbar.update(1)
                continue
            try:
                outcome = merge_files(
                    template_dir / path, dest_dir / path, output_dir / path, options, check
                )
                report.seeded.append(path)
                report.outcomes[path] = outcome
                if outcome.changed:
                    report.changed.append(path)
            except (OSError, ParseError) as e:
                report.errors.append(MergeError(path, str(e)))
            pbar.update(1)

    logger.debug(
        "Tree merge complete: merged=%d identical=%d copied=%d seeded=%d skipped=%d errors=%d",
        len(report.merged), len(report.identical), len(report.copied),
        len(report.seeded), len(report.skipped), len(report.errors),
    )
    return report
