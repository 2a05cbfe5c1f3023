"""Turn raw parser diagnostics into position-verified diagnostic records.

Raw diagnostics carry character offsets and/or node references into one
``SyntaxTree``. The extractor converts them to line/column positions,
repositions "unexpected code" messages onto the quoted code, collects the
surrounding source lines, and merges multi-step fix-its into single edits.
Bad input never raises: unusable positions are clipped and flagged.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from saae.config import get_settings
from saae.core.location import LocationConverter
from saae.core.tree import SyntaxTree
from saae.models import (
    ContextLine,
    DeleteChange,
    DiagnosticRecord,
    FixItChange,
    FixItSuggestion,
    GenericChange,
    InsertChange,
    Note,
    ReplaceChange,
    Severity,
    SourceLocation,
    SourceSpan,
    SyntaxNode,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawFixItChange:
    """A primitive text edit: replace ``[start, end)`` with ``new_text``."""

    start: int
    end: int
    new_text: str = ""


@dataclass(frozen=True)
class RawFixIt:
    changes: tuple[RawFixItChange, ...]
    message: str | None = None


@dataclass(frozen=True)
class RawNote:
    message: str
    offset: int | None = None
    node: SyntaxNode | None = None


@dataclass(frozen=True)
class RawDiagnostic:
    """A diagnostic as reported by a parser, positioned by offset or node."""

    message: str
    severity: Severity = Severity.ERROR
    offset: int | None = None
    node: SyntaxNode | None = None
    end_offset: int | None = None
    fix_its: tuple[RawFixIt, ...] = ()
    notes: tuple[RawNote, ...] = ()


# -- "unexpected code" repositioning ---------------------------------------

_UNEXPECTED_CODE = re.compile(r"^unexpected code '(?P<code>[^']+)'")


def unexpected_code_text(message: str) -> str | None:
    """The quoted code of an ``unexpected code '...'`` message, else None."""
    match = _UNEXPECTED_CODE.match(message)
    return match.group("code") if match else None


def locate_unexpected_code(
    text: str, converter: LocationConverter, offset: int, code: str, max_lines: int
) -> int | None:
    """Offset of the first occurrence of ``code`` at or after ``offset``.

    The search is bounded to ``max_lines`` lines after the reported line; if
    nothing is found it retries from the start of the reported line.
    """
    reported_line = converter.location(offset).line
    last_line = min(reported_line + max_lines, converter.line_count)
    limit = converter.line_start(last_line) + len(converter.line_text(last_line))

    for start in (offset, converter.line_start(reported_line)):
        found = text.find(code, start)
        if found != -1 and found <= limit:
            return found
    return None


# -- fix-it consolidation -------------------------------------------------

EditKind = Literal["insert", "delete", "replace"]


@dataclass
class _Edit:
    kind: EditKind
    start: int
    end: int
    new_text: str


def escape_for_display(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("\r\n", "\\r\\n")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\v", "\\v")
        .replace("\f", "\\f")
        .replace("`", "\\`")
    )


def _edit_kind(change: RawFixItChange) -> EditKind | None:
    if change.start == change.end:
        return "insert" if change.new_text else None
    return "replace" if change.new_text else "delete"


def consolidate_changes(changes: Sequence[RawFixItChange]) -> list[_Edit]:
    """Merge adjacent primitive edits of the same kind at contiguous positions.

    Insertions merge when the next one starts where the previous one was
    made; deletions and replacements merge when the next span starts where
    the previous span ended. No-op changes are dropped.
    """
    edits: list[_Edit] = []
    for change in changes:
        kind = _edit_kind(change)
        if kind is None:
            continue
        previous = edits[-1] if edits else None
        if previous is not None and previous.kind == kind and previous.end == change.start:
            previous.end = change.end
            previous.new_text += change.new_text
            continue
        edits.append(_Edit(kind=kind, start=change.start, end=change.end, new_text=change.new_text))
    return edits


def _fix_it_message(parts: Sequence[str]) -> str:
    if not parts:
        return "fix syntax error"
    return " and ".join(parts)


# -- extractor ------------------------------------------------------------


class DiagnosticExtractor:
    """Build :class:`DiagnosticRecord` lists for one syntax tree."""

    def __init__(self, tree: SyntaxTree, context_radius: int | None = None, search_lines: int | None = None) -> None:
        settings = get_settings()
        self.tree = tree
        self.text = tree.text
        self.converter = tree.location_converter
        self.context_radius = settings.context_radius if context_radius is None else context_radius
        self.search_lines = settings.unexpected_code_search_lines if search_lines is None else search_lines

    def extract(self, raw_diagnostics: Iterable[RawDiagnostic]) -> list[DiagnosticRecord]:
        records = [self.record(raw) for raw in raw_diagnostics]
        records.sort(key=lambda record: record.location.offset)
        return records

    def record(self, raw: RawDiagnostic) -> DiagnosticRecord:
        offset, approximate = self._raw_offset(raw)
        end_offset = self._raw_end_offset(raw)

        code = unexpected_code_text(raw.message)
        if code is not None:
            corrected = locate_unexpected_code(self.text, self.converter, offset, code, self.search_lines)
            if corrected is not None:
                if corrected != offset:
                    logger.debug("Repositioned %r from offset %d to %d", raw.message, offset, corrected)
                offset = corrected
                end_offset = corrected + len(code)
                approximate = False

        location = self.converter.location(offset)
        if end_offset is not None and end_offset >= offset:
            end = self.converter.location(end_offset)
            span = SourceSpan(
                start_line=location.line, start_column=location.column, end_line=end.line, end_column=end.column
            )
        else:
            span = SourceSpan(start_line=location.line, start_column=location.column)

        offending_text: str | None = None
        node_location: SourceLocation | None = None
        if raw.node is not None and self.tree.contains(raw.node):
            offending_text = raw.node.render()
            node_location = self.converter.location(self.tree.span_of(raw.node).content_start)

        context_lines, context_range = self._context(location.line)
        fix_its = tuple(fix for fix in (self._fix_it(raw_fix) for raw_fix in raw.fix_its) if fix is not None)

        return DiagnosticRecord(
            message=raw.message,
            severity=raw.severity,
            location=location,
            span=span,
            offending_text=offending_text,
            node_location=node_location,
            source_line_text=self.converter.line_text(location.line),
            caret_line=" " * (location.column - 1) + "^",
            context_lines=context_lines,
            context_range=context_range,
            fix_its=fix_its,
            notes=tuple(self._note(raw_note) for raw_note in raw.notes),
            is_approximate=approximate,
        )

    def _raw_offset(self, raw: RawDiagnostic) -> tuple[int, bool]:
        if raw.offset is not None:
            if self.converter.in_bounds(raw.offset):
                return raw.offset, False
            clipped = self.converter.clamp(raw.offset)
            logger.warning(
                "Diagnostic %r at offset %d is outside %s (length %d); clipped to %d",
                raw.message,
                raw.offset,
                self.tree.identity,
                len(self.text),
                clipped,
            )
            return clipped, True
        if raw.node is not None and self.tree.contains(raw.node):
            return self.tree.span_of(raw.node).content_start, False
        logger.warning("Diagnostic %r has no usable position; reporting it at the start of the file", raw.message)
        return 0, True

    def _raw_end_offset(self, raw: RawDiagnostic) -> int | None:
        if raw.end_offset is not None:
            return self.converter.clamp(raw.end_offset)
        if raw.node is not None and self.tree.contains(raw.node):
            return self.tree.span_of(raw.node).content_end
        return None

    def _context(self, line: int) -> tuple[tuple[ContextLine, ...], str]:
        first = max(1, line - self.context_radius)
        last = min(self.converter.line_count, line + self.context_radius)
        lines = tuple(
            ContextLine(line_number=number, text=self.converter.line_text(number)) for number in range(first, last + 1)
        )
        if not lines:
            return lines, "0-0"
        if len(lines) == 1:
            return lines, str(first)
        return lines, f"{first}-{last}"

    def _span(self, start: int, end: int) -> SourceSpan:
        begin = self.converter.location(start)
        finish = self.converter.location(end)
        return SourceSpan(
            start_line=begin.line, start_column=begin.column, end_line=finish.line, end_column=finish.column
        )

    def _fix_it(self, raw_fix: RawFixIt) -> FixItSuggestion | None:
        positioned = [
            change
            for change in raw_fix.changes
            if self.converter.in_bounds(change.start) and self.converter.in_bounds(change.end) and change.start <= change.end
        ]
        unpositioned = [change for change in raw_fix.changes if change not in positioned]

        changes: list[FixItChange] = []
        parts: list[str] = []
        for edit in consolidate_changes(positioned):
            original = self.text[edit.start : edit.end]
            match edit.kind:
                case "insert":
                    changes.append(InsertChange(position=self.converter.location(edit.start), new_text=edit.new_text))
                    parts.append(f"insert `{escape_for_display(edit.new_text)}`")
                case "delete":
                    changes.append(DeleteChange(span=self._span(edit.start, edit.end), original_text=original))
                    parts.append(f"remove `{escape_for_display(original)}`")
                case "replace":
                    changes.append(
                        ReplaceChange(
                            span=self._span(edit.start, edit.end), original_text=original, new_text=edit.new_text
                        )
                    )
                    parts.append(f"replace `{escape_for_display(original)}` with `{escape_for_display(edit.new_text)}`")

        for change in unpositioned:
            description = raw_fix.message or "unpositioned edit"
            changes.append(
                GenericChange(
                    description=description,
                    details=f"offsets {change.start}-{change.end} are outside the document; "
                    f"new text `{escape_for_display(change.new_text)}`",
                )
            )
            parts.append(description)

        if not changes:
            return None
        return FixItSuggestion(message=_fix_it_message(parts), changes=tuple(changes))

    def _note(self, raw_note: RawNote) -> Note:
        offset: int | None = None
        if raw_note.offset is not None and self.converter.in_bounds(raw_note.offset):
            offset = raw_note.offset
        elif raw_note.node is not None and self.tree.contains(raw_note.node):
            offset = self.tree.span_of(raw_note.node).content_start
        if offset is None:
            return Note(message=raw_note.message)
        location = self.converter.location(offset)
        return Note(
            message=raw_note.message,
            location=location,
            source_line_text=self.converter.line_text(location.line),
        )


def extract_diagnostics(tree: SyntaxTree, raw_diagnostics: Iterable[RawDiagnostic]) -> list[DiagnosticRecord]:
    return DiagnosticExtractor(tree).extract(raw_diagnostics)
