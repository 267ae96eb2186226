"""
Shell start-up file patcher — idempotent edits to ``~/.zshrc``.

Every ``ensure_*`` function is a pure ``text -> text`` transform that
is a no-op when its fact already holds, so applying the whole
sequence twice gives the same document as applying it once.

The only in-place edit is inserting plugin names right before the
closing paren of the first ``plugins=(...)`` declaration. Everything
else is appended. Untouched text is preserved byte for byte.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from termsetup.core.errors import ProvisionError
from termsetup.core.models.settings import MarkerBlock, Settings
from termsetup.core.persistence.atomic import atomic_write_text, read_text_exact

logger = logging.getLogger(__name__)

_PLUGINS_START = re.compile(r"[ \t]*plugins=\(")
_ROOT_VARIABLE = re.compile(r"^[ \t]*(?:export[ \t]+)?ZSH=", re.MULTILINE)
_LINE = re.compile(r"[^\n]*\n|[^\n]+$")

# Lines scanned after ``plugins=(`` before giving up on finding ``)``.
MAX_SPAN_LINES = 200


class PatchError(ProvisionError):
    """The document cannot be patched safely (e.g. unterminated ``plugins=(``)."""


# ── Plugins declaration scanner ─────────────────────────────────


@dataclass
class PluginsSpan:
    """Location and contents of the first ``plugins=(...)`` declaration.

    Line indices are 0-based. Offsets are absolute character positions
    of the ``(`` and ``)`` in the document.
    """

    start_line: int
    end_line: int
    open_offset: int
    close_offset: int
    tokens: list[str] = field(default_factory=list)

    def __contains__(self, name: str) -> bool:
        return name in self.names

    @property
    def names(self) -> list[str]:
        """Tokens with surrounding quotes removed."""
        return [t.strip("'\"") for t in self.tokens]


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping terminators (``\\r`` stays in the line)."""
    return _LINE.findall(text)


def find_plugins_span(text: str, max_lines: int = MAX_SPAN_LINES) -> PluginsSpan | None:
    """Locate the first ``plugins=(`` line and its matching ``)``.

    The array may span several lines. ``#`` starts a comment that runs
    to the end of the line, so a ``)`` inside a comment is ignored.

    Raises:
        PatchError: If no ``)`` is found within ``max_lines`` lines.
    """
    lines = split_lines(text)
    offset = 0
    for idx, line in enumerate(lines):
        m = _PLUGINS_START.match(line)
        if m:
            return _scan_span(lines, idx, offset, m.end(), max_lines)
        offset += len(line)
    return None


def _scan_span(
    lines: list[str], start: int, start_offset: int, pos: int, max_lines: int
) -> PluginsSpan:
    tokens: list[str] = []
    current = ""
    line_offset = start_offset
    last = min(len(lines), start + max_lines + 1)

    for idx in range(start, last):
        line = lines[idx]
        i = pos if idx == start else 0
        while i < len(line):
            ch = line[i]
            if ch == ")":
                if current:
                    tokens.append(current)
                return PluginsSpan(
                    start_line=start,
                    end_line=idx,
                    open_offset=start_offset + pos - 1,
                    close_offset=line_offset + i,
                    tokens=tokens,
                )
            if ch.isspace():
                if current:
                    tokens.append(current)
                    current = ""
            elif ch == "#" and not current:
                break
            else:
                current += ch
            i += 1
        if current:
            tokens.append(current)
            current = ""
        line_offset += len(line)

    raise PatchError(
        f"Unterminated plugins=( declaration at line {start + 1}: "
        f"no closing ')' within {max_lines} lines"
    )


# ── Ensure operations ───────────────────────────────────────────


def _append(text: str, snippet: str) -> str:
    """Append ``snippet``, terminating the current last line first."""
    if not text:
        return snippet.lstrip("\n")
    if not text.endswith("\n"):
        text += "\n"
    return text + snippet


def has_root_variable(text: str) -> bool:
    return _ROOT_VARIABLE.search(text) is not None


def ensure_root_variable(text: str, value: str = '"$HOME/.oh-my-zsh"') -> str:
    """Append ``export ZSH=<value>`` unless ``ZSH=`` or ``export ZSH=`` exists."""
    if has_root_variable(text):
        return text
    return _append(text, f"\nexport ZSH={value}\n")


def missing_plugins(text: str, required: list[str]) -> list[str]:
    """Required names not present as whole tokens in the declaration.

    All of ``required`` is missing when there is no declaration.
    """
    span = find_plugins_span(text)
    wanted = list(dict.fromkeys(required))
    if span is None:
        return wanted
    return [name for name in wanted if name not in span]


def ensure_plugins_declaration(text: str, required: list[str], baseline: str = "git") -> str:
    """Make the plugins array contain ``required``.

    With no declaration, a new one is appended holding ``baseline``
    followed by ``required``. Otherwise each missing name is inserted
    right before the closing paren of the first declaration.
    """
    span = find_plugins_span(text)
    if span is None:
        names = list(dict.fromkeys([baseline, *required]))
        return _append(text, f"\nplugins=({' '.join(names)})\n")

    missing = [name for name in dict.fromkeys(required) if name not in span]
    if not missing:
        return text

    close = span.close_offset
    insertion = " ".join(missing)
    if text[close - 1] != "(":
        insertion = " " + insertion
    return text[:close] + insertion + text[close:]


def ensure_marker_block(text: str, block: MarkerBlock) -> str:
    """Append ``block`` unless its marker already occurs anywhere."""
    if block.marker in text:
        return text
    return _append(text, "\n" + block.body)


# ── Whole-document patch ────────────────────────────────────────


@dataclass
class PatchResult:
    """Outcome of patching one document."""

    original: str
    text: str
    path: Path | None = None
    created: bool = False
    changes: list[str] = field(default_factory=list)
    added_plugins: list[str] = field(default_factory=list)
    skipped_blocks: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.text != self.original

    def to_dict(self) -> dict:
        return {
            "path": str(self.path) if self.path else None,
            "created": self.created,
            "changed": self.changed,
            "changes": self.changes,
            "added_plugins": self.added_plugins,
            "skipped_blocks": self.skipped_blocks,
        }


def patch_document(text: str, settings: Settings, include_prompt: bool = True) -> PatchResult:
    """Apply root-variable, plugins and marker-block edits in order.

    Args:
        text: Current document.
        settings: Run settings (plugin names, baseline, marker blocks).
        include_prompt: When False, blocks that need a command
            (the Starship init) are skipped.

    Raises:
        PatchError: If the plugins declaration is malformed.
    """
    result = PatchResult(original=text, text=text)

    new = ensure_root_variable(text, settings.root_variable_value)
    if new != text:
        result.changes.append("root-variable")
    text = new

    required = settings.required_plugin_names
    had_declaration = find_plugins_span(text) is not None
    result.added_plugins = missing_plugins(text, required)
    new = ensure_plugins_declaration(text, required, settings.baseline_plugin)
    if new != text:
        result.changes.append("plugins" if had_declaration else "plugins-declaration")
    text = new

    for block in settings.marker_blocks:
        if block.needs_command and not include_prompt:
            result.skipped_blocks.append(block.name)
            continue
        new = ensure_marker_block(text, block)
        if new != text:
            result.changes.append(block.name)
        text = new

    result.text = text
    return result


def patch_file(
    path: Path,
    settings: Settings,
    include_prompt: bool = True,
    dry_run: bool = False,
) -> PatchResult:
    """Patch the start-up file at ``path`` in place.

    A missing file is created empty first. The file is rewritten
    (atomically) only when the patched text differs. With ``dry_run``
    nothing on disk is touched.
    """
    created = False
    try:
        if path.exists():
            original = read_text_exact(path)
        else:
            original = ""
            if not dry_run:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch()
                created = True
                logger.info("Created empty %s", path)
    except (OSError, UnicodeDecodeError) as e:
        raise PatchError(f"Cannot read {path}: {e}") from e

    result = patch_document(original, settings, include_prompt=include_prompt)
    result.path = path
    result.created = created

    if result.changed and not dry_run:
        try:
            atomic_write_text(path, result.text)
        except OSError as e:
            raise PatchError(f"Cannot write {path}: {e}") from e
        logger.info("Updated %s: %s", path, ", ".join(result.changes))
    else:
        logger.debug("No changes for %s", path)
    return result


def inspect_document(text: str, settings: Settings) -> dict:
    """Read-only summary of which facts already hold in ``text``."""
    info: dict = {
        "root_variable": has_root_variable(text),
        "plugins": None,
        "missing_plugins": [],
        "markers": {b.name: b.marker in text for b in settings.marker_blocks},
        "error": None,
    }
    try:
        span = find_plugins_span(text)
    except PatchError as e:
        info["error"] = str(e)
        return info
    if span is not None:
        info["plugins"] = span.names
        info["line"] = span.start_line + 1
    info["missing_plugins"] = (
        [n for n in settings.required_plugin_names if n not in span]
        if span is not None
        else settings.required_plugin_names
    )
    return info
