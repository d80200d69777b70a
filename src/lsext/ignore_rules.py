"""
Ignore-file support for lsext
Parses .gitignore/.ignore style files and answers whether a path is excluded
"""

import os
import re
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".ignore"
GITIGNORE_FILENAME = ".gitignore"
GIT_DIRNAME = ".git"


@dataclass
class IgnoreRule:
    """A single line of an ignore file"""
    pattern: str
    negation: bool
    directory_only: bool
    anchored: bool  # Matched against the path relative to source_dir
    source_dir: str  # Directory the rule is relative to
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.regex = re.compile(translate_glob(self.pattern))

    def matches(self, path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False

        relative = _relative_to(path, self.source_dir)
        if relative is None:
            return False

        if self.anchored:
            return self.regex.match(relative) is not None
        return self.regex.match(relative.rsplit("/", 1)[-1]) is not None


def _relative_to(path: str, directory: str) -> Optional[str]:
    """Return path relative to directory with '/' separators, or None if outside it"""
    prefix = directory if directory.endswith(os.sep) else directory + os.sep
    if not path.startswith(prefix):
        return None
    relative = path[len(prefix):]
    if os.sep != "/":
        relative = relative.replace(os.sep, "/")
    return relative


def translate_glob(pattern: str) -> str:
    """Translate a gitignore glob into a regular expression.

    ``*`` and ``?`` never cross a ``/``; ``**`` spans directories when it
    forms a whole path component (``**/x``, ``x/**``, ``x/**/y``).
    """
    i, n = 0, len(pattern)
    parts = []
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                end = i + 2
                at_component_start = i == 0 or pattern[i - 1] == "/"
                if at_component_start and end < n and pattern[end] == "/":
                    parts.append("(?:.*/)?")
                    i = end + 1
                    continue
                if at_component_start and end == n:
                    parts.append(".*")
                    i = end
                    continue
                i = end
            else:
                i += 1
            parts.append("[^/]*")
            continue
        if c == "?":
            parts.append("[^/]")
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                parts.append("\\[")
            else:
                body = pattern[i + 1:j]
                if body[0] in "!^":
                    body = "^" + body[1:]
                body = re.sub(r"([&~|\[])", r"\\\1", body)
                parts.append(f"[{body}]")
                i = j
        elif c == "\\" and i + 1 < n:
            i += 1
            parts.append(re.escape(pattern[i]))
        else:
            parts.append(re.escape(c))
        i += 1
    return "(?s:" + "".join(parts) + r")\Z"


def parse_ignore_lines(lines: Iterable[str], source_dir: str) -> List[IgnoreRule]:
    """Parse ignore-file lines into rules relative to source_dir"""
    rules = []
    for line in lines:
        line = line.rstrip("\n\r")

        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue

        # Trailing spaces are dropped unless escaped
        stripped = line.rstrip(" ")
        if stripped.endswith("\\") and len(stripped) < len(line):
            stripped += " "
        line = stripped
        if not line:
            continue

        negation = line.startswith("!")
        if negation:
            line = line[1:]
        elif line.startswith("\\!") or line.startswith("\\#"):
            line = line[1:]

        directory_only = line.endswith("/")
        if directory_only:
            line = line.rstrip("/")

        anchored = line.startswith("/")
        if anchored:
            line = line.lstrip("/")

        # A slash anywhere else also anchors the pattern
        if "/" in line:
            anchored = True

        if not line:
            continue

        rules.append(IgnoreRule(
            pattern=line,
            negation=negation,
            directory_only=directory_only,
            anchored=anchored,
            source_dir=source_dir,
        ))

    return rules


def parse_ignore_file(path: str, source_dir: str) -> List[IgnoreRule]:
    """Parse an ignore file; an unreadable file contributes no rules"""
    try:
        with open(path, "r", encoding="utf-8", errors="surrogateescape") as f:
            rules = parse_ignore_lines(f, source_dir)
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.debug(f"Skipping unreadable ignore file {path}: {e}")
        return []

    logger.debug(f"Loaded {len(rules)} rules from {path}")
    return rules


def global_git_excludes_path() -> Path:
    """Location of git's default global excludes file"""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "git" / "ignore"
    return Path.home() / ".config" / "git" / "ignore"


@dataclass(frozen=True)
class IgnoreStack:
    """Ignore rules in effect for one directory during a walk.

    Each category is ordered from lowest to highest precedence, so the last
    matching rule decides. Categories are checked from global excludes up to
    .ignore files, matching the usual precedence of those files.
    """
    global_rules: Tuple[IgnoreRule, ...] = ()
    exclude_rules: Tuple[IgnoreRule, ...] = ()
    gitignore_rules: Tuple[IgnoreRule, ...] = ()
    ignore_rules: Tuple[IgnoreRule, ...] = ()
    in_git: bool = False

    @classmethod
    def for_root(cls, root: str) -> "IgnoreStack":
        """Build the stack for a walk root, applying ignore files of its ancestors"""
        stack = cls()
        ancestors = [str(parent) for parent in Path(root).parents]
        for directory in reversed(ancestors):
            stack = stack.descend(directory)
        return stack

    def descend(self, directory: str) -> "IgnoreStack":
        """Return the stack for ``directory``, adding the ignore files it holds"""
        changes = {}

        if os.path.exists(os.path.join(directory, GIT_DIRNAME)):
            if not self.in_git:
                changes["in_git"] = True
                changes["global_rules"] = tuple(
                    parse_ignore_file(str(global_git_excludes_path()), directory))
            changes["exclude_rules"] = self.exclude_rules + tuple(parse_ignore_file(
                os.path.join(directory, GIT_DIRNAME, "info", "exclude"), directory))

        if self.in_git or changes.get("in_git"):
            gitignore = parse_ignore_file(os.path.join(directory, GITIGNORE_FILENAME), directory)
            if gitignore:
                changes["gitignore_rules"] = self.gitignore_rules + tuple(gitignore)

        ignore = parse_ignore_file(os.path.join(directory, IGNORE_FILENAME), directory)
        if ignore:
            changes["ignore_rules"] = self.ignore_rules + tuple(ignore)

        return replace(self, **changes) if changes else self

    def is_ignored(self, path: str, is_dir: bool) -> bool:
        """Check whether an absolute path is excluded by the rules in effect"""
        ignored = None
        for rules in (self.global_rules, self.exclude_rules,
                      self.gitignore_rules, self.ignore_rules):
            for rule in rules:
                if rule.matches(path, is_dir):
                    ignored = not rule.negation
        return bool(ignored)
