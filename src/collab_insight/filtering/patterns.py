"""Message and path patterns used by the pre-filter.

All message patterns are matched against the whole stripped message
(``re.fullmatch``), case-insensitively unless noted.
"""

import re
from typing import Optional

_I = re.IGNORECASE | re.DOTALL

GENERATED_FILES = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "Cargo.lock",
        "Gemfile.lock",
        "poetry.lock",
        "composer.lock",
        "go.sum",
        "Pipfile.lock",
        ".gradle",
        "gradle-wrapper.jar",
    }
)

GENERATED_PATH_PATTERNS = [
    re.compile(r"node_modules/.*"),
    re.compile(r"build/.*"),
    re.compile(r"dist/.*"),
    re.compile(r"target/.*"),
    re.compile(r"out/.*"),
    re.compile(r"\.gradle/.*"),
    re.compile(r"vendor/.*"),
    re.compile(r"__pycache__/.*"),
    re.compile(r".*\.min\.(js|css)"),
    re.compile(r".*\.generated\.[a-z]+"),
    re.compile(r".*\.g\.dart"),  # Flutter
    re.compile(r".*\.freezed\.dart"),
]

MERGE_PATTERNS = [
    re.compile(r"Merge (branch|pull request|remote-tracking).*", _I),
    re.compile(r"Merge '.*' into .*", _I),
    re.compile(r"Merged .*", _I),
]

REVERT_PATTERNS = [
    re.compile(r'Revert ".*".*', _I),
    re.compile(r"Revert .*", _I),
    re.compile(r"This reverts commit.*", _I),
]

FORMAT_PATTERNS = [
    re.compile(r"(apply|run)\s+(code\s*)?(format|formatter|formatting).*", _I),
    re.compile(r"reformat(ted)?\s+(all\s*)?(code|files)?.*", _I),
    re.compile(r"(run|apply)\s+(black|autopep8|gofmt|rustfmt|clang-format).*", _I),
    re.compile(r"(code|style)\s*cleanup.*", _I),
    re.compile(r"normalize\s+(line\s*endings|whitespace|imports).*", _I),
    re.compile(r"organize\s+imports.*", _I),
    re.compile(r"sort\s+imports.*", _I),
    re.compile(r"fix\s+(all\s*)?lint(er)?\s*(errors|warnings|issues)?\s*", _I),
]

TRIVIAL_PATTERNS = [
    # Linting and formatting
    re.compile(r"(fix|run|apply|format).*lint(ing)?.*", _I),
    re.compile(r"lint(ing)?\s*(fix(es)?)?\s*", _I),
    re.compile(r"(apply|run)\s+(prettier|eslint|checkstyle|spotless).*", _I),
    re.compile(r"format(ting)?\s*(code|files)?\s*", _I),
    re.compile(r"code\s*format(ting)?.*", _I),
    re.compile(r"(fix|apply)\s+format(ting)?.*", _I),
    re.compile(r"prettier.*", _I),
    re.compile(r"eslint.*fix.*", _I),
    re.compile(r"checkstyle.*", _I),
    re.compile(r"spotless.*", _I),
    # Whitespace and style
    re.compile(r"(fix|remove)\s*(trailing)?\s*whitespace.*", _I),
    re.compile(r"whitespace.*", _I),
    re.compile(r"(fix|update)\s+indentation.*", _I),
    re.compile(r"style:\s*.*", _I),
    # Typos
    re.compile(r"(fix|correct)\s*(a)?\s*typo(s)?.*", _I),
    re.compile(r"typo(s)?\s*(fix)?\s*", _I),
    # WIP and placeholders
    re.compile(r"wip\s*", _I),
    re.compile(r"wip:?\s+.*", _I),
    re.compile(r"(temp|tmp|test|testing)\s*", _I),
    re.compile(r"\.\.?\.?\s*"),
    re.compile(r"(oops|hmm|idk|stuff|changes|update|fix)\s*", _I),
    # Automated
    re.compile(r"auto(-)?format.*", _I),
    re.compile(r"(update|bump)\s+dependencies.*", _I),
    re.compile(r"\[bot\].*", _I),
    re.compile(r"chore\(deps\).*", _I),
    # Initial commits
    re.compile(r"initial commit\s*", _I),
    re.compile(r"first commit\s*", _I),
    re.compile(r"init\s*", _I),
]

_RENAME_WORDS = ("rename", "move")


def _any_match(patterns: list[re.Pattern], message: Optional[str]) -> bool:
    if not message or not message.strip():
        return False
    text = message.strip()
    return any(p.fullmatch(text) for p in patterns)


def is_merge_message(message: Optional[str]) -> bool:
    return _any_match(MERGE_PATTERNS, message)


def is_revert_message(message: Optional[str]) -> bool:
    return _any_match(REVERT_PATTERNS, message)


def is_format_message(message: Optional[str]) -> bool:
    return _any_match(FORMAT_PATTERNS, message)


def mentions_rename(message: Optional[str]) -> bool:
    if not message:
        return False
    lower = message.lower()
    return any(word in lower for word in _RENAME_WORDS)


def match_trivial_message(message: Optional[str]) -> Optional[str]:
    """Return the matching trivial pattern's source, or None."""
    if not message or not message.strip():
        return None
    text = message.strip()
    for pattern in TRIVIAL_PATTERNS:
        if pattern.fullmatch(text):
            return pattern.pattern
    return None


def is_generated_file(path: str) -> bool:
    """Lock files, build output and other machine-written files."""
    name = path.rsplit("/", 1)[-1]
    if name in GENERATED_FILES:
        return True
    return any(p.fullmatch(path) for p in GENERATED_PATH_PATTERNS)
