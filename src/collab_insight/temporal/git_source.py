"""Read per-commit, per-file diffs from a local repository via git subprocess."""

from __future__ import annotations

import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from ..exceptions import DiffSourceError
from ..logging_config import get_logger
from ..models import FileDelta, RawCommit

logger = get_logger(__name__)

# "src/{old => new}/a.py" or "old.py => new.py"
_BRACE_RENAME_RE = re.compile(r"^(?P<pre>.*)\{(?P<old>[^{}]*) => (?P<new>[^{}]*)\}(?P<post>.*)$")
_DIFF_HEADER_RE = re.compile(r"^diff --git a/(?P<old>.+) b/(?P<new>.+)$")
_FIELD_SEP = "\x00"


def rename_target(path: str) -> tuple[str, bool]:
    """Resolve a numstat path to its new name; second item is True for renames."""
    match = _BRACE_RENAME_RE.match(path)
    if match:
        joined = f"{match['pre']}{match['new']}{match['post']}"
        return joined.replace("//", "/").lstrip("/"), True
    if " => " in path:
        return path.split(" => ", 1)[1], True
    return path, False


def parse_numstat(text: str) -> list[tuple[str, int, int, bool]]:
    """Parse ``git show --numstat`` output into (path, added, deleted, is_rename).

    Binary files ("-\\t-\\tpath") count as zero lines.
    """
    rows = []
    for line in text.splitlines():
        parts = line.split("\t", 2)
        if len(parts) != 3:
            continue
        added_s, deleted_s, raw_path = parts
        added = int(added_s) if added_s.isdigit() else 0
        deleted = int(deleted_s) if deleted_s.isdigit() else 0
        path, is_rename = rename_target(raw_path)
        rows.append((path, added, deleted, is_rename))
    return rows


def split_patch(text: str) -> dict[str, str]:
    """Split a multi-file patch into per-file sections keyed by new path."""
    sections: dict[str, list[str]] = {}
    current: Optional[list[str]] = None
    for line in text.splitlines():
        match = _DIFF_HEADER_RE.match(line)
        if match:
            current = sections.setdefault(match["new"], [])
        if current is not None:
            current.append(line)
    return {path: "\n".join(lines) for path, lines in sections.items()}


def parse_header(text: str) -> tuple[str, str, datetime, tuple[str, ...], str]:
    """Parse the NUL-separated "sha, email, ISO date, parents, subject" header."""
    sha, email, date_s, parents, subject = text.rstrip("\n").split(_FIELD_SEP, 4)
    return sha, email, datetime.fromisoformat(date_s), tuple(parents.split()), subject


def build_deltas(
    numstat: str, patch: str, whitespace_numstat: str
) -> list[FileDelta]:
    """Combine the three git views of one commit into FileDeltas.

    Lines that disappear when whitespace is ignored are counted as
    whitespace-only; a file absent from the whitespace-insensitive view is
    whitespace-only in full.
    """
    ignoring_ws = {path: a + d for path, a, d, _ in parse_numstat(whitespace_numstat)}
    patches = split_patch(patch)
    deltas = []
    for path, added, deleted, is_rename in parse_numstat(numstat):
        total = added + deleted
        # -w drops files whose changes are all whitespace
        semantic = ignoring_ws.get(path, 0)
        deltas.append(
            FileDelta(
                path=path,
                diff_text=patches.get(path, ""),
                lines_added=added,
                lines_deleted=deleted,
                is_rename=is_rename,
                whitespace_only_lines=max(0, total - semantic),
            )
        )
    return deltas


class GitDiffSource:
    """Resolve commit hashes and read their first-parent diffs."""

    def __init__(self, repo_path: str, timeout: int = 30):
        self.repo_path = str(Path(repo_path).resolve())
        self.timeout = timeout

    def _git(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["git", "-C", self.repo_path, *args],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            raise DiffSourceError(self.repo_path, str(e))

    def is_git_repo(self) -> bool:
        try:
            return self._git("rev-parse", "--git-dir").returncode == 0
        except DiffSourceError:
            return False

    def list_commits(self, rev: str = "HEAD", max_commits: int = 5000) -> list[str]:
        """Hashes reachable from rev, oldest first."""
        result = self._git("log", "--reverse", "--format=%H", f"-n{max_commits}", rev)
        if result.returncode != 0:
            raise DiffSourceError(self.repo_path, result.stderr.strip())
        return [line for line in result.stdout.splitlines() if line]

    def resolve(self, sha: str) -> Optional[str]:
        result = self._git("rev-parse", "--verify", "--quiet", f"{sha}^{{commit}}")
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def _show(self, sha: str, *args: str) -> str:
        result = self._git("show", "--diff-merges=first-parent", *args, sha)
        if result.returncode != 0:
            raise DiffSourceError(self.repo_path, result.stderr.strip(), commit=sha)
        return result.stdout

    def read_commit(self, sha: str) -> Optional[RawCommit]:
        """Read one commit, or None (with a warning) if it cannot be resolved."""
        resolved = self.resolve(sha)
        if resolved is None:
            logger.warning(f"Unable to resolve commit {sha}, skipping")
            return None

        header = self._show(resolved, "-s", "--format=%H%x00%ae%x00%aI%x00%P%x00%s")
        full_sha, email, timestamp, parents, subject = parse_header(header)
        numstat = self._show(resolved, "--format=", "--numstat", "-M")
        patch = self._show(resolved, "--format=", "--patch", "-M")
        ws_numstat = self._show(resolved, "--format=", "--numstat", "-M", "-w")

        return RawCommit.build(
            sha=full_sha,
            author_email=email,
            message=subject,
            timestamp=timestamp,
            file_deltas=build_deltas(numstat, patch, ws_numstat),
            is_root=not parents,
        )

    def load(self, shas: Iterable[str]) -> list[RawCommit]:
        """Read commits and sort them by timestamp, oldest first."""
        commits = []
        for sha in shas:
            try:
                commit = self.read_commit(sha)
            except DiffSourceError as e:
                logger.warning(f"Skipping commit {sha}: {e}")
                continue
            if commit is not None:
                commits.append(commit)
        commits.sort(key=lambda c: c.timestamp)
        logger.info(f"Read {len(commits)} commits from {self.repo_path}")
        return commits
