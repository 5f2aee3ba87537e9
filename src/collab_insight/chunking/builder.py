"""Turn a team's commits into bounded change units (chunks).

Two passes over the time-ordered commits:

1. Bundling: consecutive small commits (at most 30 changed lines) by the
   same author, each within 60 minutes of the previous bundle member, are
   merged into one unit. A larger commit closes the open bundle and is
   emitted on its own.
2. Splitting: a unit with more than 500 changed lines is cut into several
   chunks by greedily packing whole files. A file is never split, so a
   single oversized file gets a chunk of its own.

Dependency and build-output files are removed before any line counting.
Every file delta of an input commit ends up in exactly one chunk.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import Iterable, Optional, Sequence

from ..config import ChunkingConfig
from ..logging_config import get_logger
from ..models import Chunk, FileDelta, RawCommit, wall_clock
from .paths import drop_skipped

logger = get_logger(__name__)

BUNDLE_MESSAGE_SEPARATOR = " | "


class ChangeUnitBuilder:
    """Bundle small commits and split large ones into Chunks."""

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig()

    def build(self, commits: Iterable[RawCommit]) -> list[Chunk]:
        """
        Args:
            commits: One team's commits, sorted by timestamp ascending

        Returns:
            Chunks in commit order
        """
        cleaned = [self._strip_skipped(c) for c in commits]
        units = self._bundle(cleaned)

        chunks: list[Chunk] = []
        for unit in units:
            chunks.extend(self._split(unit))

        logger.info(
            f"Built {len(chunks)} chunks from {len(cleaned)} commits "
            f"({len(units)} units after bundling)"
        )
        return chunks

    def _strip_skipped(self, commit: RawCommit) -> RawCommit:
        kept = drop_skipped(commit.file_deltas, self.config.skip_path_patterns)
        if len(kept) != len(commit.file_deltas):
            logger.debug(
                f"Dropped {len(commit.file_deltas) - len(kept)} generated/vendored "
                f"files from {commit.sha[:8]}"
            )
            # Flags describe the files that remain
            return RawCommit.build(
                sha=commit.sha,
                author_email=commit.author_email,
                message=commit.message,
                timestamp=commit.timestamp,
                file_deltas=kept,
                author_id=commit.author_id,
                detect_renames=self.config.detect_renames,
                detect_formatting=self.config.detect_formatting,
                is_root=commit.is_root,
            )
        if not self.config.detect_renames:
            commit = replace(commit, rename_detected=False)
        if not self.config.detect_formatting:
            commit = replace(commit, format_only=False, mass_reformat=False)
        return commit

    # -- bundling ---------------------------------------------------------

    def _bundle(self, commits: Sequence[RawCommit]) -> list[Chunk]:
        units: list[Chunk] = []
        bundle: list[RawCommit] = []

        for commit in commits:
            if commit.total_lines > self.config.small_commit_threshold:
                if bundle:
                    units.append(self._merge(bundle))
                    bundle = []
                units.append(self._single(commit))
                continue

            if bundle and not self._can_join(bundle[-1], commit):
                units.append(self._merge(bundle))
                bundle = []
            bundle.append(commit)

        if bundle:
            units.append(self._merge(bundle))
        return units

    def _can_join(self, last: RawCommit, commit: RawCommit) -> bool:
        if last.author_id != commit.author_id:
            return False
        if last.timestamp is None or commit.timestamp is None:
            return False
        gap = wall_clock(commit.timestamp) - wall_clock(last.timestamp)
        return abs(gap) <= timedelta(minutes=self.config.bundle_window_minutes)

    @staticmethod
    def _single(commit: RawCommit) -> Chunk:
        return Chunk(
            commit_sha=commit.sha,
            author_id=commit.author_id,
            author_email=commit.author_email,
            message=commit.message,
            timestamp=commit.timestamp,
            file_deltas=commit.file_deltas,
            rename_detected=commit.rename_detected,
            format_only=commit.format_only,
            mass_reformat=commit.mass_reformat,
        )

    def _merge(self, bundle: list[RawCommit]) -> Chunk:
        if len(bundle) == 1:
            return self._single(bundle[0])

        first = bundle[0]
        deltas: list[FileDelta] = []
        for commit in bundle:
            deltas.extend(commit.file_deltas)

        logger.debug(f"Bundled {len(bundle)} commits from author {first.author_id}")
        return Chunk(
            commit_sha=first.sha,
            author_id=first.author_id,
            author_email=first.author_email,
            message=BUNDLE_MESSAGE_SEPARATOR.join(c.message for c in bundle),
            timestamp=first.timestamp,
            file_deltas=tuple(deltas),
            is_bundled=True,
            bundled_shas=tuple(c.sha for c in bundle),
            rename_detected=any(c.rename_detected for c in bundle),
            format_only=all(c.format_only for c in bundle),
            mass_reformat=any(c.mass_reformat for c in bundle),
        )

    # -- splitting --------------------------------------------------------

    def _split(self, unit: Chunk) -> list[Chunk]:
        cap = self.config.max_lines_per_chunk
        if unit.total_lines <= cap:
            return [unit]

        groups: list[list[FileDelta]] = []
        current: list[FileDelta] = []
        current_lines = 0
        for delta in unit.file_deltas:
            if current and current_lines + delta.total_lines > cap:
                groups.append(current)
                current = []
                current_lines = 0
            current.append(delta)
            current_lines += delta.total_lines
        if current:
            groups.append(current)

        total = len(groups)
        logger.debug(f"Split {unit.commit_sha[:8]} ({unit.total_lines} lines) into {total} chunks")
        return [
            replace(unit, file_deltas=tuple(group), chunk_index=i, total_chunks=total)
            for i, group in enumerate(groups)
        ]
