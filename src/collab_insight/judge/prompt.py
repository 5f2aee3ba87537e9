"""Prompt text for the effort judge."""

from ..models import Chunk

TRUNCATION_MARKER = "\n... (truncated)"

PROMPT_TEMPLATE = """Analyze the following git commit chunk and rate the EFFORT required to implement it.

Context:
- Commit Message: {message}
- Files Changed: {files}
- Lines Added: {lines_added}
- Lines Deleted: {lines_deleted}

Diff Content:
{diff}

Task:
Rate the following aspects on a scale of 1-10:
1. effortScore: How much work did this take? (1=Trivial typo, 10=Massive architectural change)
2. complexity: How technically complex is the change? (patterns, algorithms, logic)
3. novelty: Is this original work? (1=Copy-paste/Generated, 10=Highly original)

Also classify the type of change (FEATURE, BUG_FIX, TEST, REFACTOR, TRIVIAL) and
state your confidence (0.0-1.0). Provide a VERY SHORT reasoning (max 10 words).

Return ONLY a valid JSON object matching this structure (no markdown, no explanation):
{{"effortScore": 5.0, "complexity": 5.0, "novelty": 5.0, "type": "FEATURE", "confidence": 0.9, "reasoning": "Short reason."}}
"""


def truncate_diff(diff: str, max_chars: int) -> str:
    if len(diff) > max_chars:
        return diff[:max_chars] + TRUNCATION_MARKER
    return diff


def build_prompt(chunk: Chunk, max_diff_chars: int = 10000) -> str:
    return PROMPT_TEMPLATE.format(
        message=chunk.message,
        files=", ".join(chunk.files),
        lines_added=chunk.lines_added,
        lines_deleted=chunk.lines_deleted,
        diff=truncate_diff(chunk.diff_text, max_diff_chars),
    )
