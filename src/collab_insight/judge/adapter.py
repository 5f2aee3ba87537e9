"""Boundary to the external effort judge.

The adapter never lets a judge failure escape: malformed output is
repaired or demoted to a zero-confidence TRIVIAL rating, and client
errors become error ratings. The one exception it raises is
AnalysisCancelledError, checked right before each call is dispatched and
right before its result is consumed.
"""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Optional, Sequence

from ..cancellation import CancellationToken
from ..config import JudgeConfig
from ..exceptions import JudgeError
from ..logging_config import get_logger
from ..models import Chunk, CommitLabel, EffortRating, RatedChunk
from .client import JudgeClient
from .prompt import build_prompt
from .repair import parse_json_object

logger = get_logger(__name__)

LLM_USAGE_LOG_PREFIX = "LLM_USAGE"


class EffortJudgeAdapter:
    """Rate chunks through a JudgeClient."""

    def __init__(self, client: Optional[JudgeClient], config: Optional[JudgeConfig] = None):
        self.client = client
        self.config = config or JudgeConfig()

    @property
    def enabled(self) -> bool:
        return self.config.enabled and self.client is not None

    def rate(self, chunk: Chunk, cancel: Optional[CancellationToken] = None) -> EffortRating:
        """Rate one chunk.

        Raises:
            AnalysisCancelledError: If cancel is set before or after the call
        """
        if cancel is not None:
            cancel.raise_if_cancelled("before rating chunk")

        client = self.client
        if client is None or not self.config.enabled:
            return EffortRating.disabled()

        label = f"{chunk.commit_sha[:8]} chunk {chunk.chunk_index + 1}/{chunk.total_chunks}"
        prompt = build_prompt(chunk, self.config.max_diff_chars)
        logger.debug(f"Sending rating request for {label}")

        try:
            response = client.complete(prompt)
        except JudgeError as e:
            logger.error(f"Error rating {label}: {e}")
            return EffortRating.error(f"Error during AI analysis: {e.reason}")

        if cancel is not None:
            cancel.raise_if_cancelled("after rating chunk")

        usage = response.usage
        logger.info(
            f"{LLM_USAGE_LOG_PREFIX} chunk commit={chunk.commit_sha} "
            f"chunk={chunk.chunk_index + 1}/{chunk.total_chunks} model={usage.model} "
            f"usageAvailable={usage.available} promptTokens={usage.prompt_tokens} "
            f"completionTokens={usage.completion_tokens} totalTokens={usage.total_tokens}"
        )

        if not response.text or not response.text.strip():
            logger.warning(f"Empty judge response for {label}")
            return EffortRating.trivial("Empty AI response")

        parsed = parse_json_object(response.text, label)
        if parsed is None:
            return EffortRating.trivial("Truncated AI response")

        try:
            rating = rating_from_dict(parsed)
        except (TypeError, ValueError) as e:
            logger.warning(f"Malformed judge fields for {label}: {e}")
            return EffortRating.trivial("Malformed AI response")

        if rating.confidence < self.config.confidence_threshold:
            logger.warning(
                f"Low confidence ({rating.confidence:.2f}) rating for {label}: {rating.reasoning}"
            )
        return rating

    def rate_all(
        self, chunks: Sequence[Chunk], cancel: Optional[CancellationToken] = None
    ) -> list[RatedChunk]:
        """Rate chunks concurrently, at most max_concurrency calls in flight.

        Results keep the input order. Low-confidence ratings get an
        effective label of TRIVIAL.
        """
        if not chunks:
            return []

        threshold = self.config.confidence_threshold
        workers = min(self.config.max_concurrency, len(chunks))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.rate, chunk, cancel) for chunk in chunks]
            try:
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            except KeyboardInterrupt:
                if cancel is not None:
                    cancel.cancel()
                pool.shutdown(wait=False, cancel_futures=True)
                raise
            for future in done:
                error = future.exception()
                if error is not None:
                    for p in pending:
                        p.cancel()
                    raise error
            ratings = [f.result() for f in futures]

        return [
            RatedChunk.from_rating(chunk, rating, threshold)
            for chunk, rating in zip(chunks, ratings)
        ]


def _score(data: dict[str, Any], *keys: str, upper: float) -> float:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return max(0.0, min(upper, float(value)))
    return 0.0


def rating_from_dict(data: dict[str, Any]) -> EffortRating:
    """Build a rating from the judge's JSON object; missing numbers are 0."""
    return EffortRating(
        effort_score=_score(data, "effortScore", "effort_score", upper=10.0),
        complexity=_score(data, "complexity", upper=10.0),
        novelty=_score(data, "novelty", upper=10.0),
        label=CommitLabel.parse(data.get("type")),
        confidence=_score(data, "confidence", upper=1.0),
        reasoning=str(data.get("reasoning") or ""),
    )
