"""External effort judge boundary."""

from .adapter import EffortJudgeAdapter, rating_from_dict
from .client import JudgeClient, JudgeResponse, OpenAIJudgeClient, TokenUsage
from .repair import parse_json_object, repair_truncated_json

__all__ = [
    "EffortJudgeAdapter",
    "rating_from_dict",
    "JudgeClient",
    "JudgeResponse",
    "OpenAIJudgeClient",
    "TokenUsage",
    "parse_json_object",
    "repair_truncated_json",
]
