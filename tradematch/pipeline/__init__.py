"""Feed pipeline orchestration: merge, score and rank a candidate's job list."""

from .models import FeedRunResult
from .runner import CandidateFeedPipeline

__all__ = ["CandidateFeedPipeline", "FeedRunResult"]
