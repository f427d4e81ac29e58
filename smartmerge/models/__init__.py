from .common import AppState
from .merge import MergeCommitRequest, MoveRequest

__all__ = [
    "AppState",
    "MergeCommitRequest",
    "MoveRequest",
]
