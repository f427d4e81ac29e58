from enum import Enum


class AppState(str, Enum):
    idle = "idle"
    selected = "selected"
    merging = "merging"
    finished = "finished"
    failed = "failed"
