from typing import Callable, Optional

ProgressCallback = Callable[[str], None]


def no_progress(message: str) -> None:
    pass


def resolve_progress(progress_update: Optional[ProgressCallback]) -> ProgressCallback:
    """Return a usable progress sink, falling back to a no-op"""
    return progress_update if progress_update is not None else no_progress


def format_fraction(stage: str, fraction: float) -> str:
    """Annotate a stage name with a whole percentage, e.g. 'Unzipping IPA (42%)'"""
    fraction = min(max(fraction, 0.0), 1.0)
    return f"{stage} ({int(fraction * 100)}%)"


class FractionReporter:
    """Turns processed/total counts into progress messages for one stage"""

    def __init__(self, stage: str, total: int, progress_update: ProgressCallback):
        self.stage = stage
        self.total = total
        self.progress_update = progress_update
        self.completed = 0

    def advance(self, count: int = 1) -> None:
        self.completed += count
        self.progress_update(format_fraction(self.stage, self.fraction))

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return self.completed / self.total
