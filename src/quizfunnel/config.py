"""Engine configuration: timing, fallback profiles and collaborator limits."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressConfig:
    """Timing of the two-phase analysis progress animation.

    Intervals and the dwell are in seconds; steps are percentage points.
    """

    default_pause_at: int = 90
    ramp_interval: float = 0.1
    ramp_max_step: float = 15.0
    dwell_seconds: float = 1.5
    finish_interval: float = 0.1
    finish_max_step: float = 5.0
    min_step: float = 0.5
    # share of the element's duration spent reaching pause_at
    duration_ramp_share: float = 0.7


@dataclass(frozen=True)
class ProfileThresholds:
    """Fallback profile used when no result rule matches.

    score >= expert_min   -> expert_label
    score >= advanced_min -> advanced_label
    otherwise             -> beginner_label
    """

    expert_min: float = 70
    advanced_min: float = 40
    expert_label: str = "Expert"
    advanced_label: str = "Avançado"
    beginner_label: str = "Iniciante"

    def profile_for(self, score: float) -> str:
        if score >= self.expert_min:
            return self.expert_label
        if score >= self.advanced_min:
            return self.advanced_label
        return self.beginner_label


DEFAULT_THRESHOLDS = ProfileThresholds()


@dataclass(frozen=True)
class FunnelConfig:
    progress: ProgressConfig = field(default_factory=ProgressConfig)
    thresholds: ProfileThresholds = DEFAULT_THRESHOLDS
    partial_profile: str = "Partial"
    webhook_timeout_seconds: float = 5.0
    snapshot_max_age_seconds: float = 24 * 60 * 60
    db_path: str = "quizfunnel.db"
