# services/progress-service/src/apps/progress/services/aggregation_service.py
"""
Aggregation Service

Recomputes a student's progress snapshot from completed lessons and
instructor feedback. The snapshot is derived fresh on every run; only
the overall level and learned skills carry over from prior state.
"""

import copy
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Dict, Any, Optional, Iterable, Sequence

from ..models import SkillLevel, Sport, StudentProgress
from .exceptions import MalformedFeedbackError

logger = logging.getLogger(__name__)


@dataclass
class CompletedLessonFact:
    """A completed lesson attended by the student."""
    student_id: str
    date: date
    lesson_id: Optional[str] = None


@dataclass
class ProgressSnapshot:
    """Fully recomputed progress state for one evaluation cycle."""
    student_id: str
    overall_level: str
    total_lessons: int
    completed_lessons: int
    skill_state: Dict[str, Dict[str, Any]]
    streak_days: int
    total_points: int
    last_activity: datetime
    last_updated: datetime
    expected_version: Optional[int] = None

    @property
    def overall_level_ordinal(self) -> int:
        return SkillLevel.ordinal(self.overall_level)


@dataclass
class SkillHistoryDraft:
    """Skill history entry to be written with the snapshot."""
    student_id: str
    sport: str
    level_before: int
    level_after: int
    progress_percent: float
    skills_learned: List[str] = field(default_factory=list)
    recorded_at: Optional[datetime] = None


# =============================================================================
# PER-FIELD MERGE FUNCTIONS
# =============================================================================

def merge_progress_percent(prior_percent: float, overall_rating) -> float:
    """
    Latest assessment wins.

    The prior value is ignored; the rating is scaled to a percentage
    and clamped to [0, 100].
    """
    percent = float(overall_rating) / 5 * 100
    return max(0.0, min(100.0, percent))


def merge_skills_learned(prior_skills: Iterable[str], *new_skill_lists: Iterable[str]) -> List[str]:
    """
    Skills accumulate: union of prior and new skills, sorted.
    """
    merged = set(prior_skills or [])
    for skills in new_skill_lists:
        merged.update(s for s in (skills or []) if s)
    return sorted(merged)


def _empty_sport_state(now: datetime) -> Dict[str, Any]:
    return {
        'level': 0,
        'progress_percent': 0.0,
        'skills_learned': [],
        'last_updated': now.isoformat(),
    }


def _record_sport(record) -> str:
    return getattr(record, 'sport', None) or Sport.SKIING.value


def _record_order_key(record):
    created_at = getattr(record, 'created_at', None)
    return (
        record.date,
        created_at.timestamp() if created_at else 0.0,
    )


class ProgressAggregator:
    """
    Derives the progress snapshot for one student.

    Pure computation; callers load the inputs and persist the result.
    """

    @staticmethod
    def recompute(
        student_id: str,
        prior_state: Optional[StudentProgress],
        completed_lessons: Sequence[CompletedLessonFact],
        feedback_records: Sequence[Any],
        now: datetime
    ) -> ProgressSnapshot:
        """
        Recompute progress from source facts.

        Args:
            student_id: Student UUID string
            prior_state: Stored progress row, or None for a new student
            completed_lessons: Completed lesson facts of the student
            feedback_records: All feedback records of the student
            now: Evaluation timestamp

        Returns:
            New progress snapshot

        Raises:
            MalformedFeedbackError: If a record has an unknown level or
                no overall rating
        """
        for record in feedback_records:
            ProgressAggregator._validate_record(record)

        if prior_state is not None:
            overall_ordinal = SkillLevel.ordinal(prior_state.overall_level)
            skill_state = copy.deepcopy(prior_state.skill_state or {})
            streak_days = prior_state.streak_days
            total_points = prior_state.total_points
            expected_version = prior_state.version
        else:
            overall_ordinal = 0
            skill_state = {}
            streak_days = 0
            total_points = 0
            expected_version = None

        for sport in Sport.values:
            skill_state.setdefault(sport, _empty_sport_state(now))

        for sport, latest in ProgressAggregator.latest_by_sport(feedback_records).items():
            prior_sport = skill_state.get(sport) or _empty_sport_state(now)
            level = SkillLevel.ordinal(latest.current_level)

            skill_state[sport] = {
                'level': level,
                'progress_percent': merge_progress_percent(
                    prior_sport.get('progress_percent', 0.0),
                    latest.overall
                ),
                'skills_learned': merge_skills_learned(
                    prior_sport.get('skills_learned', []),
                    latest.skills_improved,
                    latest.new_skills_learned
                ),
                'last_updated': now.isoformat(),
            }
            overall_ordinal = max(overall_ordinal, level)

        lesson_count = len(completed_lessons)

        return ProgressSnapshot(
            student_id=str(student_id),
            overall_level=SkillLevel.from_ordinal(overall_ordinal).value,
            total_lessons=lesson_count,
            completed_lessons=lesson_count,
            skill_state=skill_state,
            streak_days=streak_days,
            total_points=total_points,
            last_activity=now,
            last_updated=now,
            expected_version=expected_version,
        )

    @staticmethod
    def latest_by_sport(feedback_records: Sequence[Any]) -> Dict[str, Any]:
        """Most recent feedback record for each sport present."""
        latest = {}
        for record in sorted(feedback_records, key=_record_order_key):
            latest[_record_sport(record)] = record
        return latest

    @staticmethod
    def build_history_entry(
        prior_state: Optional[StudentProgress],
        snapshot: ProgressSnapshot,
        feedback_records: Sequence[Any],
        now: datetime
    ) -> SkillHistoryDraft:
        """
        History draft for the sport of the most recent feedback, or
        skiing when the student has none.
        """
        if feedback_records:
            sport = _record_sport(max(feedback_records, key=_record_order_key))
        else:
            sport = Sport.SKIING.value

        prior_skill_state = (prior_state.skill_state or {}) if prior_state is not None else {}
        level_before = prior_skill_state.get(sport, {}).get('level', 0)
        after = snapshot.skill_state.get(sport, {})

        return SkillHistoryDraft(
            student_id=snapshot.student_id,
            sport=sport,
            level_before=level_before,
            level_after=after.get('level', 0),
            progress_percent=after.get('progress_percent', 0.0),
            skills_learned=list(after.get('skills_learned', [])),
            recorded_at=now,
        )

    @staticmethod
    def _validate_record(record) -> None:
        feedback_id = getattr(record, 'id', None)

        if record.overall is None:
            raise MalformedFeedbackError(
                "Feedback record has no overall rating",
                feedback_id=feedback_id,
                field='overall'
            )
        if not isinstance(record.overall, (int, float, Decimal)) or isinstance(record.overall, bool):
            raise MalformedFeedbackError(
                f"Overall rating is not a number: {record.overall!r}",
                feedback_id=feedback_id,
                field='overall'
            )
        try:
            SkillLevel.ordinal(record.current_level)
        except ValueError:
            logger.warning(
                f"Unknown skill level {record.current_level!r} in feedback {feedback_id}"
            )
            raise MalformedFeedbackError(
                f"Unknown skill level: {record.current_level!r}",
                feedback_id=feedback_id,
                field='current_level'
            )
