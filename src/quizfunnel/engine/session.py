"""Quiz session: the state machine that runs one respondent through a funnel.

The session owns navigation, answers, score and tags. Everything that
leaves the process (analytics counters, lead writes, the webhook) goes
through the injected :class:`~quizfunnel.adapters.effects.FunnelEffects`,
which never raises, so a broken backend cannot stall the funnel.

States::

    IDLE -> PLAYING <-> SUBMITTING   (lead form, shadow capture)
               |  \\
               |   ANALYZING         (fake loading, progress simulator)
               v  /
             RESULT
"""

from __future__ import annotations

import logging
import random
import threading
import uuid
from datetime import datetime, timezone
from enum import StrEnum
from typing import Callable

from quizfunnel.adapters.effects import FunnelEffects
from quizfunnel.adapters.payload import build_webhook_payload
from quizfunnel.config import FunnelConfig
from quizfunnel.engine.clock import Scheduler, ThreadingScheduler
from quizfunnel.engine.flow import resolve_next
from quizfunnel.engine.progress import Phase, ProgressSimulator
from quizfunnel.engine.results import evaluate
from quizfunnel.engine.scoring import NO_CONTRIBUTION, ScoreContribution, apply_answer
from quizfunnel.events.bus import EventBus
from quizfunnel.events.types import (
    AnalysisCompleted,
    AnalysisProgressed,
    AnswerRecorded,
    ElementEntered,
    LeadCaptured,
    ResultReached,
    SessionAbandoned,
    SessionStarted,
)
from quizfunnel.model.element import Element, ElementKind
from quizfunnel.model.lead import AnswerValue, Lead, LeadContact, UtmParams
from quizfunnel.model.quiz import Quiz
from quizfunnel.model.result import FinalResult
from quizfunnel.model.snapshot import ProgressSnapshot

logger = logging.getLogger(__name__)


class SessionState(StrEnum):
    IDLE = "idle"
    PLAYING = "playing"
    SUBMITTING = "submitting"
    ANALYZING = "analyzing"
    RESULT = "result"


class QuizSession:
    """Runs a single respondent through a :class:`Quiz`.

    Args:
        effects: Side-effect adapter. Defaults to one with no collaborators.
        scheduler: Drives the progress simulator. Defaults to
            :class:`~quizfunnel.engine.clock.ThreadingScheduler`.
        config: Timing, fallback profiles and limits.
        event_bus: Receives lifecycle events.
        rng: Random source for the progress simulator.
        utm_provider: Returns the landing page's UTM parameters. Called at
            most once per session, the first time a lead or webhook needs it.
        preview: Suppress every side effect; navigation is unchanged.
    """

    def __init__(
        self,
        effects: FunnelEffects | None = None,
        *,
        scheduler: Scheduler | None = None,
        config: FunnelConfig | None = None,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        utm_provider: Callable[[], UtmParams] | None = None,
        preview: bool = False,
    ) -> None:
        self.preview = preview
        self.effects = FunnelEffects.disabled() if preview else (effects or FunnelEffects())
        self.scheduler = scheduler or ThreadingScheduler()
        self.config = config or FunnelConfig()
        self.event_bus = event_bus or EventBus()
        if self.effects.event_bus is None:
            self.effects.event_bus = self.event_bus
        self._rng = rng or random.Random()
        self._utm_provider = utm_provider

        self._lock = threading.RLock()
        self._quiz: Quiz | None = None
        self._reset()

    def _reset(self) -> None:
        self._state = SessionState.IDLE
        self._index = 0
        self._answers: dict[str, AnswerValue] = {}
        self._contributions: dict[str, ScoreContribution] = {}
        self._contact = LeadContact()
        self._lead_id = ""
        self._utm: UtmParams | None = None
        self._simulator: ProgressSimulator | None = None
        self._progress = 0
        self._final: FinalResult | None = None
        self._webhook_sent = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def quiz(self) -> Quiz | None:
        return self._quiz

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_element(self) -> Element | None:
        if self._quiz is None:
            return None
        return self._quiz.element_at(self._index)

    @property
    def answers(self) -> dict[str, AnswerValue]:
        return dict(self._answers)

    @property
    def contact(self) -> LeadContact:
        return self._contact

    @property
    def lead_id(self) -> str:
        return self._lead_id

    @property
    def score(self) -> float:
        return sum(c.delta for c in self._contributions.values())

    @property
    def tags(self) -> tuple[str, ...]:
        """Union of every contribution's tags, in first-seen order."""
        seen: dict[str, None] = {}
        for contribution in self._contributions.values():
            for tag in contribution.tags:
                seen.setdefault(tag, None)
        return tuple(seen)

    @property
    def progress(self) -> int:
        """Last percentage reported by the analysis progress simulator."""
        return self._progress

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, quiz: Quiz) -> None:
        """Begin a fresh run of *quiz*, discarding any previous state."""
        with self._lock:
            self._cancel_simulator()
            self._reset()
            self._quiz = quiz
            self._lead_id = uuid.uuid4().hex
            self._state = SessionState.PLAYING
            self.effects.record_impression(quiz.id)
            self.event_bus.emit(SessionStarted(quiz_id=quiz.id, lead_id=self._lead_id))
            logger.info("Session %s started on quiz %s", self._lead_id, quiz.id)
            self._enter(0)

    def close(self) -> None:
        """Tear down: cancel any pending analysis ticks."""
        with self._lock:
            self._cancel_simulator()
            if self._state is SessionState.ANALYZING:
                self._state = SessionState.PLAYING

    def abandon(self) -> None:
        """Record a drop-off at the current element, then close."""
        with self._lock:
            element = self.current_element
            if self._quiz is not None and element is not None and self._state is not SessionState.RESULT:
                self.effects.record_drop_off(self._quiz.id, element.id)
                self.event_bus.emit(SessionAbandoned(quiz_id=self._quiz.id, element_id=element.id))
            self.close()

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def set_answer(
        self, element_id: str, value: AnswerValue, tags: list[str] | tuple[str, ...] | None = None
    ) -> None:
        """Record *value* for *element_id*.

        A second answer to the same element replaces the first one's score
        and tags. Extra *tags* are added to that element's contribution.
        """
        with self._lock:
            self._answers[element_id] = value
            element = self._quiz.element(element_id) if self._quiz is not None else None
            if element is None:
                logger.debug("Answer for unknown element %r scores zero", element_id)
                contribution = NO_CONTRIBUTION
            else:
                contribution = apply_answer(element, value)
            if tags:
                merged = dict.fromkeys(contribution.tags)
                merged.update(dict.fromkeys(tags))
                contribution = ScoreContribution(delta=contribution.delta, tags=tuple(merged))
            self._contributions[element_id] = contribution
            self.event_bus.emit(AnswerRecorded(element_id=element_id, value=value, score=self.score))

    def set_contact(self, name: str = "", email: str = "", whatsapp: str = "") -> None:
        with self._lock:
            self._contact = LeadContact(name=name, email=email, whatsapp=whatsapp)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def can_advance(self) -> bool:
        with self._lock:
            if self._state not in (SessionState.PLAYING, SessionState.RESULT):
                return False
            element = self.current_element
            if element is None:
                return False
            if not element.required or element.always_satisfied:
                return True
            if element.kind is ElementKind.LEAD_FORM:
                return self._contact.is_complete(element.fields)
            return element.id in self._answers

    def advance(self) -> str | None:
        """Move the respondent forward.

        Returns the redirect URL when the run ends on a result that carries
        one, otherwise None. Does nothing when :meth:`can_advance` is False.
        """
        with self._lock:
            if not self.can_advance():
                return None
            element = self.current_element
            assert element is not None and self._quiz is not None

            if element.kind is ElementKind.LEAD_FORM:
                target = resolve_next(self._index, self._answers, self._quiz.elements)
                if target is None:
                    return None
                self._state = SessionState.SUBMITTING
                self._capture_partial_lead(element)
                self._state = SessionState.PLAYING
                self._enter(target)
                return None

            if element.kind is ElementKind.FAKE_LOADING:
                self._start_analysis(element)
                return None

            if element.kind is ElementKind.RESULT or self._index == self._quiz.last_index:
                return self._finish()

            self._move_next()
            return None

    def retreat(self) -> None:
        """Step back one element, cancelling any analysis in progress."""
        with self._lock:
            if self._quiz is None or self._index == 0:
                return
            self._cancel_simulator()
            self._state = SessionState.PLAYING
            self._enter(self._index - 1)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def result(self) -> FinalResult:
        """Evaluate the result rules against the current score and tags."""
        with self._lock:
            rules = self._quiz.result_rules if self._quiz is not None else ()
            return evaluate(self.score, self.tags, rules, self.config.thresholds)

    # ------------------------------------------------------------------
    # Resume support
    # ------------------------------------------------------------------

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            if self._quiz is None:
                raise RuntimeError("Session has not been started")
            return ProgressSnapshot.create_now(
                self._quiz.id,
                current_index=self._index,
                answers=self._answers,
                contact=self._contact,
            )

    def restore(self, snapshot: ProgressSnapshot, now: datetime | None = None) -> bool:
        """Resume from *snapshot*. Score and tags are recomputed from the answers.

        Returns False, leaving the session untouched, when the snapshot
        belongs to another quiz or is older than
        ``config.snapshot_max_age_seconds``.
        """
        with self._lock:
            if self._quiz is None or snapshot.quiz_id != self._quiz.id:
                return False
            if snapshot.is_expired(self.config.snapshot_max_age_seconds, now):
                logger.info("Ignoring expired snapshot from %s", snapshot.timestamp)
                return False
            self._cancel_simulator()
            self._answers.clear()
            self._contributions.clear()
            for element_id, value in snapshot.answers.items():
                self.set_answer(element_id, value)
            self._contact = snapshot.contact
            index = min(max(snapshot.current_index, 0), max(self._quiz.last_index, 0))
            self._state = SessionState.PLAYING
            self._enter(index)
            return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _enter(self, index: int) -> None:
        self._index = index
        element = self.current_element
        if element is None:
            return
        self.event_bus.emit(ElementEntered(index=index, element_id=element.id))
        if element.kind is ElementKind.RESULT:
            self._state = SessionState.RESULT
            self._final = self.result()
            self.event_bus.emit(ResultReached(result=self._final))

    def _move_next(self) -> bool:
        """Follow the flow resolver. Returns False at the end of the quiz."""
        assert self._quiz is not None
        target = resolve_next(self._index, self._answers, self._quiz.elements)
        if target is None:
            return False
        self._state = SessionState.PLAYING
        self._enter(target)
        return True

    def _finish(self) -> str | None:
        assert self._quiz is not None
        result = self.result()
        self._final = result
        if self._state is not SessionState.RESULT:
            self._state = SessionState.RESULT
            self.event_bus.emit(ResultReached(result=result))
        if not result.redirect_url:
            return None
        webhook_url = self._quiz.tracking.webhook_url
        if webhook_url and not self._webhook_sent:
            payload = build_webhook_payload(
                self._quiz, self._contact, result, self._answers, self._utm_params()
            )
            self._webhook_sent = self.effects.dispatch_webhook(webhook_url, payload)
        return result.redirect_url

    def _utm_params(self) -> UtmParams:
        if self._utm is None:
            self._utm = self._utm_provider() if self._utm_provider is not None else UtmParams()
        return self._utm

    def _build_lead(
        self, *, profile: str, completed: bool, drop_off_element: str | None = None
    ) -> Lead:
        assert self._quiz is not None
        utm = self._utm_params()
        return Lead(
            id=self._lead_id,
            quiz_id=self._quiz.id,
            answers=dict(self._answers),
            score=self.score,
            tags=self.tags,
            profile=profile,
            completed=completed,
            name=self._contact.name,
            email=self._contact.email,
            whatsapp=self._contact.whatsapp,
            utm_source=utm.source,
            utm_medium=utm.medium,
            utm_campaign=utm.campaign,
            drop_off_element=drop_off_element,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def _capture_partial_lead(self, element: Element) -> None:
        lead = self._build_lead(
            profile=self.config.partial_profile, completed=False, drop_off_element=element.id
        )
        self.effects.save_lead(lead)
        self.event_bus.emit(LeadCaptured(lead_id=lead.id, completed=False))

    # --- analysis -----------------------------------------------------------

    def _start_analysis(self, element: Element) -> None:
        self._cancel_simulator()
        self._state = SessionState.ANALYZING
        self._progress = 0
        simulator = ProgressSimulator(
            self.scheduler,
            pause_at=element.pause_at,
            config=self.config.progress,
            rng=self._rng,
            duration_ms=element.duration,
            on_progress=lambda percent, phase: self._on_progress(simulator, percent, phase),
            on_complete=lambda: self._on_analysis_complete(simulator),
        )
        self._simulator = simulator
        simulator.start()

    def _cancel_simulator(self) -> None:
        if self._simulator is not None:
            self._simulator.cancel()
            self._simulator = None

    def _on_progress(self, simulator: ProgressSimulator, percent: int, phase: Phase) -> None:
        with self._lock:
            if simulator is not self._simulator:
                return
            self._progress = percent
            self.event_bus.emit(AnalysisProgressed(percent=percent, phase=phase.value))

    def _on_analysis_complete(self, simulator: ProgressSimulator) -> None:
        with self._lock:
            if simulator is not self._simulator or self._state is not SessionState.ANALYZING:
                return
            self._simulator = None
            assert self._quiz is not None
            result = self.result()
            self._final = result
            self.event_bus.emit(AnalysisCompleted(result=result))
            lead = self._build_lead(profile=result.profile, completed=True)
            self.effects.save_lead(lead)
            self.event_bus.emit(LeadCaptured(lead_id=lead.id, completed=True))
            self.effects.record_completion(self._quiz.id)
            if not self._move_next():
                # nothing after the loading screen: the run ends here
                self._state = SessionState.RESULT
                self.event_bus.emit(ResultReached(result=result))
