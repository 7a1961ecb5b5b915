"""Multi-step form state for creating beans and shots.

A draft holds the partially entered fields of one flow, knows which step
the user is on and whether that step may be left, and turns itself into
a finished record at the end. Validation failures are returned, never
raised, so a form can simply disable its Next/Save button.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import date
from enum import IntEnum

from espresso_log.exceptions import ValidationError
from espresso_log.schema import (
    GRIND_DEFAULT,
    GRIND_MAX,
    GRIND_MIN,
    GRIND_STEP,
    Bean,
    RoastLevel,
    Shot,
    create_bean,
    create_shot,
)
from espresso_log.stores import BeanStore, ShotStore
from espresso_log.timer import AsyncioScheduler, Scheduler, ShotTimer

log = logging.getLogger(__name__)


class BeanStep(IntEnum):
    ORIGIN = 1
    ROAST_LEVEL = 2
    ROAST_DATE = 3
    NAME = 4


class ShotStep(IntEnum):
    CHOOSE_BEAN = 1
    GRIND = 2
    DOSE = 3
    TIMER = 4
    YIELD = 5
    TASTE_NOTES = 6


def snap_grind(value: float) -> float:
    """Clamp to the grinder range and round to the nearest half step."""
    clamped = min(max(float(value), GRIND_MIN), GRIND_MAX)
    return math.floor(clamped / GRIND_STEP + 0.5) * GRIND_STEP


class BeanDraft:
    """Origin -> roast level -> roast date -> name."""

    def __init__(
        self,
        bean_store: BeanStore | None = None,
        *,
        today: Callable[[], date] = date.today,
        on_complete: Callable[[Bean], None] | None = None,
    ):
        self.bean_store = bean_store
        self.today = today
        self.on_complete = on_complete
        self.reset()

    def reset(self) -> None:
        self.origin = ""
        self.roast_level = RoastLevel.MEDIUM
        self.roast_date = self.today()
        self.name = ""
        self.step = BeanStep.ORIGIN
        self.finished = False

    def cancel(self) -> None:
        """Discard everything entered. Nothing is saved."""
        log.debug("Bean draft cancelled at step %s", self.step.name)
        self.reset()

    def can_advance(self, step: BeanStep | None = None) -> bool:
        step = self.step if step is None else BeanStep(step)
        if step is BeanStep.ORIGIN:
            return bool(self.origin.strip())
        if step is BeanStep.NAME:
            return bool(self.name.strip())
        return True

    def advance(self) -> bool:
        """Move to the next step. Stays put and returns False if not allowed."""
        if self.step is BeanStep.NAME or not self.can_advance():
            return False
        self.step = BeanStep(self.step + 1)
        return True

    def back(self) -> bool:
        if self.step is BeanStep.ORIGIN:
            return False
        self.step = BeanStep(self.step - 1)
        return True

    def finish(self) -> Bean | ValidationError:
        """Create the bean and add it to the store.

        Only possible from the name step, and only once. On failure the
        draft stays where it is with all fields intact.
        """
        if self.finished:
            return ValidationError("step", "already finished")
        if self.step is not BeanStep.NAME:
            return ValidationError("step", f"cannot finish from step {self.step.name}")

        result = create_bean(self.name, self.roast_level, self.origin, self.roast_date)
        if isinstance(result, ValidationError):
            log.debug("Bean draft rejected: %s", result)
            return result

        if self.bean_store is not None:
            self.bean_store.add(result)
        self.finished = True
        if self.on_complete is not None:
            self.on_complete(result)
        return result


class ShotDraft:
    """Choose bean -> grind -> dose -> timer -> yield -> taste notes.

    The draft owns the shot timer. Use it as a context manager, or call
    ``close()``, so the timer is released however the flow ends.
    Without an explicit scheduler the timer ticks on the running asyncio
    loop, so ``start_timer()`` must be called from inside it.
    """

    def __init__(
        self,
        bean_store: BeanStore | None = None,
        shot_store: ShotStore | None = None,
        *,
        scheduler: Scheduler | None = None,
    ):
        self.bean_store = bean_store
        self.shot_store = shot_store
        self.timer = ShotTimer(scheduler or AsyncioScheduler())
        self.reset()

    def __enter__(self) -> ShotDraft:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def reset(self) -> None:
        self.timer.reset()
        self.bean: Bean | None = None
        self._grind_setting = GRIND_DEFAULT
        self.dose = ""
        self.yield_ = ""
        self.taste_notes = ""
        self._manual_shot_time: float | None = None
        self.step = ShotStep.CHOOSE_BEAN
        self.finished = False

    def close(self) -> None:
        """Release the timer. Safe to call more than once."""
        self.timer.stop()

    def cancel(self) -> None:
        log.debug("Shot draft cancelled at step %s", self.step.name)
        self.reset()

    # fields

    @property
    def grind_setting(self) -> float:
        return self._grind_setting

    @grind_setting.setter
    def grind_setting(self, value: float) -> None:
        self._grind_setting = snap_grind(value)

    def select_bean(self, bean: Bean | None) -> None:
        self.bean = bean

    def new_bean_draft(self, *, today: Callable[[], date] = date.today) -> BeanDraft:
        """Nested bean flow. Finishing it stores the bean and selects it here."""
        return BeanDraft(self.bean_store, today=today, on_complete=self.select_bean)

    # timer

    @property
    def shot_time(self) -> float:
        if self._manual_shot_time is not None:
            return self._manual_shot_time
        return self.timer.elapsed

    def set_shot_time(self, seconds: float) -> None:
        """Enter the shot time by hand instead of running the timer."""
        self.timer.reset()
        self._manual_shot_time = max(float(seconds), 0.0)

    @property
    def timer_running(self) -> bool:
        return self.timer.running

    def start_timer(self) -> None:
        self._manual_shot_time = None
        self.timer.start()

    def stop_timer(self) -> None:
        self.timer.stop()

    # navigation

    def can_advance(self, step: ShotStep | None = None) -> bool:
        step = self.step if step is None else ShotStep(step)
        if step is ShotStep.CHOOSE_BEAN:
            return self.bean is not None
        if step is ShotStep.DOSE:
            return bool(self.dose.strip())
        if step is ShotStep.TIMER:
            return self.shot_time > 0
        if step is ShotStep.YIELD:
            return bool(self.yield_.strip())
        return True

    def _leave(self) -> None:
        if self.step is ShotStep.TIMER:
            self.timer.stop()

    def advance(self) -> bool:
        if self.step is ShotStep.TASTE_NOTES or not self.can_advance():
            return False
        self._leave()
        self.step = ShotStep(self.step + 1)
        return True

    def back(self) -> bool:
        if self.step is ShotStep.CHOOSE_BEAN:
            return False
        self._leave()
        self.step = ShotStep(self.step - 1)
        return True

    def finish(self) -> Shot | ValidationError:
        """Create the shot and record it.

        Dose and yield are only parsed here; earlier steps just check
        that something was typed.
        """
        if self.finished:
            return ValidationError("step", "already finished")
        if self.step is not ShotStep.TASTE_NOTES:
            return ValidationError("step", f"cannot finish from step {self.step.name}")

        result = create_shot(
            self.bean,
            grind_setting=self.grind_setting,
            dose=self.dose,
            yield_=self.yield_,
            shot_time=self.shot_time,
            taste_notes=self.taste_notes,
        )
        if isinstance(result, ValidationError):
            log.debug("Shot draft rejected: %s", result)
            return result

        self.close()
        if self.shot_store is not None:
            self.shot_store.record(result)
        self.finished = True
        return result
