"""Wizard steps and the navigation policy between them.

Navigation is free in both directions: moving between neighbouring steps is
never gated on validation, which only runs at final submission. The policy
is still spelled out as a transition table so a future gate has one place
to live.
"""

from enum import IntEnum


class WizardStep(IntEnum):
    BASIC_INFO = 1
    HARVEST_PLANNING = 2
    RESOURCES_TIMELINE = 3
    QUALITY_REVIEW = 4

    @property
    def title(self) -> str:
        return STEP_TITLES[self]

    @property
    def editable(self) -> bool:
        """Steps 1-2 project farmer data; only 3-4 take agronomist input."""
        return self in EDITABLE_STEPS


FIRST_STEP = WizardStep.BASIC_INFO
LAST_STEP = WizardStep.QUALITY_REVIEW
TOTAL_STEPS = len(WizardStep)

STEP_TITLES: dict[WizardStep, str] = {
    WizardStep.BASIC_INFO: "Basic Information (From Farmer Request)",
    WizardStep.HARVEST_PLANNING: "Harvest Planning (From Farmer Request)",
    WizardStep.RESOURCES_TIMELINE: "Resources & Timeline (Agronomist Input)",
    WizardStep.QUALITY_REVIEW: "Quality Standards & Review (Agronomist Input)",
}

EDITABLE_STEPS = frozenset({WizardStep.RESOURCES_TIMELINE, WizardStep.QUALITY_REVIEW})

# Allowed transitions: {step: [reachable in one move]}
STEP_TRANSITIONS: dict[WizardStep, list[WizardStep]] = {
    WizardStep.BASIC_INFO: [WizardStep.HARVEST_PLANNING],
    WizardStep.HARVEST_PLANNING: [WizardStep.BASIC_INFO, WizardStep.RESOURCES_TIMELINE],
    WizardStep.RESOURCES_TIMELINE: [WizardStep.HARVEST_PLANNING, WizardStep.QUALITY_REVIEW],
    WizardStep.QUALITY_REVIEW: [WizardStep.RESOURCES_TIMELINE],
}


def can_transition(current: WizardStep, target: WizardStep) -> bool:
    return target in STEP_TRANSITIONS[current]


def next_step(current: WizardStep) -> WizardStep:
    """One step forward, staying put on the last step."""
    if current == LAST_STEP:
        return current
    target = WizardStep(current + 1)
    return target if can_transition(current, target) else current


def previous_step(current: WizardStep) -> WizardStep:
    """One step back, staying put on the first step."""
    if current == FIRST_STEP:
        return current
    target = WizardStep(current - 1)
    return target if can_transition(current, target) else current
