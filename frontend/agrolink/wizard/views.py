"""Step renderers: pure functions from (step, draft) to a view model.

Steps 1 and 2 are read-only projections of the farmer's request. Steps 3
and 4 expose the agronomist's editable fields. End dates shown next to
each phase are computed here and never written back to the draft.
"""

from agrolink.schemas.schedule import HarvestScheduleDraft
from agrolink.schemas.wizard import FieldView, PhaseView, StepView
from agrolink.services.list_fields import format_comma_list
from agrolink.services.timeline import parse_date, phase_end_date
from agrolink.wizard.steps import WizardStep

FARMER_DATA_NOTE = "This information is pre-filled from the farmer's harvest request."


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def render_basic_info(draft: HarvestScheduleDraft) -> StepView:
    return StepView(
        step=WizardStep.BASIC_INFO.value,
        title=WizardStep.BASIC_INFO.title,
        description=FARMER_DATA_NOTE,
        editable=False,
        fields=[
            FieldView(name="cropVariety", label="Crop Variety", value=draft.crop_variety),
            FieldView(
                name="farmSize",
                label="Farm Size",
                value=f"{_number(draft.farm_size.area)} {draft.farm_size.unit}",
            ),
            FieldView(
                name="farmLocation.address",
                label="Farm Location",
                value=draft.farm_location.address,
            ),
            FieldView(
                name="farmLocation.soilType",
                label="Soil Type",
                value=draft.farm_location.soil_type,
            ),
        ],
    )


def render_harvest_planning(draft: HarvestScheduleDraft) -> StepView:
    harvest_date = parse_date(draft.expected_harvest_date)
    return StepView(
        step=WizardStep.HARVEST_PLANNING.value,
        title=WizardStep.HARVEST_PLANNING.title,
        description=FARMER_DATA_NOTE,
        editable=False,
        fields=[
            FieldView(
                name="expectedHarvestDate",
                label="Expected Harvest Date",
                value=harvest_date.isoformat() if harvest_date else "Not specified",
            ),
            FieldView(
                name="harvestDuration",
                label="Harvest Duration (days)",
                value=f"{draft.harvest_duration} days",
            ),
            FieldView(name="harvestMethod", label="Harvest Method", value=draft.harvest_method),
            FieldView(
                name="expectedYield",
                label="Expected Yield",
                value=f"{_number(draft.expected_yield.quantity)} {draft.expected_yield.unit}",
            ),
        ],
    )


def render_resources_timeline(draft: HarvestScheduleDraft) -> StepView:
    labor = draft.labor_required
    phases = [
        PhaseView(
            index=index,
            phase=phase.phase,
            activities=phase.activities,
            activities_text=format_comma_list(phase.activities),
            start_date=phase.start_date,
            start_date_editable=index == 0,
            duration=phase.duration,
            end_date=phase_end_date(phase),
            status=phase.status,
        )
        for index, phase in enumerate(draft.timeline)
    ]
    return StepView(
        step=WizardStep.RESOURCES_TIMELINE.value,
        title=WizardStep.RESOURCES_TIMELINE.title,
        description="Fill in the resources and timeline details. All fields are required.",
        editable=True,
        fields=[
            FieldView(
                name="laborRequired.workers",
                label="Labor Required",
                value=labor.workers,
                input="number",
                read_only=False,
                required=True,
                placeholder="Workers",
            ),
            FieldView(
                name="laborRequired.skills",
                label="Required Skills",
                value=format_comma_list(labor.skills),
                input="comma_list",
                read_only=False,
                required=True,
                placeholder="Required skills (comma separated)",
            ),
            FieldView(
                name="equipment",
                label="Equipment Needed",
                value=list(draft.equipment),
                input="list",
                read_only=False,
                required=True,
                placeholder="Equipment item",
            ),
            FieldView(
                name="transportation",
                label="Transportation",
                value=list(draft.transportation),
                input="list",
                read_only=False,
                placeholder="Transportation item",
            ),
        ],
        phases=phases,
    )


def render_quality_review(draft: HarvestScheduleDraft) -> StepView:
    standards = draft.quality_standards
    storage = draft.storage
    return StepView(
        step=WizardStep.QUALITY_REVIEW.value,
        title=WizardStep.QUALITY_REVIEW.title,
        description="Set the quality standards, then confirm to create the schedule.",
        editable=True,
        fields=[
            FieldView(name="qualityStandards.size", label="Size Requirements",
                      value=standards.size, read_only=False, required=True,
                      placeholder="e.g., Medium to large"),
            FieldView(name="qualityStandards.color", label="Color Standards",
                      value=standards.color, read_only=False, required=True,
                      placeholder="e.g., Red, fully ripe"),
            FieldView(name="qualityStandards.ripeness", label="Ripeness Level",
                      value=standards.ripeness, read_only=False, required=True,
                      placeholder="e.g., 90-95%"),
            FieldView(name="qualityStandards.packaging", label="Packaging Requirements",
                      value=standards.packaging, read_only=False, required=True,
                      placeholder="e.g., 5kg boxes"),
            FieldView(name="storage.type", label="Storage Type",
                      value=storage.type, read_only=False, placeholder="Storage type"),
            FieldView(name="storage.capacity", label="Storage Capacity",
                      value=storage.capacity, read_only=False, placeholder="Capacity"),
            FieldView(name="storage.duration", label="Storage Duration",
                      value=storage.duration, read_only=False, placeholder="Duration"),
        ],
    )


RENDERERS = {
    WizardStep.BASIC_INFO: render_basic_info,
    WizardStep.HARVEST_PLANNING: render_harvest_planning,
    WizardStep.RESOURCES_TIMELINE: render_resources_timeline,
    WizardStep.QUALITY_REVIEW: render_quality_review,
}


def render_step(step: WizardStep, draft: HarvestScheduleDraft) -> StepView:
    return RENDERERS[WizardStep(step)](draft)
