"""Built-in interval templates for common hangboard/HIIT sessions."""

from __future__ import annotations

from dataclasses import dataclass

from intervaltimer.workout.model import Workout
from intervaltimer.workout.template import TemplateBlock, WorkoutTemplate, instantiate


@dataclass(frozen=True)
class LibraryTemplate:
    key: str
    category: str
    template: WorkoutTemplate
    default_rounds: int = 1

    @property
    def name(self) -> str:
        return self.template.name


TEMPLATES: tuple[LibraryTemplate, ...] = (
    LibraryTemplate(
        key="hangboard_7_3",
        category="Hangboard",
        template=WorkoutTemplate(
            name="Hangboard: 7/3 x 6",
            blocks=(
                TemplateBlock(0, sets=6, reps=1, work_duration_sec=7, rest_between_sets_sec=3, title="Hang"),
            ),
        ),
    ),
    LibraryTemplate(
        key="repeaters_6x7",
        category="Hangboard",
        template=WorkoutTemplate(
            name="Repeaters 6 x 7/3",
            notes="Six hangs per set, three minutes between sets.",
            blocks=(
                TemplateBlock(
                    0,
                    sets=3,
                    reps=6,
                    work_duration_sec=7,
                    rest_between_reps_sec=3,
                    rest_between_sets_sec=180,
                    title="Hang",
                ),
            ),
        ),
    ),
    LibraryTemplate(
        key="tabata",
        category="HIIT",
        template=WorkoutTemplate(
            name="Tabata",
            blocks=(
                TemplateBlock(0, sets=1, reps=8, work_duration_sec=20, rest_between_reps_sec=10),
            ),
        ),
    ),
    LibraryTemplate(
        key="emom_10",
        category="HIIT",
        template=WorkoutTemplate(
            name="EMOM 10",
            blocks=(TemplateBlock(0, sets=1, reps=10, work_duration_sec=60, title="Minute"),),
        ),
    ),
    LibraryTemplate(
        key="pyramid_30_60",
        category="HIIT",
        template=WorkoutTemplate(
            name="Pyramid 30/45/60",
            blocks=(
                TemplateBlock(0, sets=2, reps=1, work_duration_sec=30, rest_between_sets_sec=15, title="Short"),
                TemplateBlock(1, sets=2, reps=1, work_duration_sec=45, rest_between_sets_sec=20, title="Medium"),
                TemplateBlock(2, sets=2, reps=1, work_duration_sec=60, rest_between_sets_sec=30, title="Long"),
            ),
        ),
        default_rounds=2,
    ),
)


def list_templates() -> tuple[LibraryTemplate, ...]:
    return TEMPLATES


def get_template(template_key: str) -> LibraryTemplate:
    item = next((item for item in TEMPLATES if item.key == template_key), None)
    if item is None:
        raise ValueError(f"Unknown workout template '{template_key}'")
    return item


def build_workout_from_template(template_key: str, rounds: int | None = None) -> Workout:
    item = get_template(template_key)
    return instantiate(item.template, rounds=rounds if rounds is not None else item.default_rounds)
