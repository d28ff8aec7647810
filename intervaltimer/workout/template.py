"""Workout templates and their expansion into flat segment lists."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from intervaltimer.workout.model import Segment, SegmentKind, Workout, new_id

DEFAULT_WORK_TITLE = "Work"
REP_REST_TITLE = "Rest"
SET_REST_TITLE = "Set Rest"


@dataclass(frozen=True)
class TemplateBlock:
    order: int
    sets: int = 1
    reps: int = 1
    work_duration_sec: float = 0.0
    rest_between_reps_sec: float = 0.0
    rest_between_sets_sec: float = 0.0
    title: str | None = None
    id: str = field(default_factory=new_id)
    template_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sets", max(1, int(self.sets)))
        object.__setattr__(self, "reps", max(1, int(self.reps)))
        for name in ("work_duration_sec", "rest_between_reps_sec", "rest_between_sets_sec"):
            object.__setattr__(self, name, max(0.0, float(getattr(self, name))))


@dataclass(frozen=True)
class WorkoutTemplate:
    name: str
    blocks: tuple[TemplateBlock, ...] = ()
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "blocks",
            tuple(
                block if block.template_id == self.id else replace(block, template_id=self.id)
                for block in self.blocks
            ),
        )

    def ordered_blocks(self) -> tuple[TemplateBlock, ...]:
        return tuple(sorted(self.blocks, key=lambda block: block.order))

    def add_block(
        self,
        sets: int = 3,
        reps: int = 5,
        work_duration_sec: float = 7.0,
        rest_between_reps_sec: float = 3.0,
        rest_between_sets_sec: float = 30.0,
        title: str | None = None,
        *,
        at: int | None = None,
    ) -> WorkoutTemplate:
        """Insert a block (appends when ``at`` is None) and renumber orders.

        Untitled blocks are named after their position, e.g. "Block 2".
        """
        blocks = list(self.ordered_blocks())
        position = len(blocks) if at is None else max(0, min(at, len(blocks)))
        block = TemplateBlock(
            order=position,
            sets=sets,
            reps=reps,
            work_duration_sec=work_duration_sec,
            rest_between_reps_sec=rest_between_reps_sec,
            rest_between_sets_sec=rest_between_sets_sec,
            title=title if title is not None else f"Block {len(blocks) + 1}",
        )
        blocks.insert(position, block)
        return self._with_blocks(blocks)

    def remove_block(self, block_id: str) -> WorkoutTemplate:
        blocks = [block for block in self.ordered_blocks() if block.id != block_id]
        if len(blocks) == len(self.blocks):
            raise ValueError(f"Unknown block '{block_id}'")
        return self._with_blocks(blocks)

    def move_block(self, source: int, destination: int) -> WorkoutTemplate:
        blocks = list(self.ordered_blocks())
        if not 0 <= source < len(blocks):
            raise ValueError(f"Block position {source} out of range")
        moved = blocks.pop(source)
        blocks.insert(max(0, min(destination, len(blocks))), moved)
        return self._with_blocks(blocks)

    def _with_blocks(self, blocks: list[TemplateBlock]) -> WorkoutTemplate:
        renumbered = tuple(replace(block, order=index) for index, block in enumerate(blocks))
        return replace(self, blocks=renumbered)


def expand_blocks(blocks: tuple[TemplateBlock, ...] | list[TemplateBlock]) -> list[Segment]:
    """Flatten blocks into one round of segments.

    Blocks run in ``order`` (stable for ties). Each set is ``reps`` work
    segments separated by rep rests, and sets are separated by set rests.
    Rests of zero length are dropped, never emitted as empty segments.
    Segment orders come out contiguous from 0.
    """
    segments: list[Segment] = []

    def emit(kind: SegmentKind, duration_sec: float, title: str) -> None:
        segments.append(
            Segment(order=len(segments), kind=kind, duration_sec=duration_sec, title=title)
        )

    for block in sorted(blocks, key=lambda item: item.order):
        title = block.title or DEFAULT_WORK_TITLE
        for set_index in range(block.sets):
            for rep_index in range(block.reps):
                emit(SegmentKind.WORK, block.work_duration_sec, title)
                if rep_index < block.reps - 1 and block.rest_between_reps_sec > 0:
                    emit(SegmentKind.REST, block.rest_between_reps_sec, REP_REST_TITLE)
            if set_index < block.sets - 1 and block.rest_between_sets_sec > 0:
                emit(SegmentKind.REST, block.rest_between_sets_sec, SET_REST_TITLE)
    return segments


def instantiate(template: WorkoutTemplate, rounds: int = 1) -> Workout:
    """Build a concrete workout from ``template``.

    The segments describe a single round; repetition is left to playback
    through ``total_rounds``.
    """
    return Workout(
        name=template.name,
        notes=template.notes,
        segments=tuple(expand_blocks(template.blocks)),
        total_rounds=rounds,
    )
