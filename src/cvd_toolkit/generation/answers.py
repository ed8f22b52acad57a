"""
Multiple-choice answer options for symbolic plates.

The correct value is shuffled in with three distinct distractors of the
same kind (all four shapes for shape plates) and followed by the "none"
option. Outlier plates are answered spatially and have no options.
"""

from __future__ import annotations

from typing import Tuple

from cvd_toolkit.core.models import Plate, TargetKind
from cvd_toolkit.core.models.responses import NO_ANSWER
from cvd_toolkit.core.utils.seeded_random import SeededRandom

from .patterns import SHAPES, values_for

DISTRACTOR_COUNT = 3


def answer_options(plate: Plate, rng: SeededRandom) -> Tuple[str, ...]:
    """
    Options to show for ``plate``, ending with ``"none"``.

    Example:
        >>> opts = answer_options(plate, SeededRandom("ui"))
        >>> plate.target.value in opts and opts[-1] == "none"
        True
    """
    target = plate.target
    if target.kind is TargetKind.OUTLIER:
        return ()
    if target.kind is TargetKind.SHAPE:
        options = rng.shuffle(SHAPES)
    else:
        others = [v for v in values_for(target.kind) if v != target.value]
        distractors = rng.shuffle(others)[:DISTRACTOR_COUNT]
        options = rng.shuffle([target.value, *distractors])
    return (*options, NO_ANSWER)
