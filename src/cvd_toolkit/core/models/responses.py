"""
Module: responses

Purpose:
    Human response input and the append-only ResponseRecord that the
    sequencer stores for each trial.

Key Classes:
    - Click: Pixel coordinates on the rendered plate
    - Response: One answer from the subject
    - ResponseRecord: Scored trial outcome

Used By:
    - session.sequencer
    - session.scoring
    - tuning.tuner
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import InvalidArgumentError
from .plates import Category, Difficulty

NO_ANSWER = "none"


@dataclass(frozen=True, slots=True)
class Click:
    """
    A click/tap on the rendered plate.

    Attributes:
        x, y: Pixel coordinates relative to the plate's top-left corner
        width, height: Rendered plate size in pixels
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidArgumentError(
                f"Click surface must have positive size: {self.width}x{self.height}"
            )

    def to_cell(self, grid_size: int) -> tuple[int, int]:
        """Map to (row, col) on a grid_size x grid_size plate."""
        col = math.floor(self.x / (self.width / grid_size))
        row = math.floor(self.y / (self.height / grid_size))
        return row, col


@dataclass(frozen=True, slots=True)
class Response:
    """
    A subject's answer to the current plate.

    Either ``answer`` (symbolic plates) or ``click`` (outlier plates) is
    set. A missing answer or the literal "none" is scored as a skip.
    Non-string answers are stored as their str() form.

    Attributes:
        answer: Typed/selected answer
        click: Click position for spatial plates
        response_time_ms: Measured by the caller; when None the sequencer
            measures it with its own clock

    Raises:
        InvalidArgumentError: If response_time_ms is negative or not a number
    """

    answer: Optional[str] = None
    click: Optional[Click] = None
    response_time_ms: Optional[float] = None

    def __post_init__(self) -> None:
        # Keypad input may arrive as a number
        if self.answer is not None and not isinstance(self.answer, str):
            object.__setattr__(self, "answer", str(self.answer))
        if self.response_time_ms is not None:
            if not isinstance(self.response_time_ms, (int, float)) or isinstance(self.response_time_ms, bool):
                raise InvalidArgumentError(f"response_time_ms must be a number: {self.response_time_ms!r}")
            if math.isnan(self.response_time_ms) or self.response_time_ms < 0:
                raise InvalidArgumentError(f"response_time_ms must be non-negative: {self.response_time_ms}")

    @property
    def is_skip(self) -> bool:
        if self.click is not None:
            return False
        return self.answer is None or self.answer.strip().lower() in ("", NO_ANSWER)

    @property
    def display_value(self) -> Optional[str]:
        if self.click is not None:
            return f"{self.click.x:g},{self.click.y:g}"
        return self.answer


@dataclass(frozen=True, slots=True)
class ResponseRecord:
    """
    Scored outcome of one trial (append-only).

    Attributes:
        trial_index: Position in the session
        category: Plate category
        difficulty: Plate difficulty
        target_value: Correct answer
        user_response: What the subject answered (None for skip/timeout)
        is_correct: Scoring outcome
        response_time_ms: Time from presentation to response
        skipped: Subject chose "can't see it"
        timed_out: No response before the caller's deadline
        plate_seed: Seed of the plate
        palette_name: Palette the plate used
    """

    trial_index: int
    category: Category
    difficulty: Difficulty
    target_value: str
    user_response: Optional[str]
    is_correct: bool
    response_time_ms: float
    skipped: bool = False
    timed_out: bool = False
    plate_seed: Union[int, str, None] = None
    palette_name: Optional[str] = None

    @property
    def is_answered(self) -> bool:
        return not (self.skipped or self.timed_out)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trial_index": self.trial_index,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "target_value": self.target_value,
            "user_response": self.user_response,
            "is_correct": self.is_correct,
            "response_time_ms": self.response_time_ms,
            "skipped": self.skipped,
            "timed_out": self.timed_out,
            "plate_seed": self.plate_seed,
            "palette_name": self.palette_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResponseRecord:
        return cls(
            trial_index=data["trial_index"],
            category=Category(data["category"]),
            difficulty=Difficulty(data["difficulty"]),
            target_value=data["target_value"],
            user_response=data.get("user_response"),
            is_correct=data["is_correct"],
            response_time_ms=data["response_time_ms"],
            skipped=data.get("skipped", False),
            timed_out=data.get("timed_out", False),
            plate_seed=data.get("plate_seed"),
            palette_name=data.get("palette_name"),
        )
