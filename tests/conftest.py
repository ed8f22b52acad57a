import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import cvd_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from cvd_toolkit.core.models import Click, Plate, Response  # noqa: E402
from cvd_toolkit.generation import PlateGenerator  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def correct_response(plate: Plate, response_time_ms: float = 1000.0) -> Response:
    """The right answer for any plate kind."""
    bounds = plate.target.bounds
    if bounds is not None:
        return Response(
            click=Click(
                x=bounds.col + 1.5,
                y=bounds.row + 1.5,
                width=plate.grid_size,
                height=plate.grid_size,
            ),
            response_time_ms=response_time_ms,
        )
    return Response(answer=plate.target.value, response_time_ms=response_time_ms)


def wrong_response(plate: Plate, response_time_ms: float = 1000.0) -> Response:
    """A definitely-wrong, non-skip answer."""
    if plate.target.bounds is not None:
        return Response(
            click=Click(x=0.5, y=0.5, width=plate.grid_size, height=plate.grid_size),
            response_time_ms=response_time_ms,
        )
    return Response(answer="wrong", response_time_ms=response_time_ms)


# Common test fixtures
@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def generator() -> PlateGenerator:
    return PlateGenerator()


@pytest.fixture
def answer_correctly():
    return correct_response


@pytest.fixture
def answer_wrongly():
    return wrong_response
