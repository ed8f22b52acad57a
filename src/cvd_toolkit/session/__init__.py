"""
Screening Session Package

Trial sequencing, scoring and severity estimation for one screening pass,
plus the level-progression staircase test and its type/severity diagnosis.

Example:
    >>> from cvd_toolkit.session import SessionConfig, build_session
    >>> session = build_session(SessionConfig.for_mode(SessionMode.BASELINE, "abc"))
    >>> plate = session.start()
"""

from .config import MODE_DEFAULTS, SessionConfig
from .controller import PreparedSession, build_session
from .diagnosis import diagnose_axes
from .scoring import score_responses
from .sequencer import Progress, SequencerState, TrialSequencer, evaluate_response
from .severity import estimate_severity
from .staircase import StaircaseSequencer, axis_score

__all__ = [
    "MODE_DEFAULTS",
    "SessionConfig",
    "PreparedSession",
    "build_session",
    "score_responses",
    "Progress",
    "SequencerState",
    "TrialSequencer",
    "evaluate_response",
    "estimate_severity",
    "diagnose_axes",
    "StaircaseSequencer",
    "axis_score",
]
