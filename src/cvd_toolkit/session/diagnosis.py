"""
Module: session.diagnosis

Purpose:
    Deficiency type and severity from the three staircase axis scores.
    Protan and deutan observers both fail the red-green axis; they are
    told apart by which purple axis is weaker.

Key Functions:
    - diagnose_axes(scores): AxisDiagnosis from axis percentages

Used By:
    - session.staircase
"""

from __future__ import annotations

import logging
from typing import Mapping

from cvd_toolkit.core.models import (
    AXIS_ORDER,
    AxisDiagnosis,
    ConfusionAxis,
    DeficiencySeverity,
    DeficiencyType,
)

logger = logging.getLogger(__name__)

DESCRIPTIONS: Mapping[DeficiencyType, str] = {
    DeficiencyType.NORMAL: "Normal color vision detected. No significant red-green deficiency found.",
    DeficiencyType.DEUTAN: "Deutan type color vision deficiency detected (difficulty with green perception).",
    DeficiencyType.PROTAN: "Protan type color vision deficiency detected (difficulty with red perception).",
}


def is_normal(red_green: int, purple_blue: int, purple_green: int) -> bool:
    """Above 80 on red-green, or exactly 80 with both purple axes strong."""
    if red_green > 80:
        return True
    return red_green == 80 and purple_blue > 75 and purple_green > 80


def severity_for(red_green: int, purple_blue: int, purple_green: int) -> DeficiencySeverity:
    """
    Severity bucket for a non-normal result.

    Below 25 on red-green is severe when a purple axis is also below 40,
    moderate otherwise; 25-59 moderate; 60-79 mild; 80 and above very mild.
    """
    if red_green < 25:
        if purple_blue < 40 or purple_green < 40:
            return DeficiencySeverity.SEVERE
        return DeficiencySeverity.MODERATE
    if red_green < 60:
        return DeficiencySeverity.MODERATE
    if red_green < 80:
        return DeficiencySeverity.MILD
    return DeficiencySeverity.VERY_MILD


def diagnose_axes(scores: Mapping[ConfusionAxis, int]) -> AxisDiagnosis:
    """
    Diagnose from axis percentages; missing axes count as 0.

    Example:
        >>> diagnose_axes({ConfusionAxis.RED_GREEN: 30,
        ...                ConfusionAxis.PURPLE_BLUE: 70,
        ...                ConfusionAxis.PURPLE_GREEN: 20}).type
        <DeficiencyType.DEUTAN: 'deutan'>
    """
    full = {axis: int(scores.get(axis, 0)) for axis in AXIS_ORDER}
    rg = full[ConfusionAxis.RED_GREEN]
    pb = full[ConfusionAxis.PURPLE_BLUE]
    pg = full[ConfusionAxis.PURPLE_GREEN]

    if is_normal(rg, pb, pg):
        kind = DeficiencyType.NORMAL
        severity = DeficiencySeverity.NONE
    else:
        kind = DeficiencyType.DEUTAN if pg < pb else DeficiencyType.PROTAN
        severity = severity_for(rg, pb, pg)

    logger.debug(f"Axis diagnosis rg={rg} pb={pb} pg={pg}: {kind.value}/{severity.value}")
    return AxisDiagnosis(
        type=kind,
        severity=severity,
        description=DESCRIPTIONS[kind],
        scores=full,
    )
