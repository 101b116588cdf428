"""
OEE calculation orchestrator.

    validate → core metrics → extended metrics → temporal scrap (optional)
             → loss tree → leverage → ledger → [economics]

A Fatal validation issue raises ValidationFailedError before any metric is
computed. Warnings and infos end up in the ledger.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..assumptions import ProvenanceValue, StartupWindowConfig
from ..config import EngineSettings, Settings
from ..domain import (
    calculate_core_metrics,
    calculate_economic_analysis,
    calculate_extended_metrics,
    build_loss_tree,
)
from ..ledger import build_ledger
from ..models import EconomicParameters, OeeInput
from ..validation import validate_input
from .errors import CalculationError, InvalidInputError, ValidationFailedError
from .leverage import analyze_leverage
from .result import EngineResult
from .temporal_scrap import TemporalScrapData, analyze_temporal_scrap

logger = logging.getLogger(__name__)


class OeeCalculator:
    """Runs the full pipeline for one machine input."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or Settings.get_config()

    def calculate(
        self, inp: OeeInput, economic_params: Optional[EconomicParameters] = None
    ) -> EngineResult:
        machine_id = inp.machine.machine_id
        logger.debug(
            f"Calculating OEE for {machine_id}: running={inp.time_model.running_seconds:.0f}s "
            f"planned={inp.time_model.planned_seconds:.0f}s"
        )

        if economic_params is not None:
            bad_bands = economic_params.band_errors()
            if bad_bands:
                raise InvalidInputError("engine.error.invalid_economic_band", {"fields": bad_bands})

        validation = validate_input(inp)
        if validation.has_fatal_errors():
            logger.warning(
                f"Validation failed for {machine_id}: "
                f"{[i.code for i in validation.fatal_errors()]}"
            )
            raise ValidationFailedError(validation)

        try:
            core = calculate_core_metrics(inp)
            extended = calculate_extended_metrics(inp, core)

            temporal = None
            startup_assumption = None
            if inp.has_temporal_scrap:
                config = inp.startup_window or StartupWindowConfig.default()
                temporal = analyze_temporal_scrap(
                    TemporalScrapData(inp.scrap_events, inp.window),
                    config,
                    inp.cycle_time.ideal,
                )
                startup_assumption = (
                    ProvenanceValue.explicit(temporal.startup_window_duration)
                    if inp.startup_window is not None
                    else ProvenanceValue.default(temporal.startup_window_duration)
                )

            loss_tree = build_loss_tree(
                inp, temporal.startup_scrap if temporal is not None else None
            )
            leverage = analyze_leverage(inp, core)
            ledger = build_ledger(inp, validation, startup_window=startup_assumption)

            economics = None
            if economic_params is not None:
                economics = calculate_economic_analysis(
                    inp, economic_params, self.settings.rework_hours_per_unit
                )
        except (ArithmeticError, ValueError) as exc:
            logger.error(f"Calculation failed for {machine_id}: {exc}")
            raise CalculationError("engine.error.calculation_failed", {"reason": str(exc)}) from exc

        logger.info(
            f"OEE {machine_id}: {core.oee.value:.4f} "
            f"(A={core.availability.value:.4f} P={core.performance.value:.4f} "
            f"Q={core.quality.value:.4f}, confidence={core.oee.confidence.value})"
        )
        return EngineResult(
            machine=inp.machine,
            core=core,
            extended=extended,
            loss_tree=loss_tree,
            ledger=ledger,
            validation=validation,
            leverage=tuple(leverage),
            economics=economics,
            temporal_scrap=temporal,
        )


def calculate(inp: OeeInput) -> EngineResult:
    """Validate and compute every metric for one machine."""
    return OeeCalculator().calculate(inp)


def calculate_with_economics(inp: OeeInput, economic_params: EconomicParameters) -> EngineResult:
    """Like `calculate`, with the economic impact of the losses attached."""
    return OeeCalculator().calculate(inp, economic_params)
