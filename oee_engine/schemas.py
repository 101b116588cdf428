"""
════════════════════════════════════════════════════════════════════════════════
OEE REQUEST SCHEMAS - Pydantic models for raw request payloads
════════════════════════════════════════════════════════════════════════════════

Transports (HTTP, CLI, batch jobs) parse their payloads with these models and
call `to_input()` to get the immutable OeeInput the engine consumes.
Durations travel as seconds.

Schemas:
- TimeModelSchema: planned time, allocations, optional calendar time
- ProductionSummarySchema: counts; missing total/good are inferred
- CycleTimeSchema, DowntimeRecordSchema, ScrapEventSchema
- ThresholdSchema: preset profile plus optional overrides
- OeeInputSchema: the full request
- EconomicParametersSchema: point estimates or explicit bands
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from .assumptions import (
    AnalysisWindow,
    CountModelBuilder,
    CycleTimeModel,
    DowntimeRecord,
    MachineContext,
    MachineState,
    ProductionSummary,
    ProvenanceValue,
    ReasonCode,
    ScrapEvent,
    StartupWindowConfig,
    ThresholdConfiguration,
    ThresholdProfile,
    TimeAllocation,
    TimeModel,
    ValueSource,
)
from .config import Settings
from .models import EconomicParameters, OeeInput


def _seconds(value: float) -> timedelta:
    return timedelta(seconds=value)


def _reason(path: Optional[List[str]]) -> Optional[ReasonCode]:
    return ReasonCode(tuple(path)) if path else None


# ═══════════════════════════════════════════════════════════════════════════════
# TIME / COUNTS / CYCLE
# ═══════════════════════════════════════════════════════════════════════════════

class DurationValueSchema(BaseModel):
    """A duration in seconds with its provenance."""
    seconds: float = Field(..., ge=0, description="Duration in seconds")
    source: ValueSource = ValueSource.EXPLICIT

    def to_value(self) -> ProvenanceValue[timedelta]:
        return ProvenanceValue(_seconds(self.seconds), self.source)


class TimeAllocationSchema(BaseModel):
    state: MachineState
    seconds: float = Field(..., ge=0)
    source: ValueSource = ValueSource.EXPLICIT

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, v):
        return v.lower() if isinstance(v, str) else v

    def to_allocation(self) -> TimeAllocation:
        return TimeAllocation(self.state, _seconds(self.seconds), self.source)


class TimeModelSchema(BaseModel):
    planned_production_time: DurationValueSchema
    allocations: List[TimeAllocationSchema] = Field(default_factory=list)
    all_time: Optional[DurationValueSchema] = None

    def to_model(self) -> TimeModel:
        return TimeModel(
            planned_production_time=self.planned_production_time.to_value(),
            allocations=tuple(a.to_allocation() for a in self.allocations),
            all_time=self.all_time.to_value() if self.all_time else None,
        )


class ProductionSummarySchema(BaseModel):
    total_units: Optional[int] = Field(None, ge=0)
    good_units: Optional[int] = Field(None, ge=0)
    scrap_units: Optional[int] = Field(None, ge=0)
    reworked_units: Optional[int] = Field(None, ge=0)

    def to_summary(self) -> ProductionSummary:
        return (
            CountModelBuilder()
            .total(self.total_units)
            .good(self.good_units)
            .scrap(self.scrap_units)
            .rework(self.reworked_units)
            .build()
        )


class CycleTimeSchema(BaseModel):
    ideal_cycle_time: DurationValueSchema
    average_cycle_time: Optional[DurationValueSchema] = None

    def to_model(self) -> CycleTimeModel:
        return CycleTimeModel(
            ideal_cycle_time=self.ideal_cycle_time.to_value(),
            average_cycle_time=self.average_cycle_time.to_value() if self.average_cycle_time else None,
        )


class DowntimeRecordSchema(BaseModel):
    seconds: float = Field(..., ge=0)
    is_failure: bool = False
    reason: Optional[List[str]] = Field(None, description="Hierarchical reason path")
    source: ValueSource = ValueSource.EXPLICIT

    @field_validator("reason", mode="before")
    @classmethod
    def parse_reason(cls, v):
        """Accept 'Mechanical > Bearing Failure' as well as a list."""
        if isinstance(v, str):
            return list(ReasonCode.parse(v).path)
        return v

    def to_record(self) -> DowntimeRecord:
        return DowntimeRecord(_seconds(self.seconds), self.is_failure, _reason(self.reason), self.source)


# ═══════════════════════════════════════════════════════════════════════════════
# THRESHOLDS / SCRAP EVENTS
# ═══════════════════════════════════════════════════════════════════════════════

class ThresholdSchema(BaseModel):
    """Preset profile; any override turns the configuration into a custom one."""
    profile: Optional[ThresholdProfile] = None
    micro_stoppage_seconds: Optional[float] = Field(None, ge=0)
    small_stop_seconds: Optional[float] = Field(None, ge=0)
    speed_loss_threshold: Optional[float] = Field(None, ge=0, le=1)
    high_scrap_rate_threshold: Optional[float] = Field(None, ge=0, le=1)
    low_utilization_threshold: Optional[float] = Field(None, ge=0, le=1)

    def to_configuration(self) -> ThresholdConfiguration:
        profile = self.profile or Settings.get_config().threshold_profile
        base = ThresholdConfiguration.for_profile(profile)
        overrides = {}
        if self.micro_stoppage_seconds is not None:
            overrides["micro_stoppage_threshold"] = _seconds(self.micro_stoppage_seconds)
        if self.small_stop_seconds is not None:
            overrides["small_stop_threshold"] = _seconds(self.small_stop_seconds)
        for name in ("speed_loss_threshold", "high_scrap_rate_threshold", "low_utilization_threshold"):
            value = getattr(self, name)
            if value is not None:
                overrides[name] = value
        if not overrides:
            return base
        return replace(base, profile=ThresholdProfile.CUSTOM, **overrides)


class ScrapEventSchema(BaseModel):
    timestamp: datetime
    units: int = Field(..., ge=0)
    reason: Optional[List[str]] = None
    notes: Optional[str] = None

    def to_event(self) -> ScrapEvent:
        return ScrapEvent(self.timestamp, self.units, _reason(self.reason), self.notes)


class StartupWindowSchema(BaseModel):
    fixed_seconds: Optional[float] = Field(None, ge=0)
    percentage: Optional[float] = Field(None, ge=0, le=1)
    dynamic_threshold: Optional[float] = Field(None, ge=0)
    dynamic_window_size: Optional[int] = Field(None, ge=1)

    def to_config(self) -> StartupWindowConfig:
        return StartupWindowConfig(
            fixed_duration=_seconds(self.fixed_seconds) if self.fixed_seconds is not None else None,
            percentage=self.percentage,
            dynamic_threshold=self.dynamic_threshold,
            dynamic_window_size=self.dynamic_window_size or Settings.get_config().dynamic_window_size,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# REQUEST
# ═══════════════════════════════════════════════════════════════════════════════

class OeeInputSchema(BaseModel):
    machine_id: str = Field(..., min_length=1)
    machine_name: Optional[str] = None
    line_id: Optional[str] = None
    product_id: Optional[str] = None
    shift_id: Optional[str] = None

    window_start: datetime
    window_end: datetime

    time_model: TimeModelSchema
    production: ProductionSummarySchema
    cycle_time: CycleTimeSchema
    downtimes: List[DowntimeRecordSchema] = Field(default_factory=list)
    thresholds: Optional[ThresholdSchema] = None
    scrap_events: List[ScrapEventSchema] = Field(default_factory=list)
    startup_window: Optional[StartupWindowSchema] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.window_end < self.window_start:
            raise ValueError("window_end must not be before window_start")
        return self

    def to_input(self) -> OeeInput:
        thresholds = (
            self.thresholds.to_configuration()
            if self.thresholds
            else Settings.get_config().thresholds
        )
        return OeeInput(
            machine=MachineContext(
                machine_id=self.machine_id,
                machine_name=self.machine_name,
                line_id=self.line_id,
                product_id=self.product_id,
                shift_id=self.shift_id,
            ),
            window=AnalysisWindow(self.window_start, self.window_end),
            time_model=self.time_model.to_model(),
            production=self.production.to_summary(),
            cycle_time=self.cycle_time.to_model(),
            downtimes=tuple(d.to_record() for d in self.downtimes),
            thresholds=thresholds,
            scrap_events=tuple(e.to_event() for e in self.scrap_events),
            startup_window=self.startup_window.to_config() if self.startup_window else None,
        )


class EconomicParametersSchema(BaseModel):
    """Either point estimates (expanded by the configured spread) or full bands."""
    unit_price: Optional[float] = Field(None, ge=0)
    marginal_contribution: Optional[float] = Field(None, ge=0)
    material_cost: Optional[float] = Field(None, ge=0)
    labor_cost_per_hour: Optional[float] = Field(None, ge=0)
    unit_price_band: Optional[Tuple[float, float, float]] = None
    marginal_contribution_band: Optional[Tuple[float, float, float]] = None
    material_cost_band: Optional[Tuple[float, float, float]] = None
    labor_cost_per_hour_band: Optional[Tuple[float, float, float]] = None
    currency: str = Field("USD", min_length=3, max_length=3)
    spread: Optional[float] = Field(None, ge=0, lt=1)

    @model_validator(mode="after")
    def check_complete(self):
        for name in ("unit_price", "marginal_contribution", "material_cost", "labor_cost_per_hour"):
            if getattr(self, name) is None and getattr(self, f"{name}_band") is None:
                raise ValueError(f"{name} or {name}_band is required")
        return self

    def to_parameters(self) -> EconomicParameters:
        spread = self.spread if self.spread is not None else Settings.get_config().economic_spread

        def band(name: str) -> Tuple[float, float, float]:
            explicit = getattr(self, f"{name}_band")
            if explicit is not None:
                return tuple(explicit)
            value = getattr(self, name)
            return (value * (1.0 - spread), value, value * (1.0 + spread))

        return EconomicParameters(
            unit_price=band("unit_price"),
            marginal_contribution=band("marginal_contribution"),
            material_cost=band("material_cost"),
            labor_cost_per_hour=band("labor_cost_per_hour"),
            currency=self.currency.upper(),
        )
