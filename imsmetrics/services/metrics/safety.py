from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from imsmetrics.domain.enums import RagStatus
from imsmetrics.services.numeric import finite_or, round_half_up, round_to


# Exposure bases: per million hours (ILO) and per 200,000 hours (OSHA, 100 FTE-years).
LTIFR_MULTIPLIER = 1_000_000
TRIR_MULTIPLIER = 200_000
SEVERITY_RATE_MULTIPLIER = 1_000_000
NEAR_MISS_RATE_MULTIPLIER = 200_000
FIRST_AID_RATE_MULTIPLIER = 200_000

# Heinrich's triangle: 1 major injury : 29 minor injuries : 300 near misses.
HEINRICH_MINOR_RATIO = 29
HEINRICH_NEAR_MISS_RATIO = 300

RAG_GREEN_MAX_RATIO = 0.75
RAG_AMBER_MAX_RATIO = 1.25


@dataclass(frozen=True)
class SafetyCounters:
    hours_worked: float = 0
    lost_time_injuries: int = 0
    total_recordable_injuries: int = 0
    days_lost: int = 0
    near_misses: int = 0
    first_aid_cases: int = 0


@dataclass(frozen=True)
class SafetyRates:
    ltifr: float
    trir: float
    severity_rate: float
    near_miss_rate: float
    first_aid_rate: float


@dataclass(frozen=True)
class SafetyYearToDate:
    counters: SafetyCounters
    rates: SafetyRates


@dataclass(frozen=True)
class IncidentPyramid:
    major_injuries: int
    minor_injuries: int
    near_misses: int


def _rate(count: float, multiplier: int, hours_worked: float) -> float:
    # No exposure hours means no defined rate; report zero rather than inf/NaN.
    if hours_worked <= 0:
        return 0.0
    return round_to(finite_or(count * multiplier / hours_worked), 2)


def ltifr(lost_time_injuries: float, hours_worked: float) -> float:
    return _rate(lost_time_injuries, LTIFR_MULTIPLIER, hours_worked)


def trir(total_recordable_injuries: float, hours_worked: float) -> float:
    return _rate(total_recordable_injuries, TRIR_MULTIPLIER, hours_worked)


def severity_rate(days_lost: float, hours_worked: float) -> float:
    return _rate(days_lost, SEVERITY_RATE_MULTIPLIER, hours_worked)


def near_miss_rate(near_misses: float, hours_worked: float) -> float:
    return _rate(near_misses, NEAR_MISS_RATE_MULTIPLIER, hours_worked)


def first_aid_rate(first_aid_cases: float, hours_worked: float) -> float:
    return _rate(first_aid_cases, FIRST_AID_RATE_MULTIPLIER, hours_worked)


def calculate_safety_rates(counters: SafetyCounters) -> SafetyRates:
    hours = counters.hours_worked
    return SafetyRates(
        ltifr=ltifr(counters.lost_time_injuries, hours),
        trir=trir(counters.total_recordable_injuries, hours),
        severity_rate=severity_rate(counters.days_lost, hours),
        near_miss_rate=near_miss_rate(counters.near_misses, hours),
        first_aid_rate=first_aid_rate(counters.first_aid_cases, hours),
    )


def counters_from(row: Any) -> SafetyCounters:
    # Accept ORM rows or any object exposing the counter attributes.
    return SafetyCounters(
        hours_worked=float(getattr(row, "hours_worked", 0) or 0),
        lost_time_injuries=int(getattr(row, "lost_time_injuries", 0) or 0),
        total_recordable_injuries=int(getattr(row, "total_recordable_injuries", 0) or 0),
        days_lost=int(getattr(row, "days_lost", 0) or 0),
        near_misses=int(getattr(row, "near_misses", 0) or 0),
        first_aid_cases=int(getattr(row, "first_aid_cases", 0) or 0),
    )


def rollup_safety_counters(periods: Iterable[Any]) -> SafetyCounters:
    # Sum raw counters; averaging monthly rates would weight short months wrongly.
    hours = 0.0
    lost_time = 0
    recordable = 0
    days_lost = 0
    near_misses = 0
    first_aid = 0
    for period in periods:
        counters = counters_from(period)
        hours += counters.hours_worked
        lost_time += counters.lost_time_injuries
        recordable += counters.total_recordable_injuries
        days_lost += counters.days_lost
        near_misses += counters.near_misses
        first_aid += counters.first_aid_cases
    return SafetyCounters(
        hours_worked=hours,
        lost_time_injuries=lost_time,
        total_recordable_injuries=recordable,
        days_lost=days_lost,
        near_misses=near_misses,
        first_aid_cases=first_aid,
    )


def year_to_date_safety(periods: Iterable[Any]) -> SafetyYearToDate:
    counters = rollup_safety_counters(periods)
    return SafetyYearToDate(counters=counters, rates=calculate_safety_rates(counters))


def rate_change_pct(current: float, previous: float) -> int:
    # Year-over-year change; a zero baseline has no meaningful percentage.
    if previous <= 0:
        return 0
    return round_half_up(finite_or((current - previous) / previous * 100))


def predict_incident_pyramid(major_injuries: int) -> IncidentPyramid:
    return IncidentPyramid(
        major_injuries=major_injuries,
        minor_injuries=major_injuries * HEINRICH_MINOR_RATIO,
        near_misses=major_injuries * HEINRICH_NEAR_MISS_RATIO,
    )


def safety_rag_status(value: float, industry_benchmark: float) -> RagStatus:
    # Rate-to-benchmark ratio banding; lower rates are better.
    if industry_benchmark <= 0:
        return RagStatus.GREEN if value <= 0 else RagStatus.RED
    ratio = value / industry_benchmark
    if ratio <= RAG_GREEN_MAX_RATIO:
        return RagStatus.GREEN
    if ratio <= RAG_AMBER_MAX_RATIO:
        return RagStatus.AMBER
    return RagStatus.RED
