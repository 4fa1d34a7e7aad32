"""Diagnostic breakdown of a calculation for administrators.

This is a parallel, display-only computation. It spreads the percentage of a
zero-consumption category proportionally over the voluntary categories that do
have consumption, whereas the splitters move that money into the involuntary
bucket. The two views may therefore disagree; the splitters are authoritative.
"""

from decimal import Decimal
from typing import Any, Mapping

from pydantic import TypeAdapter

from condosplit.services.allocation_service import ZERO, quantize_cent
from condosplit.services.split_service import SplitResult
from condosplit.services.split_settings import PercentageModel, SplitSettings
from condosplit.services.split_types import Fuel

SUM_TOLERANCE = Decimal("0.1")

REPORT_ADAPTER = TypeAdapter(dict[str, Any])


def categories_for(fuel: Fuel) -> tuple[str, ...]:
    if fuel == Fuel.GAS:
        return ("heating", "hot_water")
    return ("heating", "cooling", "hot_water", "cold_water")


def explain_redistribution(
    model: PercentageModel,
    totals: Mapping[str, Decimal],
    cost_to_distribute: Decimal = ZERO,
) -> dict:
    """Proportional redistribution of zero-consumption percentages.

    Args:
        model: Seasonal percentage model of the fuel
        totals: Total consumption per voluntary category
        cost_to_distribute: Amount the percentages apply to (for indicative costs)

    Returns:
        Dict with per-category original/adjusted percentages, indicative cost,
        the redistribution summary and the percentage sum check. Values are
        left as Decimal and enums; build_debug_report makes them JSON-ready.
    """
    categories = categories_for(model.fuel)

    pct_to_redistribute = Decimal(0)
    active_pct_sum = Decimal(0)
    zero_categories = []
    for name in categories:
        pct = getattr(model, name)
        total = totals.get(name, Decimal(0))
        if total == 0 and pct > 0:
            pct_to_redistribute += pct
            zero_categories.append(name)
        elif total > 0:
            active_pct_sum += pct

    breakdown = {}
    adjusted_sum = Decimal(0)
    for name in categories:
        pct = getattr(model, name)
        total = totals.get(name, Decimal(0))
        if total > 0 and active_pct_sum > 0:
            adjusted = pct + pct_to_redistribute * pct / active_pct_sum
        elif total > 0:
            adjusted = pct
        else:
            adjusted = Decimal(0)
        adjusted_sum += adjusted
        breakdown[name] = {
            "original_pct": pct,
            "adjusted_pct": quantize_cent(adjusted),
            "total_consumption": total,
            "cost": quantize_cent(cost_to_distribute * adjusted / 100),
            "has_consumption": total > 0,
        }

    sum_percentages = model.involuntary + adjusted_sum
    if pct_to_redistribute > 0:
        note = (
            f"{pct_to_redistribute}% of zero-consumption categories spread "
            f"proportionally over the other voluntary categories"
        )
    else:
        note = "No redistribution needed"

    return {
        "fuel": model.fuel,
        "season": model.season,
        "involuntary_pct": model.involuntary,
        "categories": breakdown,
        "redistribution": {
            "active": pct_to_redistribute > 0,
            "pct_redistributed": pct_to_redistribute,
            "zero_consumption_categories": zero_categories,
            "note": note,
        },
        "verification": {
            "sum_percentages": quantize_cent(sum_percentages),
            "should_be_100": abs(sum_percentages - 100) < SUM_TOLERANCE,
        },
    }


def build_debug_report(result: SplitResult, settings: SplitSettings) -> dict:
    """Administrator view of a finished calculation.

    Reads the deductions and consumption totals from the result's trace, so the
    fuel sections only appear for the fuels that were actually split. The
    returned dict is JSON-ready.
    """
    trace = result.trace
    stages = trace.stages()
    staircase_units = [u.unit.id for u in result.units if u.unit.has_staircase_lights and u.unit.is_inhabited]

    report = {
        "period": {
            "date_from": result.date_from,
            "date_to": result.date_to,
            "months": result.months,
            "season": result.season,
        },
        "bills": {
            "gas": result.total_gas_cost,
            "electricity": result.total_elec_cost,
        },
        "settings": settings,
        "fixed_costs": {
            "gas": {
                "common_areas_monthly": settings.common_areas_gas_monthly,
                "common_areas_total": result.common_areas_gas,
            },
            "electricity": {
                "common_areas_monthly": settings.common_areas_elec_monthly,
                "common_areas_total": result.common_areas_elec,
                "staircase_lights_per_unit_monthly": settings.staircase_lights_monthly,
                "num_units_with_lights": len(staircase_units),
            },
        },
        "gas": None,
        "electricity": None,
        "units": result.units,
        "verification": result.verification,
        "warnings": list(trace.warnings),
    }

    if "gas.buckets" in stages:
        buckets = trace.get("gas.buckets")
        report["gas"] = explain_redistribution(
            settings.gas_percentages(result.season),
            {"heating": buckets["total_heating"], "hot_water": buckets["total_hot_water"]},
            trace.get("gas.deductions")["cost_to_distribute"],
        )
        report["gas"]["engine_redistributed"] = list(buckets["redistributed"])

    if "electricity.buckets" in stages:
        buckets = trace.get("electricity.buckets")
        deductions = trace.get("electricity.deductions")
        report["electricity"] = explain_redistribution(
            settings.electricity_percentages(result.season),
            buckets["totals"],
            deductions["cost_to_distribute"],
        )
        report["electricity"]["engine_redistributed"] = list(buckets["redistributed"])
        report["fixed_costs"]["electricity"]["staircase_lights_total"] = deductions["staircase_total"]
        report["fixed_costs"]["electricity"]["commercial_water_total"] = deductions["commercial_water_total"]

    return REPORT_ADAPTER.dump_python(report, mode="json")
