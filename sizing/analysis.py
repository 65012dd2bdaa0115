from typing import List, Optional

from core.models import (
    Analysis,
    CalculationInput,
    CalculationResult,
    EconomicAnalysis,
    Recommendation,
    RecommendationTier,
    SafetyAnalysis,
)

# Flat reference price (USD/m) the savings estimate compares against
REFERENCE_COST_PER_METER = 5.0
# Energy tariff (USD/kWh) for the annual loss estimate, continuous operation assumed
ENERGY_PRICE_PER_KWH = 0.10
HOURS_PER_YEAR = 8760

APPROACHING_LIMIT_RATIO = 0.8
HIGH_CURRENT_AMPS = 100
LARGE_CABLE_MM2 = 95

HIGH_AMBIENT_TEMP_C = 45
LONG_RUN_METERS = 200
MAX_PLAUSIBLE_METERS = 10000
LOW_POWER_FACTOR = 0.85
HIGH_THREE_PHASE_KW = 50
OPTIMAL_CABLE_MM2 = 2.5
HIGH_POWER_LOSS_W = 1000
MIN_SAFETY_FACTOR = 1.5
LOW_VOLTAGE_DROP_PCT = 1.0


def calculate_savings(total_cost: float, distance: float) -> float:
    return max(0.0, distance * REFERENCE_COST_PER_METER - total_cost)


def calculate_roi(savings: float, total_cost: float) -> float:
    return (savings / total_cost) * 100 if total_cost > 0 else 0.0


def calculate_payback(total_cost: float, annual_loss_cost: float) -> Optional[float]:
    return total_cost / annual_loss_cost if annual_loss_cost > 0 else None


def build_economic_analysis(result: CalculationResult, data: CalculationInput) -> EconomicAnalysis:
    savings = calculate_savings(result.total_cost, data.distance)
    annual_kwh = result.power_loss * HOURS_PER_YEAR / 1000
    annual_cost = annual_kwh * ENERGY_PRICE_PER_KWH
    return EconomicAnalysis(
        cost_per_meter=result.price_per_meter,
        total_cost=result.total_cost,
        savings=savings,
        roi=calculate_roi(savings, result.total_cost),
        annual_loss_kwh=annual_kwh,
        annual_loss_cost=annual_cost,
        cost_breakdown=(
            f"Distance: {data.distance:g}m × ${result.price_per_meter:.2f}/m = ${result.total_cost:.2f}"
        ),
        payback_years=calculate_payback(result.total_cost, annual_cost),
    )


def safety_recommendations(result: CalculationResult, data: CalculationInput) -> List[Recommendation]:
    """
    Rule cascade. Every matching rule is emitted, in this order:
    voltage drop band (exceeded / approaching / ok), high current, large cable, oversize fallback.
    """
    recs = []
    vd = result.voltage_drop
    limit = data.voltage_drop_limit

    if vd > limit:
        recs.append(Recommendation(RecommendationTier.WARNING, "Voltage drop exceeds limit - consider larger cable size"))
        recs.append(Recommendation(RecommendationTier.WARNING, "Check installation method and ambient temperature"))
        recs.append(Recommendation(RecommendationTier.WARNING, "Consider reducing cable length if possible"))
    elif vd > limit * APPROACHING_LIMIT_RATIO:
        recs.append(Recommendation(RecommendationTier.WARNING, "Voltage drop approaching limit - monitor closely"))
        recs.append(Recommendation(RecommendationTier.WARNING, "Consider future load increases"))
    else:
        recs.append(Recommendation(RecommendationTier.SUCCESS, "Voltage drop within safe limits"))
        recs.append(Recommendation(RecommendationTier.SUCCESS, "Good design for current requirements"))

    if result.current > HIGH_CURRENT_AMPS:
        recs.append(Recommendation(RecommendationTier.INFO, "High current application - ensure proper protection"))

    if result.cable.size >= LARGE_CABLE_MM2:
        recs.append(Recommendation(RecommendationTier.INFO, "Large cable size - consider installation method"))

    if result.oversize_fallback:
        recs.append(Recommendation(
            RecommendationTier.WARNING,
            f"Required current exceeds the capacity of the largest listed cable ({result.cable.label}, "
            f"{result.cable.current_capacity:g} A) - use parallel runs or request an engineering review",
        ))

    return recs


def advisories(result: CalculationResult, data: CalculationInput) -> List[Recommendation]:
    recs = []

    if data.ambient_temp > HIGH_AMBIENT_TEMP_C:
        recs.append(Recommendation(RecommendationTier.WARNING, "High ambient temperature detected. Consider temperature derating."))

    if data.distance > MAX_PLAUSIBLE_METERS:
        recs.append(Recommendation(RecommendationTier.WARNING, "Distance seems too large (>10km). Please verify."))
    elif data.distance > LONG_RUN_METERS:
        recs.append(Recommendation(RecommendationTier.INFO, "Long distance installation. Consider voltage drop compensation."))

    if data.power_factor < LOW_POWER_FACTOR:
        recs.append(Recommendation(RecommendationTier.WARNING, "Low power factor detected. Consider power factor correction."))

    if data.phases == 3 and data.power > HIGH_THREE_PHASE_KW:
        recs.append(Recommendation(RecommendationTier.INFO, "High power three-phase system. Consider professional installation."))

    if result.cable.size <= OPTIMAL_CABLE_MM2:
        recs.append(Recommendation(RecommendationTier.SUCCESS, "Cable size is optimal for the application."))

    if result.safety_factor < MIN_SAFETY_FACTOR:
        recs.append(Recommendation(RecommendationTier.WARNING, "Safety factor is low. Consider increasing cable size for better safety margin."))

    if result.power_loss > HIGH_POWER_LOSS_W:
        recs.append(Recommendation(RecommendationTier.WARNING, "High power loss detected. Consider using larger cable to improve efficiency."))

    if result.voltage_drop < LOW_VOLTAGE_DROP_PCT:
        recs.append(Recommendation(RecommendationTier.SUCCESS, "Cable size may be oversized. Consider smaller cable for cost optimization."))

    return recs


def build_analysis(result: CalculationResult, data: CalculationInput) -> Analysis:
    safety = SafetyAnalysis(
        status=result.safety,
        voltage_drop=result.voltage_drop,
        limit=data.voltage_drop_limit,
        margin=data.voltage_drop_limit - result.voltage_drop,
        recommendations=safety_recommendations(result, data),
    )
    return Analysis(
        economic=build_economic_analysis(result, data),
        safety=safety,
        advisories=advisories(result, data),
    )
