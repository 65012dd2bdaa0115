# api/routes.py

from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app

from core.converters import parse_calculation_input
from core.exceptions import InvalidInputError, MissingParametersError
from core.models import CalculationResult
from sizing.cable_logic import calculate
from sizing.cable_tables import get_cable_prices, get_cable_sizes, resolve_phase

bp = Blueprint('calculator', __name__)


def _entry(value: str, unit: str, description: str, **extra) -> dict:
    entry = {"value": value, "unit": unit, "description": description}
    entry.update(extra)
    return entry


def serialize_result(result: CalculationResult) -> dict:
    """Shapes a result the way the web and mobile clients read it: two-decimal strings with units."""
    return {
        "current": _entry(f"{result.current:.2f}", "A", "Calculated current"),
        "deratedCurrent": _entry(
            f"{result.derated_current:.2f}", "A", "Current used for cable selection after derating",
            temperatureFactor=result.temperature_factor,
            installationFactor=result.installation_factor,
        ),
        "voltageDrop": _entry(
            f"{result.voltage_drop:.2f}", "%", "Voltage drop percentage",
            safety=result.safety.value.lower(),
        ),
        "cableSize": _entry(
            f"{result.cable.size:g}", "mm²", result.description,
            currentCapacity=result.cable.current_capacity,
            oversize=result.oversize_fallback,
        ),
        "safetyFactor": _entry(f"{result.safety_factor:.2f}", "", "Cable capacity over selection current"),
        "cost": _entry(f"{result.total_cost:.2f}", "USD", "Estimated cable cost"),
        "pricePerMeter": _entry(f"{result.price_per_meter:.2f}", "USD", "Price per meter"),
        "powerLoss": _entry(f"{result.power_loss:.2f}", "W", "Power loss in the cable"),
    }


def serialize_analysis(result: CalculationResult) -> dict:
    analysis = result.analysis
    economic = analysis.economic
    safety = analysis.safety
    return {
        "economic": {
            "costPerMeter": f"{economic.cost_per_meter:.2f}",
            "totalCost": f"{economic.total_cost:.2f}",
            "costBreakdown": economic.cost_breakdown,
            "totalSavings": round(economic.savings, 2),
            "roi": round(economic.roi, 1),
            "annualLossKwh": round(economic.annual_loss_kwh, 2),
            "annualLossCost": round(economic.annual_loss_cost, 2),
            "paybackPeriodYears": None if economic.payback_years is None else round(economic.payback_years, 1),
        },
        "safety": {
            "status": safety.status.value,
            "voltageDropPercentage": f"{safety.voltage_drop:.2f}%",
            "limit": f"{safety.limit:g}%",
            "margin": f"{safety.margin:.2f}%",
            "recommendations": [r.to_dict() for r in safety.recommendations],
        },
        "recommendations": [r.to_dict() for r in analysis.advisories],
    }


@bp.route('/calculate', methods=['POST'])
def calculate_endpoint():
    data = request.get_json(silent=True)
    current_app.logger.info(f"Cable calculation requested with data: {data}")
    try:
        params = parse_calculation_input(data)
        result = calculate(params)
        return jsonify({
            "success": True,
            "results": serialize_result(result),
            "analysis": serialize_analysis(result),
        }), 200
    except MissingParametersError as e:
        return jsonify({"error": "Missing required parameters", "message": str(e)}), 400
    except InvalidInputError as e:
        return jsonify({"error": "Invalid input", "message": str(e), "field": e.field}), 400
    except Exception as e:
        current_app.logger.error(f"Calculation error: {e}", exc_info=True)
        return jsonify({"error": "Internal server error", "message": _public_message(e)}), 500


def _phase_from_query():
    return resolve_phase('three' if request.args.get('phase', 'single') == 'three' else 'single')


@bp.route('/prices', methods=['GET'])
def get_prices():
    phase = _phase_from_query()
    prices = {f"{size:g}": price for size, price in get_cable_prices(phase).items()}
    return jsonify({
        "success": True,
        "prices": prices,
        "currency": "USD",
        "phase": phase.label,
    })


@bp.route('/cable-sizes', methods=['GET'])
def get_sizes():
    phase = _phase_from_query()
    sizes = get_cable_sizes(phase)
    return jsonify({
        "success": True,
        "sizes": sizes,
        "count": len(sizes),
        "phase": phase.label,
    })


@bp.route('/health', methods=['GET'])
def health():
    # Tables live in memory, there is nothing external to probe
    return jsonify({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": current_app.config['ENVIRONMENT'],
        "database": "in-memory data",
    })


def _public_message(error: Exception) -> str:
    if current_app.config['ENVIRONMENT'] == 'development':
        return str(error)
    return "Something went wrong"


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found", "message": "The requested resource was not found"}), 404

    @app.errorhandler(500)
    def server_error(e):
        app.logger.error(f"Server error: {e}", exc_info=True)
        return jsonify({"error": "Internal server error", "message": _public_message(e)}), 500
