import unittest
from unittest import mock
from core.exceptions import InvalidInputError
from core.models import CalculationInput, InstallationMethod, RecommendationTier, SafetyStatus
from sizing.cable_logic import calculate
from sizing.cable_tables import get_cable_table


def make_input(**overrides):
    params = dict(
        voltage=400, power=10, power_factor=0.8, distance=100,
        phases=3, voltage_drop_limit=5.0,
    )
    params.update(overrides)
    return CalculationInput(**params)


class TestScenarios(unittest.TestCase):
    def test_three_phase_motor_feeder(self):
        print("\n--- TEST: 10 kW, 400 V, 3Ph, 100 m ---")
        res = calculate(make_input())

        # I = 10000 / (400 * 0.8 * 1.732) = 18.04 A, required 22.55 A -> 2.5mm2 (27 A)
        self.assertAlmostEqual(res.current, 18.04, places=2)
        self.assertEqual(res.cable.size, 2.5)
        # Vd = 1.732 * 18.04 * 0.741 Ohm = 23.16 V -> 5.79 % of 400 V
        self.assertAlmostEqual(res.voltage_drop, 5.7890625, places=6)
        self.assertEqual(res.safety, SafetyStatus.WARNING)
        self.assertAlmostEqual(res.total_cost, 610.0)
        self.assertEqual(res.price_per_meter, 6.10)
        self.assertFalse(res.oversize_fallback)
        self.assertIn("5-core", res.description)
        print(f"I={res.current:.2f} A | {res.cable.label} | VD={res.voltage_drop:.2f}% | {res.safety.value}")

    def test_single_phase_small_load(self):
        print("\n--- TEST: 3 kW, 230 V, 1Ph, 50 m ---")
        res = calculate(make_input(voltage=230, power=3, power_factor=1.0, distance=50, phases=1, voltage_drop_limit=3.0))

        # I = 13.04 A, required 16.3 A -> 1.5mm2 (20 A)
        self.assertAlmostEqual(res.current, 13.04, places=2)
        self.assertEqual(res.cable.size, 1.5)
        # Vd = 2 * 13.04 * 0.605 Ohm = 15.78 V -> 6.86 %
        self.assertAlmostEqual(res.voltage_drop, 6.862, places=2)
        self.assertEqual(res.safety, SafetyStatus.WARNING)
        self.assertAlmostEqual(res.total_cost, 51.5)
        self.assertIn("3-core", res.description)

    def test_extreme_load_uses_largest_cable(self):
        print("\n--- TEST: 1000 kW at 230 V ---")
        res = calculate(make_input(voltage=230, power=1000, power_factor=1.0))

        # I = 2510 A, far above 447 A
        self.assertTrue(res.oversize_fallback)
        self.assertEqual(res.cable, get_cable_table(3)[-1])
        tiers = [r.tier for r in res.analysis.safety.recommendations]
        self.assertEqual(tiers[-1], RecommendationTier.WARNING)
        self.assertIn("largest listed cable", res.analysis.safety.recommendations[-1].message)

    def test_invalid_power_factor_rejected_before_lookup(self):
        with mock.patch("sizing.cable_logic.get_cable_table") as table:
            with self.assertRaises(InvalidInputError) as ctx:
                calculate(make_input(power_factor=1.5))
        table.assert_not_called()
        self.assertEqual(ctx.exception.field, "power_factor")

    def test_other_invalid_fields(self):
        for field, value in [("voltage", 0), ("power", -5), ("distance", 0),
                             ("phases", 2), ("voltage_drop_limit", 0), ("voltage", float("nan"))]:
            with self.assertRaises(InvalidInputError, msg=field):
                calculate(make_input(**{field: value}))

    def test_unknown_installation_method_rejected(self):
        with self.assertRaises(InvalidInputError):
            calculate(make_input(installation_method="underwater"))


class TestDeratingFeedsSelection(unittest.TestCase):
    def test_conduit_at_45c_upsizes(self):
        print("\n--- TEST: Derating (air 30C vs conduit 45C) ---")
        base = calculate(make_input())
        hot = calculate(make_input(installation_method=InstallationMethod.CONDUIT, ambient_temp=45))

        # Derated = 18.04 / (0.79 * 0.8) = 28.55 A, required 35.69 A -> 4mm2 (37 A)
        self.assertAlmostEqual(hot.derated_current, 28.55, places=2)
        self.assertEqual(hot.cable.size, 4)
        self.assertGreater(hot.cable.size, base.cable.size)
        # Voltage drop still uses the real current: 1.732 * 18.04 * 0.461 Ohm / 400 V
        self.assertAlmostEqual(hot.voltage_drop, 3.6015625, places=6)
        self.assertEqual(hot.current, base.current)


class TestProperties(unittest.TestCase):
    def _grid(self):
        for phases, voltage in [(1, 230), (3, 400)]:
            for power in [0.5, 2, 7.5, 15, 40, 90, 150, 250, 400]:
                for method in InstallationMethod:
                    yield make_input(voltage=voltage, power=power, phases=phases, installation_method=method)

    def test_capacity_or_largest(self):
        for data in self._grid():
            res = calculate(data)
            largest = get_cable_table(data.phases)[-1]
            self.assertTrue(
                res.cable.current_capacity >= 1.25 * res.current or res.cable == largest,
                f"{data} -> {res.cable}",
            )

    def test_cost_identity(self):
        for data in self._grid():
            res = calculate(data)
            self.assertEqual(res.total_cost, data.distance * res.cable.price_per_meter)

    def test_safety_iff_within_limit(self):
        for data in self._grid():
            res = calculate(data)
            self.assertEqual(res.safety is SafetyStatus.SAFE, res.voltage_drop <= data.voltage_drop_limit)

    def test_monotonic_in_power(self):
        for phases, voltage in [(1, 230), (3, 400)]:
            previous = 0
            for step in range(1, 120):
                res = calculate(make_input(voltage=voltage, phases=phases, power=step * 2.5))
                self.assertGreaterEqual(res.cable.size, previous)
                previous = res.cable.size

    def test_idempotent(self):
        data = make_input(installation_method=InstallationMethod.BURIED, ambient_temp=50)
        self.assertEqual(calculate(data), calculate(data))


if __name__ == '__main__':
    unittest.main()
