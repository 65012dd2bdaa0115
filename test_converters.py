import unittest
from core.converters import convert_length_unit, convert_power_unit, parse_calculation_input
from core.exceptions import InvalidInputError, MissingParametersError
from core.models import InstallationMethod

FORM = {
    "voltage": "400",
    "power": "10",
    "powerFactor": "0,8",
    "distance": 100,
    "phases": "3",
    "voltageDropLimit": 5,
    "installationMethod": "Conduit",
    "ambientTemp": "40",
}


class TestParseInput(unittest.TestCase):
    def test_form_strings_are_coerced(self):
        data = parse_calculation_input(FORM)
        self.assertEqual(data.voltage, 400.0)
        self.assertEqual(data.power_factor, 0.8)
        self.assertEqual(data.phases, 3)
        self.assertEqual(data.installation_method, InstallationMethod.CONDUIT)
        self.assertEqual(data.ambient_temp, 40.0)

    def test_snake_case_keys(self):
        data = parse_calculation_input({
            "voltage": 230, "power": 3, "power_factor": 1, "distance": 50,
            "phases": 1, "voltage_drop_limit": 3,
        })
        self.assertEqual(data.voltage_drop_limit, 3.0)
        # Defaults for the optional installation conditions
        self.assertEqual(data.installation_method, InstallationMethod.AIR)
        self.assertEqual(data.ambient_temp, 30.0)

    def test_missing_fields_are_listed(self):
        payload = dict(FORM)
        del payload["voltage"]
        payload["distance"] = "  "
        with self.assertRaises(MissingParametersError) as ctx:
            parse_calculation_input(payload)
        self.assertEqual(ctx.exception.missing, ["voltage", "distance"])

    def test_empty_body(self):
        with self.assertRaises(MissingParametersError):
            parse_calculation_input(None)
        with self.assertRaises(MissingParametersError):
            parse_calculation_input({})

    def test_not_an_object(self):
        with self.assertRaises(InvalidInputError):
            parse_calculation_input(["voltage", 400])

    def test_bad_values(self):
        cases = [
            ("voltage", "abc"),
            ("phases", "2"),
            ("powerFactor", "1.5"),
            ("installationMethod", "underwater"),
            ("distance", "-10"),
            ("power", True),
        ]
        for key, value in cases:
            payload = dict(FORM)
            payload[key] = value
            with self.assertRaises(InvalidInputError, msg=key):
                parse_calculation_input(payload)


class TestUnits(unittest.TestCase):
    def test_power_units_to_kw(self):
        self.assertEqual(convert_power_unit(1500, "W", 230, 1, 1.0), 1.5)
        self.assertEqual(convert_power_unit(10, "kW", 400, 3, 0.9), 10)
        self.assertAlmostEqual(convert_power_unit(5, "HP", 400, 3, 0.9), 3.73)
        self.assertAlmostEqual(convert_power_unit(50, "kVA", 400, 3, 0.8), 40.0)

    def test_current_to_kw(self):
        # 20 A * 230 V * 0.9 = 4.14 kW
        self.assertAlmostEqual(convert_power_unit(20, "A", 230, 1, 0.9), 4.14)
        # 18.04 A three-phase at 400 V, PF 0.8 -> 10 kW
        self.assertAlmostEqual(convert_power_unit(18.0422, "A", 400, 3, 0.8), 10.0, places=3)

    def test_unknown_power_unit(self):
        with self.assertRaises(InvalidInputError):
            convert_power_unit(10, "BTU", 400, 3, 0.9)

    def test_lengths(self):
        self.assertEqual(convert_length_unit(50, "m"), 50)
        self.assertAlmostEqual(convert_length_unit(100, "ft"), 30.48)
        self.assertAlmostEqual(convert_length_unit(1.2, "km"), 1200.0)
        with self.assertRaises(InvalidInputError):
            convert_length_unit(10, "parsec")


if __name__ == '__main__':
    unittest.main()
