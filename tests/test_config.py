from datetime import date
import unittest

from cruise_watch.config import (
    NCL_BASE_URL,
    WatchConfig,
    _parse_date,
    _parse_reference_prices,
    create_config,
    create_config_from_env,
    create_config_from_form,
)


class DefaultConfigTests(unittest.TestCase):
    def test_defaults_describe_booked_bliss_sailing(self) -> None:
        config = WatchConfig()
        self.assertEqual(config.itinerary_codes, ["BLISS7SEAJNUSGYKTNVICSEA"])
        self.assertEqual(config.reference_date, date(2025, 10, 4))
        self.assertEqual(config.reference_prices, {"Inside": 1220.0, "Balcony": 1662.0})
        self.assertEqual(config.cabin_whitelist, ["Inside", "Balcony"])
        self.assertEqual(config.itinerary_url("ABC"), NCL_BASE_URL + "ABC")

    def test_defaults_are_not_shared(self) -> None:
        first = WatchConfig()
        first.reference_prices["Suite"] = 1.0
        self.assertNotIn("Suite", WatchConfig().reference_prices)


class ParserTests(unittest.TestCase):
    def test_parse_date_formats(self) -> None:
        for raw in ["2025-10-04", "October 4, 2025", "10/04/2025"]:
            with self.subTest(raw=raw):
                self.assertEqual(_parse_date(raw), date(2025, 10, 4))
        self.assertIsNone(_parse_date("someday"))

    def test_parse_reference_prices(self) -> None:
        self.assertEqual(
            _parse_reference_prices("Inside=1100, Balcony=$1500.50, Broken=abc, nonsense"),
            {"Inside": 1100.0, "Balcony": 1500.5},
        )
        self.assertEqual(_parse_reference_prices({"Oceanview": "900"}), {"Oceanview": 900.0})


class FactoryTests(unittest.TestCase):
    def test_create_config_from_form(self) -> None:
        config = create_config_from_form(
            {
                "itinerary_codes": "JOY9SEAKTNICYJNUSGYVICSEA, BLISS7SEAJNUSGYKTNVICSEA",
                "base_url": "https://www.ncl.com/ca/en/cruises",
                "reference_date": "2026-05-17",
                "reference_prices": "Inside=999",
                "request_timeout": "15",
            }
        )
        self.assertEqual(config.itinerary_codes, ["JOY9SEAKTNICYJNUSGYVICSEA", "BLISS7SEAJNUSGYKTNVICSEA"])
        self.assertEqual(config.base_url, "https://www.ncl.com/ca/en/cruises/")
        self.assertEqual(config.reference_date, date(2026, 5, 17))
        self.assertEqual(config.reference_prices, {"Inside": 999.0})
        self.assertEqual(config.request_timeout, 15.0)

    def test_empty_form_keeps_defaults(self) -> None:
        self.assertEqual(create_config_from_form({}).to_dict(), WatchConfig().to_dict())

    def test_unparseable_reference_date_keeps_default(self) -> None:
        with self.assertLogs("cruise_watch.config", level="WARNING") as captured:
            config = create_config_from_form({"reference_date": "next tuesday"})
        self.assertEqual(config.reference_date, date(2025, 10, 4))
        self.assertIn("next tuesday", captured.output[0])

        with self.assertLogs("cruise_watch.config", level="WARNING"):
            from_env = create_config_from_env({"CRUISE_WATCH_REFERENCE_DATE": "2025-13-45"})
        self.assertEqual(from_env.reference_date, date(2025, 10, 4))

    def test_create_config_from_env(self) -> None:
        config = create_config_from_env(
            {
                "CRUISE_WATCH_ITINERARY_CODES": "A,B",
                "CRUISE_WATCH_REFERENCE_DATE": "October 11, 2025",
                "UNRELATED": "ignored",
            }
        )
        self.assertEqual(config.itinerary_codes, ["A", "B"])
        self.assertEqual(config.reference_date, date(2025, 10, 11))

    def test_create_config_dispatch(self) -> None:
        self.assertEqual(create_config({"itinerary_codes": "X"}).itinerary_codes, ["X"])
        with self.assertRaisesRegex(TypeError, "expected a mapping"):
            create_config(42)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
