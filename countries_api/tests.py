from decimal import Decimal
from unittest import mock

import requests
from django.test import Client, SimpleTestCase, TestCase
from django.utils import timezone

from .models import Country
from .services import build_countries
from .utils import (
    ExternalAPIError,
    calculate_estimated_gdp,
    extract_currency_code,
    fetch_exchange_rates,
    lookup_exchange_rate,
)

COUNTRIES = [
    {
        "name": "Nigeria",
        "capital": "Abuja",
        "region": "Africa",
        "population": 1000,
        "flag": "https://flagcdn.com/ng.svg",
        "currencies": [{"code": "NGN", "name": "Nigerian naira", "symbol": "₦"}],
    },
    {
        "name": "Ghana",
        "capital": "Accra",
        "region": "Africa",
        "population": 500,
        "currencies": [{"code": "GHS"}],
    },
    {"name": "Antarctica", "region": "Polar", "population": 1000},
    {"name": "", "population": 10},
]

RATES = {"USD": 1, "NGN": 1600, "GHS": 15.5}


class CountryUtilsTests(SimpleTestCase):
    def test_extract_currency_code(self):
        self.assertEqual(extract_currency_code([{"code": "EUR"}, {"code": "USD"}]), "EUR")
        self.assertEqual(extract_currency_code([]), "USD")
        self.assertEqual(extract_currency_code(None), "USD")
        self.assertEqual(extract_currency_code([{"name": "No code"}]), "USD")

    def test_lookup_exchange_rate_defaults_to_one(self):
        self.assertEqual(lookup_exchange_rate(RATES, "NGN"), Decimal("1600.000000"))
        self.assertEqual(lookup_exchange_rate(RATES, "XYZ"), Decimal("1.000000"))
        self.assertEqual(lookup_exchange_rate({"ABC": 0}, "ABC"), Decimal("1.000000"))

    def test_calculate_estimated_gdp(self):
        self.assertEqual(calculate_estimated_gdp(1000, Decimal("1600"), multiplier=1500), Decimal("937.50"))
        self.assertEqual(calculate_estimated_gdp(None, Decimal("1"), multiplier=1000), Decimal("0.00"))
        gdp = calculate_estimated_gdp(10, Decimal("1"))
        self.assertTrue(Decimal("10000") <= gdp <= Decimal("20000"))

    @mock.patch("countries_api.utils.requests.get", side_effect=requests.exceptions.Timeout())
    def test_fetch_exchange_rates_timeout(self, get):
        with self.assertRaises(ExternalAPIError):
            fetch_exchange_rates()

    @mock.patch("countries_api.utils.requests.get")
    def test_fetch_exchange_rates_without_rates(self, get):
        get.return_value.json.return_value = {"result": "error"}
        with self.assertRaises(ExternalAPIError):
            fetch_exchange_rates()

    @mock.patch("countries_api.utils.random.randint", return_value=1500)
    def test_build_countries(self, randint):
        now = timezone.now()
        countries = {c.name: c for c in build_countries(COUNTRIES, RATES, now)}

        self.assertEqual(set(countries), {"Nigeria", "Ghana", "Antarctica"})
        self.assertEqual(countries["Nigeria"].estimated_gdp, Decimal("937.50"))
        self.assertEqual(countries["Ghana"].estimated_gdp, Decimal("48387.10"))
        self.assertEqual(countries["Antarctica"].currency_code, "USD")
        self.assertEqual(countries["Antarctica"].exchange_rate, Decimal("1.000000"))
        self.assertIsNone(countries["Antarctica"].capital)
        self.assertEqual(countries["Nigeria"].last_refreshed_at, now)

    def test_build_countries_keeps_last_duplicate(self):
        payload = [
            {"name": "Chad", "population": 1},
            {"name": "chad", "population": 2},
        ]
        countries = build_countries(payload, RATES, timezone.now())
        self.assertEqual(len(countries), 1)
        self.assertEqual(countries[0].population, 2)


@mock.patch("countries_api.utils.random.randint", return_value=1500)
@mock.patch("countries_api.services.fetch_exchange_rates", return_value=RATES)
@mock.patch("countries_api.services.fetch_countries_data", return_value=COUNTRIES)
class CountryApiTests(TestCase):
    def setUp(self):
        self.client = Client()

    def refresh(self):
        return self.client.post("/countries/refresh")

    def test_refresh_replaces_table(self, fetch_countries, fetch_rates, randint):
        Country.objects.create(name="Atlantis", population=1)

        resp = self.refresh()
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["message"], "Countries refreshed successfully")
        self.assertEqual(data["total_countries"], 3)
        self.assertFalse(Country.objects.filter(name="Atlantis").exists())
        self.assertEqual(Country.objects.count(), 3)

    def test_refresh_upstream_failure_keeps_data(self, fetch_countries, fetch_rates, randint):
        Country.objects.create(name="Atlantis", population=1)
        fetch_countries.side_effect = ExternalAPIError("Request to REST Countries API timed out")

        resp = self.refresh()
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["error"], "External data source unavailable")
        self.assertTrue(Country.objects.filter(name="Atlantis").exists())

    def test_list_filters_and_sorting(self, fetch_countries, fetch_rates, randint):
        self.refresh()

        resp = self.client.get("/countries")
        self.assertEqual([c["name"] for c in resp.json()], ["Antarctica", "Ghana", "Nigeria"])

        resp = self.client.get("/countries", {"region": "africa"})
        self.assertEqual({c["name"] for c in resp.json()}, {"Ghana", "Nigeria"})

        resp = self.client.get("/countries", {"currency": "ngn"})
        self.assertEqual([c["name"] for c in resp.json()], ["Nigeria"])
        self.assertEqual(resp.json()[0]["estimated_gdp"], 937.5)

        resp = self.client.get("/countries", {"sort": "gdp_desc"})
        self.assertEqual([c["name"] for c in resp.json()], ["Antarctica", "Ghana", "Nigeria"])

        resp = self.client.get("/countries", {"sort": "population_asc"})
        self.assertEqual([c["name"] for c in resp.json()], ["Ghana", "Antarctica", "Nigeria"])

        resp = self.client.get("/countries", {"sort": "unknown"})
        self.assertEqual([c["name"] for c in resp.json()], ["Antarctica", "Ghana", "Nigeria"])

    def test_get_and_delete_country(self, fetch_countries, fetch_rates, randint):
        self.refresh()

        resp = self.client.get("/countries/nigeria")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["capital"], "Abuja")

        resp = self.client.delete("/countries/nigeria")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "nigeria deleted successfully.")

        self.assertEqual(self.client.get("/countries/nigeria").status_code, 404)
        self.assertEqual(self.client.delete("/countries/nigeria").status_code, 404)

    def test_status(self, fetch_countries, fetch_rates, randint):
        resp = self.client.get("/status")
        self.assertEqual(resp.json(), {"total_countries": 0, "last_refreshed_at": None})

        self.refresh()
        resp = self.client.get("/status")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_countries"], 3)
        self.assertRegex(resp.json()["last_refreshed_at"], r"^\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ$")
