import logging
import random
from decimal import Decimal, ROUND_HALF_UP

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = 'USD'
DEFAULT_EXCHANGE_RATE = Decimal('1')


class ExternalAPIError(Exception):
    pass


def _get_json(url, source):
    try:
        response = requests.get(url, timeout=settings.UPSTREAM_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.Timeout:
        raise ExternalAPIError(f"Request to {source} timed out")
    except requests.exceptions.RequestException as e:
        raise ExternalAPIError(f"Could not fetch data from {source}: {str(e)}")
    except ValueError:
        raise ExternalAPIError(f"{source} returned invalid JSON")


def fetch_countries_data():
    data = _get_json(settings.COUNTRIES_API_URL, "REST Countries API")
    if not isinstance(data, list):
        raise ExternalAPIError("REST Countries API returned an unexpected payload")
    return data


def fetch_exchange_rates():
    data = _get_json(settings.EXCHANGE_RATES_API_URL, "Exchange Rates API")
    rates = data.get('rates') if isinstance(data, dict) else None
    if not rates:
        raise ExternalAPIError("Exchange Rates API returned no rates")
    return rates


def extract_currency_code(currencies):
    """Code of the first listed currency, or USD when the country lists none."""
    if not currencies:
        return DEFAULT_CURRENCY
    return currencies[0].get('code') or DEFAULT_CURRENCY


def lookup_exchange_rate(rates, currency_code):
    """USD rate for the currency; unknown or zero rates count as 1."""
    rate = rates.get(currency_code) or rates.get(currency_code.upper())
    try:
        rate = Decimal(str(rate)) if rate else DEFAULT_EXCHANGE_RATE
    except ArithmeticError:
        logger.warning("Ignoring malformed exchange rate %r for %s", rate, currency_code)
        rate = DEFAULT_EXCHANGE_RATE
    if rate <= 0:
        rate = DEFAULT_EXCHANGE_RATE
    return rate.quantize(Decimal('0.000001'), rounding=ROUND_HALF_UP)


def calculate_estimated_gdp(population, exchange_rate, multiplier=None):
    """population x random(1000..2000) / exchange_rate, rounded to cents."""
    if multiplier is None:
        multiplier = random.randint(1000, 2000)
    estimated_gdp = Decimal(population or 0) * multiplier / Decimal(exchange_rate)
    return estimated_gdp.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
