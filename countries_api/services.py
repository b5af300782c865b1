import logging

from django.db import transaction
from django.utils import timezone

from .models import Country
from .utils import (
    fetch_countries_data,
    fetch_exchange_rates,
    calculate_estimated_gdp,
    extract_currency_code,
    lookup_exchange_rate,
)

logger = logging.getLogger(__name__)


def build_countries(countries, rates, timestamp):
    """
    Turn REST Countries entries into unsaved Country instances.

    Entries without a name are skipped; when a name repeats the last entry wins.
    """
    by_name = {}
    for country_data in countries:
        name = (country_data.get('name') or '').strip()
        if not name:
            continue

        population = country_data.get('population') or 0
        currency_code = extract_currency_code(country_data.get('currencies'))
        exchange_rate = lookup_exchange_rate(rates, currency_code)

        by_name[name.lower()] = Country(
            name=name,
            capital=country_data.get('capital') or None,
            region=country_data.get('region') or None,
            population=population,
            currency_code=currency_code,
            exchange_rate=exchange_rate,
            estimated_gdp=calculate_estimated_gdp(population, exchange_rate),
            flag_url=country_data.get('flag') or None,
            last_refreshed_at=timestamp,
        )
    return list(by_name.values())


def refresh_countries(timestamp=None, batch_size: int = 100):
    """
    Fetch countries and exchange rates, then replace the cached table.

    Both upstreams are fetched before the database is touched, so an
    ExternalAPIError leaves the previous data in place.
    """
    if timestamp is None:
        timestamp = timezone.now()

    countries = fetch_countries_data()
    rates = fetch_exchange_rates()
    logger.info("Fetched %d countries and %d exchange rates", len(countries), len(rates))

    instances = build_countries(countries, rates, timestamp)
    with transaction.atomic():
        Country.objects.all().delete()
        Country.objects.bulk_create(instances, batch_size=batch_size)

    logger.info("Refreshed %d countries at %s", len(instances), timestamp.isoformat())
    return len(instances), timestamp
