import logging

import requests
from django.conf import settings
from requests.exceptions import RequestException, Timeout

logger = logging.getLogger(__name__)

FALLBACK_FACT = "could not fetch any fact because the API call failed"


def fetch_cat_fact(url=None, timeout=None):
    """
    Fetch a random cat fact.

    Returns ``(fact, status_code)``: 200 on success, 504 when the upstream
    timed out and 503 for any other upstream failure, in which case the fact
    is a fallback message.
    """
    url = url or settings.CAT_FACT_API_URL
    timeout = settings.CAT_FACT_TIMEOUT if timeout is None else timeout

    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        fact = resp.json().get("fact")
    except Timeout:
        logger.warning("Cat Facts API request timed out: %s", url)
        return (FALLBACK_FACT, 504)
    except (RequestException, ValueError) as exc:
        logger.warning("Unable to fetch cat fact from %s: %s", url, exc)
        return (FALLBACK_FACT, 503)

    if not fact:
        logger.warning("Cat Facts API returned no fact")
        return (FALLBACK_FACT, 503)
    return (fact, 200)
