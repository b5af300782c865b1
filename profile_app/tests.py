from unittest import mock

from django.test import Client, SimpleTestCase, override_settings
from requests.exceptions import ConnectionError, Timeout

from .utils import FALLBACK_FACT, fetch_cat_fact


def fake_response(payload, status_code=200):
    response = mock.Mock(status_code=status_code)
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@override_settings(
    PROFILE_EMAIL="dev@example.com",
    PROFILE_NAME="Dev Example",
    PROFILE_STACK="Python/Django",
    CAT_FACT_API_URL="https://cats.example/fact",
)
class ProfileTests(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    @mock.patch("profile_app.utils.requests.get")
    def test_me_success(self, get):
        get.return_value = fake_response({"fact": "Cats sleep a lot.", "length": 17})

        resp = self.client.get("/me")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "success")
        self.assertEqual(data["user"], {
            "email": "dev@example.com",
            "name": "Dev Example",
            "stack": "Python/Django",
        })
        self.assertEqual(data["fact"], "Cats sleep a lot.")
        self.assertTrue(data["timestamp"].endswith("Z"))
        get.assert_called_once_with("https://cats.example/fact", timeout=mock.ANY)

    @mock.patch("profile_app.utils.requests.get", side_effect=Timeout())
    def test_me_upstream_timeout(self, get):
        resp = self.client.get("/me")
        self.assertEqual(resp.status_code, 504)
        self.assertEqual(resp.json()["status"], "failed")
        self.assertEqual(resp.json()["fact"], FALLBACK_FACT)

    @mock.patch("profile_app.utils.requests.get", side_effect=ConnectionError())
    def test_me_upstream_unreachable(self, get):
        resp = self.client.get("/me")
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["status"], "failed")

    @mock.patch("profile_app.utils.requests.get")
    def test_fetch_cat_fact_without_fact(self, get):
        get.return_value = fake_response({})
        self.assertEqual(fetch_cat_fact(), (FALLBACK_FACT, 503))
