"""Checkout and customer portal links for every HTTP provider."""

from decimal import Decimal

import pytest

from paybridge.core.exceptions import ConfigurationError, ProviderError, UnsupportedOperationError
from paybridge.payments.providers.creem import CreemPaymentProvider
from paybridge.payments.providers.dodopayments import DodoPaymentsPaymentProvider
from paybridge.payments.providers.lemonsqueezy import LemonSqueezyPaymentProvider
from paybridge.payments.providers.polar import PolarPaymentProvider
from paybridge.payments.providers.stripe import StripePaymentProvider
from paybridge.payments.providers.tap import TapPaymentProvider
from paybridge.payments.schemas import CheckoutRequest, PaymentType, PortalRequest, TapPrice

pytestmark = [pytest.mark.asyncio]

HTTP_PROVIDERS = [
    StripePaymentProvider,
    LemonSqueezyPaymentProvider,
    PolarPaymentProvider,
    CreemPaymentProvider,
    DodoPaymentsPaymentProvider,
    TapPaymentProvider,
]


def subscription(**overrides) -> CheckoutRequest:
    values = {
        "payment_type": PaymentType.SUBSCRIPTION,
        "product_id": "42",
        "email": "jane@example.com",
        "name": "Jane Q Doe",
        "redirect_url": "https://app.example.com/done",
        "organization_id": "org_1",
        "user_id": "user_1",
        "trial_period_days": 14,
    }
    values.update(overrides)
    return CheckoutRequest(**values)


class TestCheckoutRequest:
    def test_seats_default_to_one(self):
        request = CheckoutRequest(payment_type="one-time", product_id="p")

        assert request.seats == 1

    def test_trial_ignored_for_one_time(self):
        request = subscription(payment_type=PaymentType.ONE_TIME)

        assert request.trial_days is None

    def test_metadata_skips_missing_ids(self):
        request = CheckoutRequest(payment_type="one-time", product_id="p", user_id="u")

        assert request.metadata() == {"user_id": "u"}


class TestMissingCredentials:
    """Scenario: provider keys are not configured
    Expected: ConfigurationError and no network call
    """

    @pytest.mark.parametrize("provider_cls", HTTP_PROVIDERS)
    async def test_checkout_raises_before_network(self, provider_cls, empty_settings, api, http_client):
        provider = provider_cls(settings=empty_settings, http_client=http_client)

        with pytest.raises(ConfigurationError):
            await provider.create_checkout_link(subscription())

        assert api.requests == []

    @pytest.mark.parametrize(
        "provider_cls",
        [p for p in HTTP_PROVIDERS if p is not TapPaymentProvider],
    )
    async def test_portal_raises_before_network(self, provider_cls, empty_settings, api, http_client):
        provider = provider_cls(settings=empty_settings, http_client=http_client)

        with pytest.raises(ConfigurationError):
            await provider.create_customer_portal_link(PortalRequest(customer_id="cus_1"))

        assert api.requests == []


class TestStripe:
    async def test_checkout_form(self, settings, api, http_client):
        api.add("POST", "/v1/checkout/sessions", json={"url": "https://checkout.stripe.com/c/1"})
        provider = StripePaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_checkout_link(subscription(product_id="price_1", seats=3))

        assert url == "https://checkout.stripe.com/c/1"
        form = api.form_body()
        assert form["mode"] == "subscription"
        assert form["line_items[0][price]"] == "price_1"
        assert form["line_items[0][quantity]"] == "3"
        assert form["customer_email"] == "jane@example.com"
        assert form["metadata[organization_id]"] == "org_1"
        assert form["metadata[user_id]"] == "user_1"
        assert form["subscription_data[trial_period_days]"] == "14"
        assert api.last.headers["Authorization"] == "Bearer test_stripe_secret_key"

    async def test_one_time_checkout_has_no_trial(self, settings, api, http_client):
        api.add("POST", "/v1/checkout/sessions", json={"url": "u"})
        provider = StripePaymentProvider(settings=settings, http_client=http_client)

        await provider.create_checkout_link(
            subscription(payment_type=PaymentType.ONE_TIME, customer_id="cus_9")
        )

        form = api.form_body()
        assert form["mode"] == "payment"
        assert form["customer"] == "cus_9"
        assert "customer_email" not in form
        assert "subscription_data[trial_period_days]" not in form

    async def test_seats_absent_sends_quantity_one(self, settings, api, http_client):
        api.add("POST", "/v1/checkout/sessions", json={"url": "u"})
        provider = StripePaymentProvider(settings=settings, http_client=http_client)

        await provider.create_checkout_link(CheckoutRequest(payment_type="one-time", product_id="price_1"))

        assert api.form_body()["line_items[0][quantity]"] == "1"

    async def test_api_error_carries_body(self, settings, api, http_client):
        api.add(
            "POST",
            "/v1/checkout/sessions",
            status=400,
            json={"error": {"message": "No such price"}},
        )
        provider = StripePaymentProvider(settings=settings, http_client=http_client)

        with pytest.raises(ProviderError) as exc_info:
            await provider.create_checkout_link(subscription())

        assert exc_info.value.status_code == 400
        assert exc_info.value.body == {"error": {"message": "No such price"}}
        assert exc_info.value.provider == "stripe"

    async def test_non_object_response(self, settings, api, http_client):
        api.add("POST", "/v1/checkout/sessions", json=["cs_1"])
        provider = StripePaymentProvider(settings=settings, http_client=http_client)

        with pytest.raises(ProviderError) as exc_info:
            await provider.create_checkout_link(subscription())

        assert exc_info.value.body == ["cs_1"]

    async def test_portal(self, settings, api, http_client):
        api.add("POST", "/v1/billing_portal/sessions", json={"url": "https://billing.stripe.com/p/1"})
        provider = StripePaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_customer_portal_link(
            PortalRequest(customer_id="cus_1", redirect_url="https://app.example.com")
        )

        assert url == "https://billing.stripe.com/p/1"
        assert api.form_body() == {"customer": "cus_1", "return_url": "https://app.example.com"}


class TestLemonSqueezy:
    async def test_checkout_json_api(self, settings, api, http_client):
        api.add(
            "POST",
            "/v1/checkouts",
            status=201,
            json={"data": {"attributes": {"url": "https://shop.lemonsqueezy.com/checkout/1"}}},
        )
        provider = LemonSqueezyPaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_checkout_link(subscription())

        assert url == "https://shop.lemonsqueezy.com/checkout/1"
        data = api.json_body()["data"]
        attributes = data["attributes"]
        assert attributes["product_options"]["enabled_variants"] == [42]
        assert attributes["checkout_data"]["variant_quantities"] == [{"variant_id": 42, "quantity": 1}]
        assert attributes["checkout_data"]["custom"] == {"organization_id": "org_1", "user_id": "user_1"}
        assert data["relationships"]["store"]["data"]["id"] == "12345"
        assert api.last.headers["Content-Type"] == "application/vnd.api+json"

    async def test_missing_store_id(self, settings, api, http_client):
        settings.lemonsqueezy_store_id = None
        provider = LemonSqueezyPaymentProvider(settings=settings, http_client=http_client)

        with pytest.raises(ConfigurationError):
            await provider.create_checkout_link(subscription())

        assert api.requests == []

    async def test_portal_from_customer(self, settings, api, http_client):
        api.add(
            "GET",
            "/v1/customers/7",
            json={"data": {"attributes": {"urls": {"customer_portal": "https://portal/7"}}}},
        )
        provider = LemonSqueezyPaymentProvider(settings=settings, http_client=http_client)

        assert await provider.create_customer_portal_link(PortalRequest(customer_id="7")) == "https://portal/7"

    async def test_portal_absent(self, settings, api, http_client):
        api.add("GET", "/v1/customers/7", json={"data": {"attributes": {"urls": {}}}})
        provider = LemonSqueezyPaymentProvider(settings=settings, http_client=http_client)

        assert await provider.create_customer_portal_link(PortalRequest(customer_id="7")) is None

    async def test_checkout_unexpected_body(self, settings, api, http_client):
        """
        Scenario: 2xx answer without the JSON:API document
        Expected: no URL, no exception
        """
        api.add("POST", "/v1/checkouts", json={"errors": []})
        provider = LemonSqueezyPaymentProvider(settings=settings, http_client=http_client)

        assert await provider.create_checkout_link(subscription()) is None

    async def test_portal_unexpected_body(self, settings, api, http_client):
        api.add("GET", "/v1/customers/7", json={"data": None})
        provider = LemonSqueezyPaymentProvider(settings=settings, http_client=http_client)

        assert await provider.create_customer_portal_link(PortalRequest(customer_id="7")) is None


class TestPolar:
    async def test_checkout(self, settings, api, http_client):
        api.add("POST", "/v1/checkouts", status=201, json={"url": "https://polar.sh/checkout/1"})
        provider = PolarPaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_checkout_link(subscription(product_id="prod_1", customer_id="cus_1"))

        assert url == "https://polar.sh/checkout/1"
        body = api.json_body()
        assert body["products"] == ["prod_1"]
        assert body["customer_id"] == "cus_1"
        assert body["metadata"] == {"organization_id": "org_1", "user_id": "user_1"}

    async def test_portal(self, settings, api, http_client):
        api.add("POST", "/v1/customer-sessions", status=201, json={"customer_portal_url": "https://polar/p"})
        provider = PolarPaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_customer_portal_link(PortalRequest(customer_id="cus_1"))

        assert url == "https://polar/p"
        assert api.json_body() == {"customer_id": "cus_1"}


class TestCreem:
    async def test_checkout_uses_test_host(self, settings, api, http_client):
        api.add("POST", "/v1/checkouts", json={"checkout_url": "https://creem.io/c/1"})
        provider = CreemPaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_checkout_link(subscription(seats=5))

        assert url == "https://creem.io/c/1"
        assert api.last.url.host == "test-api.creem.io"
        assert api.last.headers["x-api-key"] == "test_creem_api_key"
        body = api.json_body()
        assert body["units"] == 5
        assert body["customer"] == {"email": "jane@example.com"}

    async def test_production_host(self, settings, api, http_client):
        settings.environment = "production"
        api.add("POST", "/v1/customers/billing", json={"customer_portal_link": "https://creem/p"})
        provider = CreemPaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_customer_portal_link(PortalRequest(customer_id="cus_1"))

        assert url == "https://creem/p"
        assert api.last.url.host == "api.creem.io"


class TestDodoPayments:
    async def test_checkout(self, settings, api, http_client):
        api.add("POST", "/test/v1/checkout-sessions", json={"checkout_url": "https://dodo/c/1"})
        provider = DodoPaymentsPaymentProvider(settings=settings, http_client=http_client)

        url = await provider.create_checkout_link(subscription(product_id="pdt_1"))

        assert url == "https://dodo/c/1"
        body = api.json_body()
        assert body["product_cart"] == [{"product_id": "pdt_1", "quantity": 1}]
        assert body["customer"] == {"email": "jane@example.com", "name": "Jane Q Doe"}
        assert body["subscription_data"] == {"trial_period_days": 14}

    async def test_checkout_existing_customer_one_time(self, settings, api, http_client):
        api.add("POST", "/test/v1/checkout-sessions", json={"checkout_url": "u"})
        provider = DodoPaymentsPaymentProvider(settings=settings, http_client=http_client)

        await provider.create_checkout_link(
            subscription(payment_type=PaymentType.ONE_TIME, customer_id="cus_1")
        )

        body = api.json_body()
        assert body["customer"] == {"customer_id": "cus_1"}
        assert "subscription_data" not in body

    async def test_portal_error(self, settings, api, http_client):
        api.add("POST", "/test/v1/customers/cus_1/portal", status=404, json={"message": "not found"})
        provider = DodoPaymentsPaymentProvider(settings=settings, http_client=http_client)

        with pytest.raises(ProviderError) as exc_info:
            await provider.create_customer_portal_link(PortalRequest(customer_id="cus_1"))

        assert exc_info.value.body == {"message": "not found"}


class TestTapCheckout:
    async def test_subscription_saves_card(self, settings, api, http_client):
        api.add("POST", "/v2/charges", json={"id": "chg_1", "transaction": {"url": "https://tap/pay/1"}})
        provider = TapPaymentProvider(
            settings=settings,
            http_client=http_client,
            prices={"42": TapPrice(amount=Decimal("9.99"), currency="KWD")},
        )

        url = await provider.create_checkout_link(subscription(seats=2))

        assert url == "https://tap/pay/1"
        body = api.json_body()
        assert body["save_card"] is True
        assert body["amount"] == pytest.approx(19.98)
        assert body["currency"] == "KWD"
        assert body["source"] == {"id": "src_all"}
        assert body["customer"] == {"email": "jane@example.com", "first_name": "Jane", "last_name": "Q Doe"}
        assert body["metadata"]["quantity"] == "2"
        assert body["metadata"]["type"] == "subscription"
        assert body["reference"]["order"].startswith("subscription_")

    async def test_no_url_returns_none(self, settings, api, http_client):
        api.add("POST", "/v2/charges", json={"id": "chg_1"})
        provider = TapPaymentProvider(
            settings=settings,
            http_client=http_client,
            prices={"42": TapPrice(amount=Decimal("1"))},
        )

        assert await provider.create_checkout_link(subscription(payment_type="one-time")) is None
        assert api.json_body()["save_card"] is False

    async def test_unpriced_product(self, settings, api, http_client):
        provider = TapPaymentProvider(settings=settings, http_client=http_client)

        with pytest.raises(ConfigurationError):
            await provider.create_checkout_link(subscription())

        assert api.requests == []

    async def test_no_portal(self, settings, api, http_client):
        provider = TapPaymentProvider(settings=settings, http_client=http_client)

        with pytest.raises(UnsupportedOperationError, match="customer portal"):
            await provider.create_customer_portal_link(PortalRequest(customer_id="cus_1"))

        assert api.requests == []
