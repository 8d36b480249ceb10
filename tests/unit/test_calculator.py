"""
Tests for the calculate_shipping pipeline.
"""
import copy

import pytest

from custom_shipping.core.exceptions import MissingOriginZipError
from custom_shipping.modules.shipping.calculator import (
    calculate_shipping,
    origin_address,
    resolve_origin_zip,
)
from custom_shipping.schemas.shipping import ApplicationConfig, QuoteRequest


def config_with(rules, **extra) -> ApplicationConfig:
    return ApplicationConfig.model_validate({"shipping_rules": rules, **extra})


class TestControlFlow:

    def test_no_rules_empty_response(self, sample_params):
        response = calculate_shipping(sample_params, ApplicationConfig())
        assert response.to_payload() == {"shipping_services": []}

    def test_no_rules_even_without_origin(self):
        params = QuoteRequest.model_validate({"to": {"zip": "04567000"}, "items": []})
        response = calculate_shipping(params, config_with([]))
        assert response.to_payload() == {"shipping_services": []}

    def test_no_destination_free_shipping_only(self, sample_config):
        params = QuoteRequest.model_validate({"items": [{"price": 10, "quantity": 1}]})
        response = calculate_shipping(params, sample_config)
        assert response.to_payload() == {"shipping_services": [], "free_shipping_from_value": 300}

    def test_no_destination_uses_all_zip_ranges(self):
        config = config_with([{"total_price": 0, "min_amount": 90, "zip_range": {"min": 80000000, "max": 89999999}}])
        response = calculate_shipping(QuoteRequest(), config)
        assert response.free_shipping_from_value == 90

    def test_missing_origin_zip_raises(self, sample_rules, sample_params):
        config = config_with(sample_rules)
        with pytest.raises(MissingOriginZipError) as exc_info:
            calculate_shipping(sample_params, config)

        assert exc_info.value.code == "CALCULATE_ERR"
        assert "merchant must configure the app" in exc_info.value.message

    def test_origin_without_digits_raises(self, sample_rules, sample_params):
        config = config_with(sample_rules, zip="n/a")
        with pytest.raises(MissingOriginZipError):
            calculate_shipping(sample_params, config)

    def test_fallback_origin_zip(self, sample_rules, sample_params):
        response = calculate_shipping(sample_params, config_with(sample_rules), fallback_origin_zip="01310-100")
        assert response.shipping_services[0].shipping_line.from_ == {"zip": "01310100"}

    def test_no_items_or_subtotal_free_shipping_only(self, sample_config):
        params = QuoteRequest.model_validate({"to": {"zip": "04567-000"}})
        response = calculate_shipping(params, sample_config)
        assert response.to_payload() == {"shipping_services": [], "free_shipping_from_value": 300}

    def test_subtotal_only_runs_pipeline(self, sample_config):
        params = QuoteRequest.model_validate({"to": {"zip": "04567-000"}, "subtotal": 350})
        response = calculate_shipping(params, sample_config)

        codes = {s.service_code: s.shipping_line.total_price for s in response.shipping_services}
        # Free regional PAC rule unlocked by the subtotal
        assert codes == {"PAC": 0, "SEDEX": 40}


class TestFullPipeline:

    def test_sample_quote(self, sample_params, sample_config):
        response = calculate_shipping(sample_params, sample_config)
        payload = response.to_payload()

        assert payload["free_shipping_from_value"] == 300
        assert [s["service_code"] for s in payload["shipping_services"]] == ["PAC", "SEDEX"]

        pac, sedex = payload["shipping_services"]
        assert pac["label"] == "Economy"
        assert pac["carrier"] == "Correios"
        assert pac["shipping_line"]["total_price"] == 15
        assert pac["shipping_line"]["price"] == 15
        assert pac["shipping_line"]["delivery_time"] == {"days": 5, "working_days": True}
        assert pac["shipping_line"]["from"] == {"zip": "01310100"}
        assert pac["shipping_line"]["to"]["zip"] == "04567-000"
        assert pac["shipping_line"]["to"]["name"] == "Buyer"
        assert "zip_range" not in pac["shipping_line"]

        assert sedex["label"] == "Express"
        assert sedex["carrier_doc_number"] == "34028316000103"
        assert sedex["shipping_line"]["total_price"] == 40

    def test_request_origin_wins(self, sample_params, sample_config):
        params = QuoteRequest.model_validate({
            **sample_params.model_dump(by_alias=True),
            "from": {"zip": "20040-020", "city": "Rio"},
        })
        response = calculate_shipping(params, sample_config)
        assert response.shipping_services[0].shipping_line.from_ == {"zip": "20040020", "city": "Rio"}

    def test_outside_regional_range(self, sample_params, sample_config):
        params = QuoteRequest.model_validate({**sample_params.model_dump(by_alias=True), "to": {"zip": "90000-000"}})
        response = calculate_shipping(params, sample_config)

        pac = response.shipping_services[0]
        assert pac.service_code == "PAC"
        assert pac.shipping_line.total_price == 25
        assert response.free_shipping_from_value is None

    def test_service_code_filter(self, sample_params, sample_config):
        params = sample_params.model_copy(update={"service_code": "SEDEX"})
        response = calculate_shipping(params, sample_config)
        assert [s.service_code for s in response.shipping_services] == ["SEDEX"]

    def test_excess_weight_billed(self, sample_config):
        params = QuoteRequest.model_validate({
            "to": {"zip": "04567-000"},
            "items": [{"price": 10, "quantity": 3, "weight": {"value": 4, "unit": "kg"}}],
        })
        response = calculate_shipping(params, sample_config)
        sedex = next(s for s in response.shipping_services if s.service_code == "SEDEX")
        # 12kg against a 10kg cap at 3.0 per kg
        assert sedex.shipping_line.total_price == pytest.approx(46)
        assert sedex.shipping_line.price == 40

    def test_amount_tax(self):
        config = config_with([{"service_code": "X", "total_price": 10, "amount_tax": 5}], zip="01310100")
        params = QuoteRequest.model_validate({"to": {"zip": "04567000"}, "subtotal": 200})
        response = calculate_shipping(params, config)
        assert response.shipping_services[0].shipping_line.total_price == pytest.approx(20)

    def test_no_eligible_rules(self, sample_config):
        params = QuoteRequest.model_validate({
            "to": {"zip": "04567-000"},
            "items": [{"price": 10, "quantity": 1}],
            "service_code": "UNKNOWN",
        })
        response = calculate_shipping(params, sample_config)
        assert response.shipping_services == []
        assert response.free_shipping_from_value == 300

    def test_non_object_rules_ignored(self, sample_params):
        config = ApplicationConfig.model_validate({
            "shipping_rules": [None, "free", 42, {"service_code": "X", "total_price": 9}],
            "zip": "01310100",
        })
        response = calculate_shipping(sample_params, config)
        assert [s.service_code for s in response.shipping_services] == ["X"]

    def test_custom_delivery_time_and_divisor(self):
        config = config_with([{"service_code": "X", "max_cubic_weight": 3}], zip="01310100")
        params = QuoteRequest.model_validate({
            "to": {"zip": "04567000"},
            "items": [{
                "price": 10,
                "quantity": 1,
                "dimensions": {
                    "width": {"value": 20, "unit": "cm"},
                    "height": {"value": 20, "unit": "cm"},
                    "length": {"value": 20, "unit": "cm"},
                },
            }],
        })
        # 8000 / 2000 = 4kg is over the cap, 8000 / 6000 is not
        assert calculate_shipping(params, config, cubic_weight_divisor=2000).shipping_services == []
        response = calculate_shipping(params, config, default_delivery_time=9)
        assert response.shipping_services[0].shipping_line.delivery_time == 9


class TestIdempotence:

    def test_repeated_calls_same_result(self, sample_params, sample_config):
        first = calculate_shipping(sample_params, sample_config).to_payload()
        second = calculate_shipping(sample_params, sample_config).to_payload()
        assert first == second

    def test_config_not_mutated(self, sample_params, sample_config):
        before = copy.deepcopy(sample_config.model_dump())
        calculate_shipping(sample_params, sample_config)
        assert sample_config.model_dump() == before


class TestOriginHelpers:

    def test_resolve_prefers_request(self):
        params = QuoteRequest.model_validate({"from": {"zip": "20040-020"}})
        config = ApplicationConfig(zip="01310-100")
        assert resolve_origin_zip(params, config, "99999999") == "20040020"

    def test_resolve_config_then_fallback(self):
        assert resolve_origin_zip(QuoteRequest(), ApplicationConfig(zip="01310-100")) == "01310100"
        assert resolve_origin_zip(QuoteRequest(), ApplicationConfig(), "88000-000") == "88000000"
        assert resolve_origin_zip(QuoteRequest(), ApplicationConfig()) == ""

    def test_origin_address_keeps_fields(self):
        params = QuoteRequest.model_validate({"from": {"zip": "20040-020", "street": "Av. Rio Branco"}})
        assert origin_address(params, "20040020") == {"zip": "20040020", "street": "Av. Rio Branco"}
