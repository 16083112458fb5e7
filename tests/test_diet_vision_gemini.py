# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import json
import unittest

import httpx

from snapcalorie.diet.models import EstimationStatus
from snapcalorie.diet.vision import (
    EstimationError,
    GeminiSettings,
    _extract_error_from_gemini_response,
    decode_image,
    estimate_from_image,
    estimate_from_text,
)

CFG = GeminiSettings(base_url="https://gemini.test/v1beta", model="gemini-2.5-flash", api_key="k", timeout=5)

ANALYSIS = {
    "mealName": "Grilled Chicken Salad",
    "items": [{"name": "chicken breast", "calories": 280}, {"name": "greens", "calories": 40}],
    "totalCalories": 320,
    "macronutrients": {"protein": 42, "carbs": 10, "fat": 12},
    "confidenceScore": 0.85,
}


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}]}


def client_returning(status: int, body: object, seen: list | None = None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=str(body))

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestGeminiErrors(unittest.TestCase):
    def test_extracts_error_payload(self) -> None:
        msg = _extract_error_from_gemini_response(
            {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}}
        )
        self.assertIsNotNone(msg)
        assert msg is not None
        self.assertIn("RESOURCE_EXHAUSTED", msg)
        self.assertIn("429", msg)
        self.assertIn("Resource has been exhausted", msg)

    def test_blocked_prompt(self) -> None:
        msg = _extract_error_from_gemini_response({"promptFeedback": {"blockReason": "SAFETY"}})
        self.assertEqual(msg, "Prompt blocked: SAFETY")

    def test_plain_success_has_no_error(self) -> None:
        self.assertIsNone(_extract_error_from_gemini_response(gemini_body("{}")))


class TestEstimateFromText(unittest.TestCase):
    def test_success(self) -> None:
        seen: list = []
        with client_returning(200, gemini_body(json.dumps(ANALYSIS)), seen) as client:
            result = estimate_from_text("chicken salad", cfg=CFG, client=client)

        self.assertEqual(result.status, EstimationStatus.ok)
        self.assertTrue(result.ok)
        assert result.estimate is not None
        self.assertEqual(result.estimate.total_calories, 320.0)
        self.assertEqual(result.unwrap().meal_name, "Grilled Chicken Salad")

        request = seen[0]
        self.assertEqual(str(request.url), "https://gemini.test/v1beta/models/gemini-2.5-flash:generateContent")
        self.assertEqual(request.headers["x-goog-api-key"], "k")
        payload = json.loads(request.content)
        self.assertEqual(payload["generationConfig"]["responseMimeType"], "application/json")
        self.assertIn("chicken salad", payload["contents"][0]["parts"][0]["text"])

    def test_not_food(self) -> None:
        body = gemini_body(json.dumps({**ANALYSIS, "mealName": "Unknown", "items": [], "totalCalories": 0}))
        with client_returning(200, body) as client:
            result = estimate_from_text("a rock", cfg=CFG, client=client)
        self.assertEqual(result.status, EstimationStatus.not_food)
        with self.assertRaises(EstimationError):
            result.unwrap()

    def test_http_error_is_failure(self) -> None:
        body = {"error": {"code": 403, "message": "API key not valid", "status": "PERMISSION_DENIED"}}
        with client_returning(403, body) as client, self.assertLogs("snapcalorie.diet.vision", level="WARNING"):
            result = estimate_from_text("toast", cfg=CFG, client=client)
        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("API key not valid", result.error or "")
        self.assertIsNone(result.estimate)

    def test_non_json_error_page(self) -> None:
        with client_returning(502, "<html>bad gateway</html>") as client:
            result = estimate_from_text("toast", cfg=CFG, client=client)
        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("502", result.error or "")

    def test_empty_candidates(self) -> None:
        with client_returning(200, {"candidates": []}) as client:
            result = estimate_from_text("toast", cfg=CFG, client=client)
        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("No response text", result.error or "")

    def test_unparseable_text(self) -> None:
        with client_returning(200, gemini_body("I think this is toast.")) as client:
            result = estimate_from_text("toast", cfg=CFG, client=client)
        self.assertEqual(result.status, EstimationStatus.failed)

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            result = estimate_from_text("toast", cfg=CFG, client=client)
        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("connection refused", result.error or "")

    def test_unhashable_literal_key_is_failure(self) -> None:
        with client_returning(200, gemini_body("{'mealName': 'x', {[1]: 2}: 3}")) as client:
            result = estimate_from_text("pizza", cfg=CFG, client=client)

        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("Failed to parse model JSON", result.error or "")

    def test_missing_api_key(self) -> None:
        cfg = GeminiSettings(base_url=CFG.base_url, model=CFG.model, api_key=None, timeout=5)
        result = estimate_from_text("toast", cfg=cfg)
        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("GEMINI_API_KEY", result.error or "")

    def test_blank_description(self) -> None:
        self.assertEqual(estimate_from_text("   ", cfg=CFG).status, EstimationStatus.failed)


class TestEstimateFromImage(unittest.TestCase):
    def test_sends_inline_image(self) -> None:
        seen: list = []
        image = b"\xff\xd8\xff\xe0fake-jpeg"
        data_url = "data:image/jpeg;base64," + base64.b64encode(image).decode("ascii")
        with client_returning(200, gemini_body(json.dumps(ANALYSIS)), seen) as client:
            result = estimate_from_image(data_url, cfg=CFG, client=client)

        self.assertTrue(result.ok)
        parts = json.loads(seen[0].content)["contents"][0]["parts"]
        self.assertEqual(parts[0]["inlineData"]["mimeType"], "image/jpeg")
        self.assertEqual(base64.b64decode(parts[0]["inlineData"]["data"]), image)

    def test_decode_image(self) -> None:
        raw = b"png-bytes"
        encoded = base64.b64encode(raw).decode("ascii")
        self.assertEqual(decode_image(raw), raw)
        self.assertEqual(decode_image(encoded), raw)
        self.assertEqual(decode_image("data:image/png;base64," + encoded), raw)
        with self.assertRaises(ValueError):
            decode_image("not base64 at all!")

    def test_undecodable_image_is_failure(self) -> None:
        seen: list = []
        with client_returning(200, gemini_body(json.dumps(ANALYSIS)), seen) as client:
            result = estimate_from_image("not base64 at all!", cfg=CFG, client=client)

        self.assertEqual(result.status, EstimationStatus.failed)
        self.assertIn("Invalid base64", result.error or "")
        self.assertEqual(seen, [])


if __name__ == "__main__":
    unittest.main()
