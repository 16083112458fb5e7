# -*- coding: utf-8 -*-
"""Diet — meal estimation via the Gemini generateContent API."""

from __future__ import annotations

import ast
import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import BaseModel, ValidationError

from ..config import settings
from .models import EstimationStatus, MealAnalysis

logger = logging.getLogger(__name__)


class EstimationError(RuntimeError):
    """The estimation service failed or returned something unusable."""


class EstimationResult(BaseModel):
    status: EstimationStatus
    estimate: Optional[MealAnalysis] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == EstimationStatus.ok

    @classmethod
    def success(cls, estimate: MealAnalysis) -> "EstimationResult":
        status = EstimationStatus.not_food if estimate.is_unknown else EstimationStatus.ok
        return cls(status=status, estimate=estimate)

    @classmethod
    def failure(cls, error: str) -> "EstimationResult":
        return cls(status=EstimationStatus.failed, error=error)

    def unwrap(self) -> MealAnalysis:
        if self.status == EstimationStatus.ok and self.estimate is not None:
            return self.estimate
        if self.status == EstimationStatus.not_food:
            raise EstimationError("No food recognized")
        raise EstimationError(self.error or "Estimation failed")


@dataclass(frozen=True)
class GeminiSettings:
    base_url: str
    model: str
    api_key: Optional[str]
    timeout: float


def resolve_gemini_settings() -> GeminiSettings:
    return GeminiSettings(
        base_url=settings.gemini_base_url.rstrip("/"),
        model=settings.gemini_model,
        api_key=settings.gemini_api_key,
        timeout=settings.gemini_timeout,
    )


ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "mealName": {
            "type": "STRING",
            "description": "A short, descriptive name for the overall meal (e.g., 'Grilled Chicken Salad').",
        },
        "items": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "calories": {"type": "NUMBER"},
                },
                "required": ["name", "calories"],
            },
        },
        "totalCalories": {
            "type": "NUMBER",
            "description": "The estimated total calories for the entire meal.",
        },
        "macronutrients": {
            "type": "OBJECT",
            "properties": {
                "protein": {"type": "NUMBER", "description": "Estimated protein in grams"},
                "carbs": {"type": "NUMBER", "description": "Estimated carbohydrates in grams"},
                "fat": {"type": "NUMBER", "description": "Estimated fat in grams"},
            },
            "required": ["protein", "carbs", "fat"],
        },
        "confidenceScore": {
            "type": "NUMBER",
            "description": "A score from 0 to 1 indicating confidence in the food identification.",
        },
    },
    "required": ["mealName", "items", "totalCalories", "macronutrients", "confidenceScore"],
}

IMAGE_PROMPT = (
    "Analyze this image of food. Identify the meal, break down the visible components, "
    "estimate the portion sizes and calculate the approximate nutritional content."
)
IMAGE_SYSTEM = (
    "You are an expert nutritionist. Be conservative and realistic with calorie estimates. "
    "If the image is not food, return a mealName of 'Unknown' and 0 calories."
)
TEXT_SYSTEM = (
    "You are an expert nutritionist. Provide realistic calorie estimates for the described food items. "
    "If the description is not food, return a mealName of 'Unknown' and 0 calories."
)

_DATA_URL_RE = re.compile(r"^data:image/(png|jpeg|jpg|webp|heic);base64,", re.IGNORECASE)


def _text_prompt(description: str) -> str:
    return (
        f'Analyze this meal description or ingredient list: "{description}". '
        "Identify the items, estimate standard portion sizes if not specified, "
        "and calculate the approximate nutritional content."
    )


def decode_image(image: Union[bytes, str]) -> bytes:
    """Accept raw bytes, plain base64, or a ``data:image/...;base64,`` URL."""
    if isinstance(image, bytes):
        return image
    cleaned = _DATA_URL_RE.sub("", image.strip())
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 image: {exc}") from exc


# ---------- model output parsing ----------


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
# Quoted strings match first so commas inside them are kept.
_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')
_JSON_DECODER = json.JSONDecoder()


def _strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def _sanitize_json_like(text: str) -> str:
    cleaned = text.replace("“", "\"").replace("”", "\"").replace("‘", "'").replace("’", "'")
    cleaned = _TRAILING_COMMA_RE.sub(lambda m: m.group(1) or m.group(2), cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"-?\bInfinity\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def _as_python_literal(text: str) -> str:
    py = re.sub(r"\bnull\b", "None", text, flags=re.IGNORECASE)
    py = re.sub(r"\btrue\b", "True", py, flags=re.IGNORECASE)
    return re.sub(r"\bfalse\b", "False", py, flags=re.IGNORECASE)


def _parse_model_output_json(content: str) -> Dict[str, Any]:
    """Decode the analysis object from a Gemini reply.

    With ``responseSchema`` set the reply is normally bare JSON. Replies that
    slip past the schema come back fenced, wrapped in a sentence, with
    trailing commas, or as a single-quoted Python dict.
    """
    cleaned = _sanitize_json_like(_strip_fences(content))
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise EstimationError("Model output does not contain a JSON object")

    try:
        return _JSON_DECODER.raw_decode(cleaned, start)[0]
    except json.JSONDecodeError as exc:
        json_error = exc

    try:
        parsed = ast.literal_eval(_as_python_literal(cleaned[start : end + 1]))
    except Exception as exc:
        raise EstimationError(f"Failed to parse model JSON: {json_error}") from exc
    if not isinstance(parsed, dict):
        raise EstimationError("Model output is not a JSON object")
    return parsed


_NUM_RE = re.compile(r"-?\d+(?:\.\d+)?")


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        m = _NUM_RE.search(value.replace(",", ""))
        return float(m.group(0)) if m else None
    return None


def _first_present(obj: Dict[str, Any], keys: List[str]) -> Any:
    for k in keys:
        if k in obj and obj[k] is not None:
            return obj[k]
    return None


def _pick_num(obj: Dict[str, Any], keys: List[str]) -> Optional[float]:
    for k in keys:
        if k in obj:
            val = _coerce_float(obj.get(k))
            if val is not None:
                return val
    return None


def _normalize_items(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    out: List[Dict[str, Any]] = []
    for raw in items:
        if isinstance(raw, str) and raw.strip():
            out.append({"name": raw.strip(), "calories": 0.0})
            continue
        if not isinstance(raw, dict):
            continue
        name = _first_present(raw, ["name", "food", "item", "dish", "title"])
        name = str(name).strip() if name is not None else ""
        calories = _pick_num(raw, ["calories", "calories_kcal", "kcal", "energy_kcal", "energy"])
        out.append({"name": name or "unknown", "calories": max(0.0, calories or 0.0)})
    return out


def _normalize_macros(raw: Any) -> Dict[str, float]:
    source = raw if isinstance(raw, dict) else {}
    protein = _pick_num(source, ["protein", "protein_g"])
    carbs = _pick_num(source, ["carbs", "carbs_g", "carbohydrates", "carb"])
    fat = _pick_num(source, ["fat", "fat_g", "lipid"])
    return {
        "protein": max(0.0, protein or 0.0),
        "carbs": max(0.0, carbs or 0.0),
        "fat": max(0.0, fat or 0.0),
    }


def _normalize_analysis(parsed: Dict[str, Any]) -> Dict[str, Any]:
    """Map loosely shaped model output onto the ``MealAnalysis`` schema."""
    meal_name = _first_present(parsed, ["mealName", "meal_name", "meal", "name", "title"])
    meal_name = str(meal_name).strip() if meal_name is not None else ""

    items = _normalize_items(_first_present(parsed, ["items", "foods", "food"]))

    total = _pick_num(parsed, ["totalCalories", "total_calories", "calories", "kcal", "energy"])
    if total is None:
        total = sum(i["calories"] for i in items)

    macros_raw = _first_present(parsed, ["macronutrients", "macros", "nutrition"])
    if macros_raw is None:
        macros_raw = parsed

    confidence = _pick_num(parsed, ["confidenceScore", "confidence_score", "confidence", "score"])
    if confidence is not None and 1 < confidence <= 100:
        confidence = confidence / 100.0
    confidence = max(0.0, min(1.0, confidence or 0.0))

    return {
        "mealName": meal_name or "Meal",
        "items": items,
        "totalCalories": max(0.0, total),
        "macronutrients": _normalize_macros(macros_raw),
        "confidenceScore": confidence,
    }


def parse_analysis(content: str) -> MealAnalysis:
    parsed = _parse_model_output_json(content or "")
    try:
        return MealAnalysis.model_validate(_normalize_analysis(parsed))
    except ValidationError as exc:
        raise EstimationError(f"Model output failed validation: {exc}") from exc


# ---------- Gemini transport ----------


def _extract_error_from_gemini_response(data: object) -> str | None:
    """Human-readable error from a Gemini error body or a blocked prompt."""
    if not isinstance(data, dict):
        return None

    err = data.get("error")
    if isinstance(err, dict):
        message = err.get("message") if isinstance(err.get("message"), str) else None
        status = err.get("status") if isinstance(err.get("status"), str) else "GeminiError"
        code = err.get("code") if isinstance(err.get("code"), int) else None
        prefix = f"{status} ({code})" if code is not None else status
        return f"{prefix}: {message or 'unknown error'}"

    feedback = data.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return f"Prompt blocked: {feedback['blockReason']}"
    return None


def _extract_text_from_gemini_response(data: object) -> str:
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list):
        return ""
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            continue
        text = "".join(
            part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        if text.strip():
            return text
    return ""


def _generate(
    parts: List[Dict[str, Any]],
    system_instruction: str,
    *,
    cfg: GeminiSettings,
    client: httpx.Client | None = None,
) -> str:
    if not cfg.api_key:
        raise EstimationError("GEMINI_API_KEY not set")

    url = f"{cfg.base_url}/models/{cfg.model}:generateContent"
    payload: Dict[str, Any] = {
        "systemInstruction": {"parts": [{"text": system_instruction}]},
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": ANALYSIS_SCHEMA,
        },
    }
    headers = {"Content-Type": "application/json", "x-goog-api-key": cfg.api_key}

    owns_client = client is None
    http = client or httpx.Client(timeout=cfg.timeout, follow_redirects=True)
    try:
        resp = http.post(url, headers=headers, json=payload)
    except httpx.HTTPError as exc:
        raise EstimationError(f"Gemini request failed: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    try:
        data = resp.json()
    except ValueError:
        data = None

    error = _extract_error_from_gemini_response(data)
    if error:
        raise EstimationError(error)
    if resp.status_code >= 400:
        snippet = (resp.text or "").replace("\n", " ").strip()[:200]
        raise EstimationError(f"Gemini returned HTTP {resp.status_code}: {snippet}")
    if data is None:
        raise EstimationError("Gemini returned a non-JSON response")

    text = _extract_text_from_gemini_response(data)
    if not text:
        raise EstimationError("No response text from Gemini")
    return text


def _estimate(
    parts: List[Dict[str, Any]],
    system_instruction: str,
    what: str,
    cfg: GeminiSettings | None,
    client: httpx.Client | None,
) -> EstimationResult:
    cfg = cfg or resolve_gemini_settings()
    try:
        content = _generate(parts, system_instruction, cfg=cfg, client=client)
        analysis = parse_analysis(content)
    except EstimationError as exc:
        logger.warning("Gemini %s analysis failed: %s", what, exc)
        return EstimationResult.failure(str(exc))
    return EstimationResult.success(analysis)


def estimate_from_image(
    image: Union[bytes, str],
    mime: str = "image/jpeg",
    *,
    cfg: GeminiSettings | None = None,
    client: httpx.Client | None = None,
) -> EstimationResult:
    try:
        image_bytes = decode_image(image)
    except ValueError as exc:
        return EstimationResult.failure(str(exc))
    parts = [
        {"inlineData": {"mimeType": mime, "data": base64.b64encode(image_bytes).decode("ascii")}},
        {"text": IMAGE_PROMPT},
    ]
    return _estimate(parts, IMAGE_SYSTEM, "image", cfg, client)


def estimate_from_text(
    description: str,
    *,
    cfg: GeminiSettings | None = None,
    client: httpx.Client | None = None,
) -> EstimationResult:
    if not description or not description.strip():
        return EstimationResult.failure("Empty meal description")
    parts = [{"text": _text_prompt(description.strip())}]
    return _estimate(parts, TEXT_SYSTEM, "text", cfg, client)
