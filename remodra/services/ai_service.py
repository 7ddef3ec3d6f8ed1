"""
OpenAI-backed helpers for cost analysis, job descriptions and the client portal assistant
"""

import json
import logging
from typing import Any, Optional

import httpx

from .. import config

logger = logging.getLogger(__name__)


class AIServiceUnavailable(Exception):
    """Raised when no API key is configured"""


class AIServiceError(Exception):
    """Raised when the upstream API fails or returns unusable content"""


def is_configured() -> bool:
    return bool(config.OPENAI_API_KEY)


async def chat_completion(
    messages: list[dict[str, str]],
    max_tokens: int = 800,
    temperature: float = 0.7,
    json_response: bool = False,
) -> str:
    """Call the Chat Completions API and return the first message's content"""
    if not is_configured():
        raise AIServiceUnavailable("OpenAI API key not configured")

    payload: dict[str, Any] = {
        "model": config.OPENAI_MODEL,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if json_response:
        payload["response_format"] = {"type": "json_object"}

    try:
        async with httpx.AsyncClient(timeout=config.OPENAI_TIMEOUT) as client:
            response = await client.post(
                f"{config.OPENAI_BASE_URL}/chat/completions",
                headers={
                    "Authorization": f"Bearer {config.OPENAI_API_KEY}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ OpenAI request failed: {e}")
        raise AIServiceError("AI service request failed") from e

    if response.status_code != 200:
        logger.error(f"❌ OpenAI API error: HTTP {response.status_code} - {response.text[:200]}")
        raise AIServiceError(f"OpenAI API error: {response.status_code}")

    try:
        return response.json()["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, ValueError) as e:
        raise AIServiceError("Unexpected response from AI service") from e


def _parse_json(content: str) -> dict:
    try:
        data = json.loads(content)
    except ValueError as e:
        raise AIServiceError("AI service returned invalid JSON") from e
    if not isinstance(data, dict):
        raise AIServiceError("AI service returned invalid JSON")
    return data


def material_subtotal(materials: list[dict]) -> float:
    return round(sum(float(m["quantity"]) * float(m["unitPrice"]) for m in materials), 2)


def _material_lines(materials: list[dict]) -> str:
    return "\n".join(
        f"- {m['name']}: {m['quantity']} x ${float(m['unitPrice']):.2f}" for m in materials
    )


async def analyze_job_cost(params: dict) -> dict:
    """
    Cost analysis for a job. Material cost is computed locally; the model
    estimates labor and supplies the recommendations.
    """
    materials = params["materials"]
    material_cost = material_subtotal(materials)

    content = await chat_completion(
        [
            {
                "role": "system",
                "content": "You are a construction cost estimator. Reply with JSON only.",
            },
            {
                "role": "user",
                "content": (
                    f"Service: {params['serviceType']}\n"
                    f"Description: {params.get('description') or 'n/a'}\n"
                    f"Materials:\n{_material_lines(materials)}\n"
                    f"Material cost: ${material_cost:.2f}\n"
                    'Return {"laborCost": number, "laborHours": number, '
                    '"recommendations": [string], "breakdown": {string: number}}'
                ),
            },
        ],
        json_response=True,
    )
    data = _parse_json(content)

    try:
        labor_cost = round(float(data.get("laborCost") or 0), 2)
    except (TypeError, ValueError):
        labor_cost = 0.0

    breakdown = data.get("breakdown") if isinstance(data.get("breakdown"), dict) else {}
    recommendations = data.get("recommendations")
    if not isinstance(recommendations, list):
        recommendations = []

    return {
        "materialCost": material_cost,
        "laborCost": labor_cost,
        "laborHours": data.get("laborHours"),
        "totalCost": round(material_cost + labor_cost, 2),
        "breakdown": {"materials": material_cost, "labor": labor_cost, **breakdown},
        "recommendations": recommendations,
    }


async def generate_job_description(params: dict) -> str:
    return await chat_completion(
        [
            {"role": "system", "content": "Write concise, professional job descriptions for contractors."},
            {
                "role": "user",
                "content": (
                    f"Service: {params['serviceType']}\n"
                    f"Materials:\n{_material_lines(params['materials'])}\n"
                    f"Notes: {params.get('description') or 'n/a'}"
                ),
            },
        ],
        max_tokens=500,
    )


async def generate_professional_description(params: dict) -> str:
    return await chat_completion(
        [
            {"role": "system", "content": "Turn field notes into a professional job description."},
            {
                "role": "user",
                "content": (
                    f"Service: {params.get('serviceType') or 'general'}\n"
                    f"Notes: {params['appointmentNotes']}"
                ),
            },
        ],
        max_tokens=500,
    )


async def analyze_project(project_data: dict) -> dict:
    content = await chat_completion(
        [
            {"role": "system", "content": "You review contractor projects. Reply with JSON only."},
            {
                "role": "user",
                "content": (
                    f"Project: {json.dumps(project_data, default=str)}\n"
                    'Return {"summary": string, "risks": [string], "suggestions": [string], '
                    '"estimatedDurationDays": number}'
                ),
            },
        ],
        json_response=True,
    )
    return _parse_json(content)


async def generate_sharing_content(project: dict, settings: Optional[dict] = None) -> dict:
    content = await chat_completion(
        [
            {
                "role": "system",
                "content": "Write social media posts showcasing finished contractor work. Reply with JSON only.",
            },
            {
                "role": "user",
                "content": (
                    f"Project: {json.dumps(project, default=str)}\n"
                    f"Settings: {json.dumps(settings or {})}\n"
                    'Return {"title": string, "description": string, "hashtags": [string]}'
                ),
            },
        ],
        json_response=True,
    )
    return _parse_json(content)


async def client_portal_chat(
    message: str, client_context: dict, conversation_history: Optional[list] = None
) -> str:
    """Short answers for clients browsing their portal"""
    messages = [
        {
            "role": "system",
            "content": (
                "You answer client questions about their projects, estimates and invoices "
                f"in one or two sentences. Client data: {json.dumps(client_context, default=str)}"
            ),
        }
    ]
    for entry in (conversation_history or [])[-10:]:
        if isinstance(entry, dict) and entry.get("role") in ("user", "assistant"):
            messages.append({"role": entry["role"], "content": str(entry.get("content", ""))})
    messages.append({"role": "user", "content": message})

    return await chat_completion(messages, max_tokens=50, temperature=0.9)
