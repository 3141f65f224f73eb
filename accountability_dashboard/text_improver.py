"""
Optional text improvement for delivery descriptions and results.

Sends the text to the Gemini ``generateContent`` REST endpoint and returns
the rewritten text. Every failure (no API key, network error, bad response)
is logged and resolves to None, which callers treat as "leave the text
unchanged". Nothing in the aggregation or persistence code depends on this
module.
"""

import logging
from typing import Literal, Optional

import requests

from .config import (
    GEMINI_API_KEY,
    GEMINI_ENDPOINT,
    GEMINI_MODEL,
    GEMINI_TEMPERATURE,
    IMPROVE_MIN_LENGTH,
)

logger = logging.getLogger(__name__)

ImproveMode = Literal["actions", "results"]

SYSTEM_INSTRUCTION = (
    "Você é um especialista em relatórios governamentais e técnicos de TI. "
    "Sua tarefa é melhorar a redação de um texto para um relatório oficial de "
    "prestação de contas (Relatório de Gestão). "
    "Use uma linguagem formal, impessoal, clara e objetiva. Corrija erros gramaticais. "
    "Mantenha os fatos, mas melhore a fluidez e o profissionalismo."
)

_PROMPTS = {
    "actions": "Melhore a seguinte descrição de 'Ações Realizadas':\n\n{text}",
    "results": (
        "Melhore a seguinte descrição de 'Resultados Alcançados' "
        "(focando em impacto e benefícios):\n\n{text}"
    ),
}


def build_payload(text: str, mode: ImproveMode) -> dict:
    """Request body for generateContent."""
    prompt = _PROMPTS[mode].format(text=text)
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": GEMINI_TEMPERATURE},
    }


def extract_text(data: dict) -> Optional[str]:
    """Pull the first candidate's text out of a generateContent response."""
    candidates = data.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts).strip()
    return text or None


def improve_text(
    text: str,
    mode: ImproveMode,
    api_key: Optional[str] = None,
    model: str = GEMINI_MODEL,
    session: Optional[requests.Session] = None,
) -> Optional[str]:
    """Return an improved version of ``text``, or None to keep the original.

    ``mode`` is 'actions' for descriptions of what was done and 'results'
    for outcome narratives. Texts shorter than five characters are not sent.
    The request has no timeout and is not retried.
    """
    if not text or len(text.strip()) < IMPROVE_MIN_LENGTH:
        return None
    if mode not in _PROMPTS:
        raise ValueError(f"Unknown improvement mode: {mode}")

    api_key = api_key or GEMINI_API_KEY
    if not api_key:
        logger.warning("API key missing for Gemini, text improvement unavailable")
        return None

    http = session or requests
    url = GEMINI_ENDPOINT.format(model=model)
    try:
        response = http.post(
            url,
            params={"key": api_key},
            json=build_payload(text, mode),
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        improved = extract_text(response.json())
    except (requests.RequestException, ValueError):
        logger.exception("Error calling Gemini")
        return None

    if improved is None:
        logger.warning("Gemini returned no text")
    return improved
