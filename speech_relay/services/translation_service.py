import asyncio, logging, uuid

import requests

from speech_relay.config import get_settings
from speech_relay.exceptions import TranslationError
from speech_relay.services.outcome import Outcome

logger = logging.getLogger(__name__)

def _translate_rest(text: str, target: str) -> str:
    """Azure Translator v3, one text per call."""
    s = get_settings()
    params = {"api-version": "3.0", "to": target}
    if s.TRANSLATE_SOURCE:
        params["from"] = s.TRANSLATE_SOURCE
    headers = {
        "Ocp-Apim-Subscription-Key": s.translator_key,
        "Ocp-Apim-Subscription-Region": s.translator_region,
        "Content-Type": "application/json",
        "X-ClientTraceId": uuid.uuid4().hex,
    }
    r = requests.post(
        f"{s.AZURE_TRANSLATOR_ENDPOINT.rstrip('/')}/translate",
        params=params,
        headers=headers,
        json=[{"Text": text}],
        timeout=s.REQUEST_TIMEOUT_SECS,
    )
    r.raise_for_status()
    try:
        return r.json()[0]["translations"][0]["text"]
    except (ValueError, LookupError, TypeError) as e:
        raise TranslationError(f"Unexpected translator response: {r.text[:200]}", e) from e

async def translate_text(text: str, target: str = "en") -> Outcome[str]:
    if not (text or "").strip():
        return Outcome.success("")
    try:
        translated = await asyncio.to_thread(_translate_rest, text, target)
    except Exception as e:
        logger.exception("Error translating text")
        return Outcome.failure(TranslationError.stage, str(e))
    return Outcome.success(translated)
