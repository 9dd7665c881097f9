from fastapi import APIRouter, UploadFile, File, Form, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
import logging

from speech_relay.config import get_settings
from speech_relay.services.audio_store import get_audio_store
from speech_relay.services.outcome import Outcome
from speech_relay.services.speech_service import transcribe, synthesize
from speech_relay.services.translation_service import translate_text

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
def health():
    s = get_settings()
    return {
        "status": "ok",
        "region": s.AZURE_SPEECH_REGION,
        "stt_language": s.STT_LANGUAGE,
        "tts_voice": s.TTS_VOICE,
    }

@router.post("/api/record_audio")
async def record_audio(
    audio_data: UploadFile | None = File(None, alias="audioData"),
    file_name: str | None = Form(None, alias="fileName"),
):
    """
    Transcribe an uploaded clip and translate the transcript.
    Adapter failures keep the 200 shape: the field is null and errors.<stage>
    carries the reason.
    """
    try:
        if audio_data is None or not (file_name or "").strip():
            return JSONResponse({"error": "Audio data and file name are required"}, status_code=400)

        data = await audio_data.read()
        store = get_audio_store()
        scratch = store.write_scratch(file_name, data)
        try:
            transcription = await transcribe(data)
        finally:
            store.discard(scratch)

        errors: dict[str, str] = {}
        if transcription.ok:
            translation = await translate_text(transcription.value, get_settings().TRANSLATE_TARGET)
            if not translation.ok:
                errors[translation.stage] = translation.error
        else:
            errors[transcription.stage] = transcription.error
            errors["translation"] = "skipped: transcription failed"
            translation = Outcome()

        return {
            "message": "Transcription successful" if not errors else "Transcription completed with errors",
            "audioTranscription": transcription.value,
            "translatedText": translation.value,
            "errors": errors,
        }
    except Exception as e:
        logger.exception("Error processing audio")
        return JSONResponse({"error": "Failed to process audio", "detail": str(e)}, status_code=500)

class SynthesizeIn(BaseModel):
    text: str | None = None

async def _read_synthesize_body(request: Request) -> SynthesizeIn | None:
    """Parsed body, or None when it is missing, not JSON or has a non-string text."""
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return SynthesizeIn.model_validate(payload)
    except ValidationError:
        return None

@router.post("/api/synthesize")
async def synthesize_text(request: Request):
    """
    Synthesize {"text": ...} and return the URL of the stored WAV. Any body
    without usable text is a 400 {error}, never FastAPI's 422.
    """
    try:
        body = await _read_synthesize_body(request)
        text = (body.text if body else None) or ""
        if not text.strip():
            return JSONResponse({"error": "Text is required for synthesis"}, status_code=400)

        audio = await synthesize(text)
        if not audio.ok:
            return JSONResponse({"error": "Failed to synthesize text"}, status_code=500)

        name = get_audio_store().save_output(audio.value)
        base = get_settings().PUBLIC_BASE_URL.rstrip("/")
        return {"audioURL": f"{base}/audio/{name}"}
    except Exception:
        logger.exception("Error synthesizing text")
        return JSONResponse({"error": "Failed to synthesize text"}, status_code=500)
