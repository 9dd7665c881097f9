import asyncio, logging, threading
from typing import List
from xml.sax.saxutils import escape, quoteattr

import requests
import azure.cognitiveservices.speech as speechsdk

from speech_relay.config import get_settings
from speech_relay.exceptions import SynthesisError, TranscriptionError
from speech_relay.services.outcome import Outcome

logger = logging.getLogger(__name__)

# STT_ENCODING -> SDK container format; WebM has no dedicated container so it
# goes through the GStreamer "ANY" decoder.
_CONTAINER_FORMATS = {
    "WEBM_OPUS": "ANY",
    "OGG_OPUS": "OGG_OPUS",
    "MP3": "MP3",
    "FLAC": "FLAC",
    "MULAW": "MULAW",
    "ALAW": "ALAW",
}

# REST output format -> SDK enum member
_SDK_OUTPUT_FORMATS = {
    "riff-16khz-16bit-mono-pcm": "Riff16Khz16BitMonoPcm",
    "riff-24khz-16bit-mono-pcm": "Riff24Khz16BitMonoPcm",
    "riff-48khz-16bit-mono-pcm": "Riff48Khz16BitMonoPcm",
}

# -----------------------------
# Internal helpers
# -----------------------------
def _speech_cfg() -> speechsdk.SpeechConfig:
    s = get_settings()
    assert s.AZURE_SPEECH_KEY, "AZURE_SPEECH_KEY missing"
    assert s.AZURE_SPEECH_REGION, "AZURE_SPEECH_REGION missing"
    return speechsdk.SpeechConfig(subscription=s.AZURE_SPEECH_KEY, region=s.AZURE_SPEECH_REGION)

def _recog_cfg() -> speechsdk.SpeechConfig:
    cfg = _speech_cfg()
    cfg.speech_recognition_language = get_settings().STT_LANGUAGE
    return cfg

def _synth_cfg() -> speechsdk.SpeechConfig:
    s = get_settings()
    cfg = _speech_cfg()
    cfg.speech_synthesis_voice_name = s.TTS_VOICE
    cfg.set_speech_synthesis_output_format(
        getattr(speechsdk.SpeechSynthesisOutputFormat, _SDK_OUTPUT_FORMATS[s.TTS_OUTPUT_FORMAT])
    )
    return cfg

def _input_format() -> speechsdk.audio.AudioStreamFormat:
    """
    Push-stream format for the configured encoding. Compressed containers carry
    their own sample rate; LINEAR16 is raw mono PCM at STT_SAMPLE_RATE.
    """
    s = get_settings()
    if s.STT_ENCODING == "LINEAR16":
        return speechsdk.audio.AudioStreamFormat(
            samples_per_second=s.STT_SAMPLE_RATE, bits_per_sample=16, channels=1
        )
    container = getattr(speechsdk.AudioStreamContainerFormat, _CONTAINER_FORMATS[s.STT_ENCODING])
    return speechsdk.audio.AudioStreamFormat(compressed_stream_format=container)

# -----------------------------
# Speech-to-Text
# -----------------------------
def _recognize_segments(audio: bytes) -> List[str]:
    """
    Push the whole clip and run continuous recognition until the stream ends.
    Returns the best transcript of every recognized segment, in order.
    """
    s = get_settings()
    stream = speechsdk.audio.PushAudioInputStream(stream_format=_input_format())
    audio_cfg = speechsdk.audio.AudioConfig(stream=stream)
    reco = speechsdk.SpeechRecognizer(speech_config=_recog_cfg(), audio_config=audio_cfg)

    segments: List[str] = []
    errors: List[str] = []
    done = threading.Event()

    def on_recognized(evt):
        if evt.result.reason == speechsdk.ResultReason.RecognizedSpeech and evt.result.text:
            segments.append(evt.result.text)

    # The SDK swallows exceptions raised in callbacks, so this one must always
    # record the cancellation and release the waiter itself.
    def on_canceled(evt):
        try:
            details = evt.cancellation_details
            if details.reason == speechsdk.CancellationReason.Error:
                errors.append(f"{details.code}: {details.error_details}")
        except Exception as e:
            errors.append(f"unreadable cancellation: {e}")
        finally:
            done.set()

    reco.recognized.connect(on_recognized)
    reco.canceled.connect(on_canceled)
    reco.session_stopped.connect(lambda evt: done.set())

    reco.start_continuous_recognition()
    try:
        stream.write(audio)
        stream.close()
        finished = done.wait(timeout=s.REQUEST_TIMEOUT_SECS)
    finally:
        reco.stop_continuous_recognition()

    if errors:
        raise TranscriptionError(f"STT canceled: {errors[0]}")
    if not finished:
        raise TranscriptionError(f"STT timed out after {s.REQUEST_TIMEOUT_SECS}s")
    return segments

async def transcribe(audio: bytes) -> Outcome[str]:
    """
    Transcribe a clip with the fixed encoding/sample-rate/language settings.
    Segments are joined with single spaces; silence is a successful "".
    """
    try:
        segments = await asyncio.to_thread(_recognize_segments, audio)
    except Exception as e:
        logger.exception("Error transcribing audio")
        return Outcome.failure(TranscriptionError.stage, str(e))
    logger.info("Transcribed %d segment(s) from %d bytes", len(segments), len(audio))
    return Outcome.success(" ".join(segments))

# -----------------------------
# Text-to-Speech
# -----------------------------
def build_ssml(text: str) -> str:
    s = get_settings()
    return (
        f"<speak version='1.0' xml:lang={quoteattr(s.TTS_LANGUAGE)}>"
        f"<voice xml:lang={quoteattr(s.TTS_LANGUAGE)} xml:gender={quoteattr(s.TTS_GENDER)} "
        f"name={quoteattr(s.TTS_VOICE)}>{escape(text)}</voice></speak>"
    )

def _tts_sdk(ssml: str) -> bytes:
    syn = speechsdk.SpeechSynthesizer(speech_config=_synth_cfg(), audio_config=None)
    res = syn.speak_ssml(ssml)
    if res.reason == speechsdk.ResultReason.SynthesizingAudioCompleted:
        return res.audio_data
    details = getattr(res.cancellation_details, "error_details", "")
    raise SynthesisError(f"TTS failed: {res.reason} {details}")

def _tts_rest(ssml: str) -> bytes:
    """
    REST fallback TTS, same SSML and output format as the SDK path.
    """
    s = get_settings()
    endpoint = s.AZURE_SPEECH_ENDPOINT or f"https://{s.AZURE_SPEECH_REGION}.api.cognitive.microsoft.com"
    tok = requests.post(
        f"{endpoint.rstrip('/')}/sts/v1.0/issueToken",
        headers={"Ocp-Apim-Subscription-Key": s.AZURE_SPEECH_KEY},
        timeout=s.REQUEST_TIMEOUT_SECS,
    )
    tok.raise_for_status()
    token = tok.text

    r = requests.post(
        f"https://{s.AZURE_SPEECH_REGION}.tts.speech.microsoft.com/cognitiveservices/v1",
        data=ssml.encode("utf-8"),
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": s.TTS_OUTPUT_FORMAT,
            "User-Agent": "speech-relay/1.0",
        },
        timeout=s.REQUEST_TIMEOUT_SECS,
    )
    r.raise_for_status()
    return r.content

async def synthesize(text: str) -> Outcome[bytes]:
    """
    Synthesize text with the fixed voice. SDK first; REST fallback.
    """
    ssml = build_ssml(text)
    try:
        audio = await asyncio.to_thread(_tts_sdk, ssml)
    except Exception as e:
        logger.warning("SDK synthesis failed, falling back to REST: %s", e)
        try:
            audio = await asyncio.to_thread(_tts_rest, ssml)
        except Exception as rest_err:
            logger.exception("Error synthesizing speech")
            return Outcome.failure(SynthesisError.stage, str(rest_err))

    if not audio:
        logger.error("Speech synthesis returned no audio")
        return Outcome.failure(SynthesisError.stage, "synthesis returned no audio")
    return Outcome.success(audio)
