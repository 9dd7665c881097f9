import os, re, time

OUTPUT_PREFIX = "output_"
OUTPUT_SUFFIX = ".wav"
OUTPUT_RE = re.compile(r"^output_(\d+)\.wav$")

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")

def safe_filename(name: str, fallback: str = "upload") -> str:
    """Base name of a caller-supplied file name, restricted to [A-Za-z0-9._-]."""
    base = os.path.basename((name or "").replace("\\", "/"))
    base = _UNSAFE.sub("_", base).lstrip(".")
    return base or fallback

def now_millis() -> int:
    return time.time_ns() // 1_000_000

def output_filename(millis: int) -> str:
    return f"{OUTPUT_PREFIX}{millis}{OUTPUT_SUFFIX}"

def is_output_filename(name: str) -> bool:
    return bool(OUTPUT_RE.match(name or ""))

__all__ = ["OUTPUT_RE", "safe_filename", "now_millis", "output_filename", "is_output_filename"]
