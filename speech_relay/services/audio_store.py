import logging, time, uuid
from functools import lru_cache
from pathlib import Path
from typing import List

from speech_relay.config import get_settings
from speech_relay.utils.audio import (
    OUTPUT_RE, is_output_filename, now_millis, output_filename, safe_filename,
)

logger = logging.getLogger(__name__)

class AudioStore:
    """
    Two local directories: scratch copies of uploads (removed after
    transcription) and synthesized output served under /audio.
    """

    def __init__(self, output_dir, scratch_dir, max_age_secs: int = 0, max_files: int = 0):
        self.output_dir = Path(output_dir)
        self.scratch_dir = Path(scratch_dir)
        self.max_age_secs = max_age_secs
        self.max_files = max_files

    def ensure_dirs(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.scratch_dir.mkdir(parents=True, exist_ok=True)

    # -----------------------------
    # Scratch
    # -----------------------------
    def write_scratch(self, file_name: str, data: bytes) -> Path:
        # Token prefix keeps concurrent uploads with the same name apart.
        path = self.scratch_dir / f"{uuid.uuid4().hex}_{safe_filename(file_name)}"
        path.write_bytes(data)
        return path

    def discard(self, path: Path) -> None:
        Path(path).unlink(missing_ok=True)

    # -----------------------------
    # Output
    # -----------------------------
    def output_path(self, name: str) -> Path:
        return self.output_dir / name

    def save_output(self, data: bytes) -> str:
        millis = now_millis()
        while True:
            name = output_filename(millis)
            path = self.output_path(name)
            try:
                f = open(path, "xb")
            except FileExistsError:
                millis += 1
                continue
            try:
                with f:
                    f.write(data)
            except Exception:
                # never leave a truncated file in the served directory
                path.unlink(missing_ok=True)
                raise
            break
        logger.info("Saved synthesized audio %s (%d bytes)", name, len(data))
        self.enforce_retention()
        return name

    def list_outputs(self) -> List[Path]:
        """Output files, oldest first."""
        files = [p for p in self.output_dir.iterdir() if p.is_file() and is_output_filename(p.name)]
        return sorted(files, key=lambda p: int(OUTPUT_RE.match(p.name).group(1)))

    def enforce_retention(self) -> List[str]:
        """Apply the age/count limits; a limit of 0 is disabled."""
        if not (self.max_age_secs or self.max_files):
            return []
        removed: List[str] = []
        files = self.list_outputs()
        if self.max_age_secs:
            cutoff = time.time() - self.max_age_secs
            for p in [p for p in files if p.stat().st_mtime < cutoff]:
                p.unlink(missing_ok=True)
                removed.append(p.name)
            files = [p for p in files if p.name not in removed]
        if self.max_files and len(files) > self.max_files:
            for p in files[: len(files) - self.max_files]:
                p.unlink(missing_ok=True)
                removed.append(p.name)
        if removed:
            logger.info("Retention removed %d audio file(s)", len(removed))
        return removed

@lru_cache()
def get_audio_store() -> AudioStore:
    s = get_settings()
    store = AudioStore(s.AUDIO_DIR, s.SCRATCH_DIR, s.AUDIO_MAX_AGE_SECS, s.AUDIO_MAX_FILES)
    store.ensure_dirs()
    return store
