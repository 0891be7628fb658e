"""WebVTT subtitle parsing for the synced subtitle overlay."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Cue:
    """A timed subtitle line."""

    start: float  # seconds
    end: float
    text: str

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "text": self.text}


def _to_number(value: str, cast) -> float:
    try:
        return cast(value)
    except ValueError:
        return 0


def parse_vtt_time(time_string: str) -> float:
    """Parse a VTT timestamp (``HH:MM:SS.mmm`` or ``MM:SS.mmm``) to seconds.

    Unparseable components count as zero.
    """
    parts = time_string.strip().split(":")
    if len(parts) == 2:
        parts.insert(0, "0")

    hours = _to_number(parts[0], int)
    minutes = _to_number(parts[1], int) if len(parts) > 1 else 0
    seconds = _to_number(parts[2], float) if len(parts) > 2 else 0
    return hours * 3600 + minutes * 60 + seconds


def parse_vtt(vtt_text: str) -> list[Cue]:
    """Parse VTT text into cues.

    A cue starts at a line containing ``-->``; its text is every following
    non-blank line, joined with spaces.
    """
    lines = vtt_text.splitlines()
    cues = []

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        if "-->" in line:
            start, end = (t.strip() for t in line.split("-->", 1))
            # Drop cue settings such as "align:start position:10%"
            end = end.split()[0] if end else ""

            text_lines = []
            i += 1
            while i < len(lines) and lines[i].strip():
                text_lines.append(lines[i].strip())
                i += 1

            cues.append(Cue(
                start=parse_vtt_time(start),
                end=parse_vtt_time(end),
                text=" ".join(text_lines),
            ))
        i += 1

    return cues


def active_cue(cues: list[Cue], current_time: float) -> Optional[Cue]:
    """Return the cue shown at ``current_time``, if any."""
    return next((c for c in cues if c.start <= current_time < c.end), None)


def subtitle_path(video_id: str, subtitles_dir: Path) -> Path:
    """Local VTT file for a video id."""
    return subtitles_dir / f"{video_id}.vtt"
