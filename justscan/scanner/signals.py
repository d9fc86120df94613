"""
justscan/scanner/signals.py
-----------------
Turns the raw text of one OCR pass into the three scan signals:

  keyword  - a configured organization keyword appears in the text
  roll_no  - a standalone run of exactly N digits that is on the roster
  name     - a 4-character window of the candidate student's name appears

The extractor is stateless; timing is handled by SignalMemory.
"""

import re
from dataclasses import dataclass, field

from justscan.models.organization import DEFAULT_ROLL_NO_LENGTH

NAME_WINDOW = 4


@dataclass(frozen=True)
class ScanConfig:
    """Organization settings and roster, read once per scan session."""
    keywords: tuple = ()
    roll_no_length: int = DEFAULT_ROLL_NO_LENGTH
    roster: dict = field(default_factory=dict)  # roll_no -> name

    @property
    def keyword_required(self):
        return bool(self.keywords)

    @classmethod
    def from_api(cls, organization, roster):
        """Build from GET /api/organizations/<id> and GET /api/students/roll-numbers."""
        keywords = tuple(
            str(k).strip() for k in organization.get("validation_keywords") or [] if str(k).strip()
        )
        return cls(
            keywords=keywords,
            roll_no_length=int(organization.get("roll_no_length") or DEFAULT_ROLL_NO_LENGTH),
            roster={str(s["roll_no"]).strip(): s.get("name", "") for s in roster},
        )


@dataclass
class Observation:
    keyword: bool = False
    roll_no: str = None
    name: bool = False

    @property
    def empty(self):
        return not (self.keyword or self.roll_no or self.name)


def name_substrings(name):
    """Every 4-character window of the name, lowercased with spaces removed."""
    cleaned = re.sub(r"\s+", "", name or "").lower()
    if len(cleaned) < NAME_WINDOW:
        return set()
    return {cleaned[i:i + NAME_WINDOW] for i in range(len(cleaned) - NAME_WINDOW + 1)}


class SignalExtractor:

    def __init__(self, config):
        self.config = config
        self.keywords = [k.lower() for k in config.keywords]
        self.roll_pattern = re.compile(r"\b\d{%d}\b" % config.roll_no_length, re.ASCII)
        self._name_windows = {}

    def _windows(self, roll_no):
        if roll_no not in self._name_windows:
            self._name_windows[roll_no] = name_substrings(self.config.roster.get(roll_no))
        return self._name_windows[roll_no]

    def match_roll_no(self, text):
        # Unknown digit runs are ignored; the first run on the roster wins
        for match in self.roll_pattern.finditer(text):
            if match.group(0) in self.config.roster:
                return match.group(0)
        return None

    def extract(self, text, fallback_roll_no=None):
        """
        Signals that fired in this text. The name is checked against the
        student matched in this text, or else fallback_roll_no (the roll
        number still held in memory from an earlier pass).
        """
        text = text or ""
        if not text.strip():
            return Observation()

        lowered = text.lower()
        observation = Observation()
        observation.keyword = any(k in lowered for k in self.keywords)
        observation.roll_no = self.match_roll_no(text)

        candidate = observation.roll_no or fallback_roll_no
        if candidate in self.config.roster:
            observation.name = any(w in lowered for w in self._windows(candidate))
        return observation
