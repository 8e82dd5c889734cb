from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional, Protocol

from nihush.core.settings import GameSettings

logger = logging.getLogger(__name__)

SAVED_MESSAGE = "התוצאה נשמרה!"
DEMO_MESSAGE = "מצב הדגמה: נתונים לא נשמרו."
FAILED_MESSAGE = "שמירת התוצאה נכשלה, נסו שוב מאוחר יותר."


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    score: int
    date: str = ""


@dataclass(frozen=True)
class LeaderboardRow:
    rank: int
    name: str
    score: int


@dataclass(frozen=True)
class SubmitResult:
    saved: bool
    message: str


SAMPLE_LEADERBOARD = (
    LeaderboardEntry(name="אלוף", score=100),
    LeaderboardEntry(name="דני", score=85),
)


class LeaderboardError(Exception):
    """Base class for leaderboard backend problems."""


class LeaderboardSubmitFailed(LeaderboardError):
    """A score could not be stored."""


class LeaderboardUnavailable(LeaderboardError):
    """Scores could not be fetched."""


class LeaderboardGateway(Protocol):
    def submit(self, name: str, score: int, timestamp: datetime) -> None:
        """Store one score. Raises LeaderboardSubmitFailed."""

    def fetch_top(self, n: int) -> List[LeaderboardEntry]:
        """Return up to *n* entries, best first. Raises LeaderboardUnavailable."""


class FirebaseLeaderboard:
    """Leaderboard kept under ``/leaderboard`` of a Firebase Realtime Database (REST API)."""

    def __init__(self, database_url: str, auth_token: Optional[str] = None, timeout: float = 5.0) -> None:
        if not database_url:
            raise ValueError("database_url is required")
        self._base_url = database_url.rstrip("/")
        self._auth_token = auth_token
        self._timeout = timeout

    def _url(self, **params: str) -> str:
        query = dict(params)
        if self._auth_token:
            query["auth"] = self._auth_token
        url = f"{self._base_url}/leaderboard.json"
        if query:
            url += "?" + urllib.parse.urlencode(query)
        return url

    def submit(self, name: str, score: int, timestamp: datetime) -> None:
        payload = {"name": name, "score": int(score), "date": timestamp.isoformat()}
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        req = urllib.request.Request(
            self._url(),
            data=data,
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                resp.read()
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise LeaderboardSubmitFailed(f"could not save score: {e}") from e

    def fetch_top(self, n: int) -> List[LeaderboardEntry]:
        req = urllib.request.Request(self._url(orderBy='"score"', limitToLast=str(n)))
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            raise LeaderboardUnavailable(f"could not load leaderboard: {e}") from e
        return parse_entries(payload)[:n]


def parse_entries(payload: Any) -> List[LeaderboardEntry]:
    """Turn a ``{push_id: {name, score, date}}`` payload into entries, best first."""
    if not payload:
        return []
    if isinstance(payload, dict):
        values = list(payload.values())
    elif isinstance(payload, list):
        values = [item for item in payload if item is not None]
    else:
        raise LeaderboardUnavailable(f"unexpected leaderboard payload: {type(payload).__name__}")

    entries: List[LeaderboardEntry] = []
    for value in values:
        if not isinstance(value, dict):
            continue
        try:
            score = int(value.get("score", 0))
        except (TypeError, ValueError):
            continue
        entries.append(
            LeaderboardEntry(
                name=str(value.get("name", "")).strip(),
                score=score,
                date=str(value.get("date", "")),
            )
        )
    entries.sort(key=lambda e: e.score, reverse=True)
    return entries


def rank_entries(entries: List[LeaderboardEntry]) -> List[LeaderboardRow]:
    return [
        LeaderboardRow(rank=idx, name=entry.name, score=entry.score)
        for idx, entry in enumerate(entries, start=1)
    ]


class LeaderboardService:
    """Front for the leaderboard that never lets backend trouble reach the game.

    Without a gateway, scores are not stored and a fixed sample list is shown.
    """

    def __init__(self, gateway: Optional[LeaderboardGateway] = None) -> None:
        self._gateway = gateway

    @property
    def has_backend(self) -> bool:
        return self._gateway is not None

    @staticmethod
    def is_eligible(score: int) -> bool:
        return score > 0

    def submit(self, name: str, score: int, timestamp: Optional[datetime] = None) -> Optional[SubmitResult]:
        """Store *score* for *name*. Returns None when the name is blank."""
        name = (name or "").strip()
        if not name:
            return None
        if self._gateway is None:
            logger.info("No leaderboard backend configured; score %d for %s not saved", score, name)
            return SubmitResult(saved=False, message=DEMO_MESSAGE)
        when = timestamp or datetime.now(timezone.utc)
        try:
            self._gateway.submit(name, score, when)
        except LeaderboardSubmitFailed as e:
            logger.warning("Leaderboard submit failed: %s", e)
            return SubmitResult(saved=False, message=FAILED_MESSAGE)
        logger.info("Saved score %d for %s", score, name)
        return SubmitResult(saved=True, message=SAVED_MESSAGE)

    @staticmethod
    def sample_rows(n: int = 10) -> List[LeaderboardRow]:
        return rank_entries(list(SAMPLE_LEADERBOARD)[:n])

    def fetch_top(self, n: int = 10) -> List[LeaderboardRow]:
        if self._gateway is None:
            return self.sample_rows(n)
        try:
            entries = self._gateway.fetch_top(n)
        except LeaderboardUnavailable as e:
            logger.warning("Leaderboard unavailable, showing sample data: %s", e)
            return self.sample_rows(n)
        return rank_entries(sorted(entries, key=lambda e: e.score, reverse=True)[:n])


def build_leaderboard_service(settings: GameSettings) -> LeaderboardService:
    if settings.firebase_url:
        logger.info("Using Firebase leaderboard at %s", settings.firebase_url)
        return LeaderboardService(FirebaseLeaderboard(settings.firebase_url, settings.firebase_auth))
    logger.info("No leaderboard backend configured; using sample data")
    return LeaderboardService()
