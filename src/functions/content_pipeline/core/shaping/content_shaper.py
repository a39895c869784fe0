"""Render raw source material into the ``content`` text of a record.

Source payloads are fetched upstream and stored on the record under
``parameters["source_data"]``; this module only formats them.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..contracts.content_record import ContentRecord, ContentType

logger = logging.getLogger(__name__)

SOURCE_DATA_KEY = "source_data"

DATA_BACKED_TYPES = frozenset(
    {ContentType.WEATHER, ContentType.HEADLINES, ContentType.SPORTS, ContentType.MARKETS}
)

MARKET_SYMBOL_NAMES = {
    "^GSPC": "S&P 500",
    "^DJI": "Dow Jones",
    "^TNX": "10-Year Treasury",
}


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def _items(payload: Any, key: str) -> List[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []


def _title(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item.strip() or None
    if isinstance(item, Mapping):
        title = item.get("title") or item.get("headline")
        if title:
            return str(title).split(" - ")[0].strip()
    return None


class TemplateContentShaper:
    """Builds content text per content type from the record's parameters."""

    def __init__(self, *, max_headlines: int = 5, max_events: int = 5) -> None:
        self.max_headlines = max_headlines
        self.max_events = max_events
        self._renderers: Dict[ContentType, Callable[[ContentRecord, date, Mapping[str, Any]], str]] = {
            ContentType.WAKE_UP: self._wake_up,
            ContentType.STRETCH: self._stretch,
            ContentType.CHALLENGE: self._challenge,
            ContentType.WEATHER: self._weather,
            ContentType.ENCOURAGEMENT: self._encouragement,
            ContentType.HEADLINES: self._headlines,
            ContentType.SPORTS: self._sports,
            ContentType.MARKETS: self._markets,
            ContentType.USER_INTRO: self._user_intro,
            ContentType.USER_OUTRO: self._user_outro,
            ContentType.USER_REMINDERS: self._user_reminders,
            ContentType.BANANA: self._banana,
        }

    def validate(self, record: ContentRecord) -> List[str]:
        """Return the reasons *record* cannot be shaped; empty when valid."""

        errors: List[str] = []
        kind = record.kind
        if kind is None:
            errors.append(f"Invalid content type: {record.content_type}")
        if record.target_date is None:
            errors.append("Missing or invalid date")
        if kind in DATA_BACKED_TYPES and not record.parameters.get(SOURCE_DATA_KEY):
            errors.append(f"Missing {SOURCE_DATA_KEY} for {record.content_type} content")
        return errors

    def shape(self, record: ContentRecord) -> str:
        kind = record.kind
        target = record.target_date
        if kind is None or target is None:
            raise ValueError(f"Cannot shape record {record.id}: {'; '.join(self.validate(record))}")
        content = self._renderers[kind](record, target, record.parameters).strip()
        if not content:
            raise ValueError(f"Shaped content for {record.id} is empty")
        return content

    # ------------------------------------------------------------------
    # Renderers
    # ------------------------------------------------------------------
    @staticmethod
    def _day(target: date) -> str:
        return f"{target.isoformat()} ({target.strftime('%A')})"

    def _wake_up(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        holiday = params.get("holiday_data")
        previous = params.get("previous_message") or ""
        return (
            f"Date: {self._day(target)}. Previous message: {previous}. "
            f"Holiday: {_dumps(holiday) if holiday else 'No holiday data available'}"
        )

    def _stretch(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        focus = params.get("stretch_focus") or "full body"
        return f"Morning stretch for {self._day(target)}. Focus: {focus}."

    def _challenge(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        goals = params.get("userGoals") or params.get("user_goals") or "general self-improvement"
        kind = params.get("challengeType") or params.get("challenge_type") or "mindset"
        return f"Daily challenge for {self._day(target)}. Type: {kind}. Goals: {goals}."

    def _encouragement(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        message = params.get("message") or "Have a wonderful day filled with positivity and growth!"
        return f"Encouragement for {self._day(target)}: {message}"

    def _weather(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        data = params.get(SOURCE_DATA_KEY) or {}
        location = data.get("location") or {}
        current = data.get("current") or {}
        forecast = data.get("forecast") or {}
        city = location.get("city") or params.get("city") or "Unknown"
        state = location.get("state") or params.get("state") or ""
        return (
            f"Location: {city}, {state}. "
            f"High: {forecast.get('high', 'N/A')}°F, Low: {forecast.get('low', 'N/A')}°F. "
            f"Condition: {current.get('condition', 'Unknown')}. "
            f"Sunrise: {current.get('sunrise', 'N/A')}, Sunset: {current.get('sunset', 'N/A')}"
        )

    def _headlines(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        titles = [
            title
            for title in (_title(item) for item in _items(params.get(SOURCE_DATA_KEY), "articles"))
            if title
        ][: self.max_headlines]
        return "Top Headlines: " + (". ".join(titles) if titles else "No headlines available")

    def _sports(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        events: List[str] = []
        for item in _items(params.get(SOURCE_DATA_KEY), "events"):
            if isinstance(item, str):
                events.append(item)
            elif isinstance(item, Mapping):
                name = item.get("name") or item.get("strEvent")
                if not name and item.get("home") and item.get("away"):
                    name = f"{item['away']} vs {item['home']}"
                when = item.get("date") or item.get("dateEvent")
                if name:
                    events.append(f"{name} on {when}" if when else str(name))
        events = events[: self.max_events]
        return "Sports Update: " + (". ".join(events) if events else "No sports events available")

    def _markets(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        data = params.get(SOURCE_DATA_KEY) or {}
        quotes = data.get("quotes", data) if isinstance(data, Mapping) else {}
        summary: List[str] = []
        for symbol, quote in quotes.items():
            if not isinstance(quote, Mapping):
                continue
            price = quote.get("price")
            change = quote.get("change")
            if price is None or change is None:
                continue
            try:
                change_value = float(change)
                percent_value = float(quote.get("changePercent") or 0.0)
            except (TypeError, ValueError):
                continue
            sign = "+" if change_value >= 0 else ""
            name = MARKET_SYMBOL_NAMES.get(symbol, symbol)
            summary.append(f"{name}: ${price} ({sign}{change_value:.2f}, {percent_value:.2f}%)")

        content = "Market Update: " + (". ".join(summary) if summary else "Market data unavailable")
        business_news = data.get("business_news") if isinstance(data, Mapping) else None
        news = [title for title in (_title(item) for item in _items(business_news, "articles")) if title]
        if news:
            content += " In business news: " + ". ".join(news[:2])
        return content

    def _user_intro(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        name = params.get("user_name") or "there"
        return f"Good morning {name}. Today is {self._day(target)}."

    def _user_outro(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        name = params.get("user_name") or "friend"
        return f"That's your DayStart for {self._day(target)}. Have a great day, {name}."

    def _user_reminders(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        reminders = [str(item) for item in params.get("reminders") or [] if item]
        if not reminders:
            return f"No reminders for {self._day(target)}."
        return f"Reminders for {self._day(target)}: " + "; ".join(reminders)

    def _banana(self, record: ContentRecord, target: date, params: Mapping[str, Any]) -> str:
        keys: Iterable[str] = ("user_name", "city", "state", "weather", "headlines", "markets")
        payload = {key: params.get(key) for key in keys if params.get(key) is not None}
        payload["day_of_week"] = target.strftime("%A")
        payload["date"] = target.isoformat()
        return _dumps(payload)
