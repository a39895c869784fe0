"""Narration prompts per content type and voice style."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional

from ..contracts.content_record import ContentType, Voice

VOICE_STYLE_INSTRUCTIONS: Dict[Voice, str] = {
    Voice.VOICE_1: (
        "Write with a soft, gentle tone. Use flowing language, calming imagery, and long, "
        "intentional pauses. Invite the listener to wake slowly and peacefully, like a guided "
        "meditation. Use affirming, nurturing phrases. Speak as if you're helping someone feel "
        "safe and seen before they start their day."
    ),
    Voice.VOICE_2: (
        "Write with high energy and commanding authority. Use short, clipped sentences with "
        "forceful delivery. Keep the pacing fast. Use strong verbs and repetition. Speak like "
        "you're leading boot camp: confident, no-nonsense, but ultimately motivating and focused "
        "on action, without insults or profanity."
    ),
    Voice.VOICE_3: (
        "Write with a steady, neutral tone. Use clear, confident phrasing with a medium cadence. "
        "Avoid emotional highs or lows and stay balanced and grounded. Pause occasionally for "
        "emphasis. Speak like a trusted narrator offering facts, encouragement, and thoughtful "
        "perspective to start the day smoothly."
    ),
}

_SHARED_REQUIREMENTS = (
    "- Use breaths and other supported features in ElevenLabs\n"
    "- Follow the voice style instructions in the system prompt\n\n"
    "Format the response as plain text for ElevenLabs."
)


@dataclass(frozen=True)
class NarrationPrompt:
    """Prompt definition for one content type."""

    role: str
    build_user_prompt: Callable[[str, Mapping[str, Any]], str]
    max_tokens: int = 200
    temperature: float = 0.7

    def system_prompt(self, voice: Voice) -> str:
        return (
            f"{self.role}\n\n"
            "Write for ElevenLabs and use appropriate formatting.\n\n"
            f"Voice Style Instructions: {VOICE_STYLE_INSTRUCTIONS[voice]}"
        )


@dataclass(frozen=True)
class PromptMessages:
    system: str
    user: str
    max_tokens: int
    temperature: float


def _json(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def _user_prompt(
    heading: str,
    content: str,
    time_available: str,
    details: str,
    requirements: str,
) -> str:
    body = f"{heading}\n\nORIGINAL CONTENT:\n{content}\n\nTime available: {time_available}\n\n"
    if details:
        body += f"{details}\n\n"
    return f"{body}Requirements:\n{requirements}\n{_SHARED_REQUIREMENTS}"


def _wake_up(content: str, params: Mapping[str, Any]) -> str:
    holiday = params.get("holidayData") or params.get("holiday_data")
    return _user_prompt(
        f"Review and refine this wake-up message for {params['date']} ({params['dayOfWeek']}):",
        content,
        "90 seconds",
        f"Holiday information: {_json(holiday) if holiday else 'No special holidays today'}",
        "- Start with \"It's [day of the week], [date].\"\n"
        "- Make it meditative and motivating\n"
        "- Reference any significant holidays if available\n"
        "- End with a call to action to start the day\n"
        "- Include significant (5-10 second pauses) at natural break points",
    )


def _stretch(content: str, params: Mapping[str, Any]) -> str:
    return _user_prompt(
        f"Review and refine this morning stretch routine for {params['date']}:",
        content,
        str(params.get("timeAvailable") or "45 seconds"),
        "",
        "- Aim for 1 simple stretch/exercise\n"
        "- Focus on waking up the body safely\n"
        "- Include breathing cues\n"
        "- Make it accessible for morning stiffness\n"
        "- Avoid complex movements",
    )


def _challenge(content: str, params: Mapping[str, Any]) -> str:
    return _user_prompt(
        f"Review and refine this daily challenge for {params['date']}:",
        content,
        "45 seconds",
        f"User goals: {params.get('userGoals') or 'general self-improvement'}\n"
        f"Challenge type: {params.get('challengeType') or 'mindset'}",
        "- Create one specific, actionable challenge\n"
        "- Make it achievable within that moment\n"
        "- Align with user goals if provided\n"
        "- Include why this challenge matters\n"
        "- Provide clear success criteria\n"
        "- Make it inspiring and motivating",
    )


def _weather(content: str, params: Mapping[str, Any]) -> str:
    location = params.get("location") or params.get("city") or "your area"
    weather = params.get("weatherData") or params.get("weather_data") or params.get("source_data")
    return _user_prompt(
        f"Review and refine this weather report for {params['date']} in {location}:",
        content,
        "20 seconds",
        f"Weather data: {_json(weather)}",
        "- Present current conditions and forecast\n"
        "- Keep it conversational and engaging\n"
        "- Include any weather alerts or warnings\n"
        "- Make it relevant to morning planning",
    )


def _encouragement(content: str, params: Mapping[str, Any]) -> str:
    return _user_prompt(
        f"Review and refine this encouraging message for {params['date']}:",
        content,
        "30 seconds",
        f"Encouragement type: {params.get('encouragementType') or 'general'}",
        "- Provide genuine, heartfelt encouragement\n"
        "- Use quotes as much as possible, perhaps a philosophical or religious text\n"
        "- Include actionable positive thinking",
    )


def _headlines(content: str, params: Mapping[str, Any]) -> str:
    return _user_prompt(
        f"Review and refine this headlines summary for {params['date']}:",
        content,
        "180 seconds",
        f"User interests: {params.get('userInterests') or 'general news'}",
        "- Select 3 - 5 most important stories\n"
        "- Provide brief, factual summaries\n"
        "- Maintain neutral, balanced tone\n"
        "- Focus on impact and relevance\n"
        "- Avoid sensationalism\n"
        "- Avoid being overly negative and have a bias toward choosing positive stories "
        "without missing major ones",
    )


def _sports(content: str, params: Mapping[str, Any]) -> str:
    recent = params.get("recentGames")
    return _user_prompt(
        f"Review and refine this sports update for {params['date']}:",
        content,
        "30 seconds",
        f"User's favorite teams: {params.get('userTeams') or 'general sports'}\n"
        f"Sport focus: {params.get('sportType') or 'all'}\n"
        f"Recent games: {_json(recent) if recent else 'None'}",
        "- Cover relevant games and results\n"
        "- Include key scores\n"
        "- Focus on user's sports\n"
        "- Keep it engaging and exciting\n"
        "- Include upcoming games if relevant\n"
        "- Use sports terminology appropriately",
    )


def _markets(content: str, params: Mapping[str, Any]) -> str:
    market = params.get("marketData") or params.get("market_data") or params.get("source_data")
    return _user_prompt(
        f"Review and refine this markets update for {params['date']}:",
        content,
        "20 seconds",
        f"Market data: {_json(market)}\n"
        f"User investments: {params.get('userInvestments') or 'general market interest'}\n"
        f"Market focus: {params.get('marketFocus') or 'major indices'}",
        "- Summarize key market movements\n"
        "- Include major indices performance\n"
        "- Explain significant changes\n"
        "- Keep language accessible",
    )


def _user_reminders(content: str, params: Mapping[str, Any]) -> str:
    return _user_prompt(
        f"Review and refine these personalized reminders for {params.get('userName') or 'the listener'} "
        f"on {params['date']}:",
        content,
        "30 seconds",
        f"Reminders: {_json(params.get('reminders'))}\n"
        f"Tone: {params.get('reminderTone') or 'supportive'}",
        "- Present reminders in a supportive way\n"
        "- Keep it encouraging, not nagging\n"
        "- Group related reminders\n"
        "- Use positive language\n"
        "- Make it feel helpful, not overwhelming",
    )


NARRATION_PROMPTS: Dict[ContentType, NarrationPrompt] = {
    ContentType.WAKE_UP: NarrationPrompt(
        role=(
            "You are a motivational morning wake-up assistant for the DayStart app. Your role is to "
            "create engaging, uplifting wake-up messages that help users start their day with energy "
            "and positivity."
        ),
        build_user_prompt=_wake_up,
        max_tokens=500,
        temperature=0.8,
    ),
    ContentType.STRETCH: NarrationPrompt(
        role=(
            "You are a fitness and wellness expert for the DayStart app. Your role is to create "
            "engaging stretch and mobility content that helps users wake up their bodies safely "
            "and effectively."
        ),
        build_user_prompt=_stretch,
        max_tokens=300,
        temperature=0.7,
    ),
    ContentType.CHALLENGE: NarrationPrompt(
        role=(
            "You are a personal development coach for the DayStart app. Your role is to create daily "
            "challenges that inspire growth, motivation, and positive habits."
        ),
        build_user_prompt=_challenge,
        max_tokens=250,
        temperature=0.8,
    ),
    ContentType.WEATHER: NarrationPrompt(
        role=(
            "You are a weather presenter for the DayStart app. Your role is to deliver weather "
            "information in an engaging, conversational way that helps users plan their day."
        ),
        build_user_prompt=_weather,
        max_tokens=200,
        temperature=0.6,
    ),
    ContentType.ENCOURAGEMENT: NarrationPrompt(
        role=(
            "You are a philosopher for the DayStart app. Your role is to provide encouragement and "
            "positive reinforcement that helps users maintain motivation and resilience."
        ),
        build_user_prompt=_encouragement,
        max_tokens=200,
        temperature=0.8,
    ),
    ContentType.HEADLINES: NarrationPrompt(
        role=(
            "You are a news podcaster for the DayStart app. Your role is to provide a brief, balanced "
            "summary of important headlines that helps users stay informed without overwhelming them."
        ),
        build_user_prompt=_headlines,
        max_tokens=700,
        temperature=0.5,
    ),
    ContentType.SPORTS: NarrationPrompt(
        role=(
            "You are a sports commentator for the DayStart app. Your role is to provide engaging "
            "sports updates and highlights that help users stay connected to their favorite teams "
            "and sports."
        ),
        build_user_prompt=_sports,
        max_tokens=200,
        temperature=0.7,
    ),
    ContentType.MARKETS: NarrationPrompt(
        role=(
            "You are a financial markets analyst for the DayStart app. Very matter of fact. Your role "
            "is to provide clear, accessible market updates that help users understand key financial "
            "developments."
        ),
        build_user_prompt=_markets,
        max_tokens=200,
        temperature=0.6,
    ),
    ContentType.USER_REMINDERS: NarrationPrompt(
        role=(
            "You are a helpful reminder assistant for the DayStart app. Your role is to create gentle, "
            "supportive reminders that help users stay on track with their goals and commitments."
        ),
        build_user_prompt=_user_reminders,
        max_tokens=250,
        temperature=0.7,
    ),
}


def get_prompt(content_type: Optional[ContentType]) -> Optional[NarrationPrompt]:
    if content_type is None:
        return None
    return NARRATION_PROMPTS.get(content_type)


def build_messages(
    content_type: ContentType,
    voice: Voice,
    content: str,
    target_date: date,
    parameters: Mapping[str, Any],
) -> PromptMessages:
    """Render system and user prompts for one narration variant.

    Raises:
        KeyError: If *content_type* has no narration prompt.
    """

    prompt = NARRATION_PROMPTS[content_type]
    params: Dict[str, Any] = {
        **dict(parameters),
        "date": target_date.isoformat(),
        "dayOfWeek": target_date.strftime("%A"),
        "voice": voice.value,
    }
    return PromptMessages(
        system=prompt.system_prompt(voice),
        user=prompt.build_user_prompt(content, params),
        max_tokens=prompt.max_tokens,
        temperature=prompt.temperature,
    )
