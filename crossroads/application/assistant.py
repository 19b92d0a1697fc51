"""Rule-based traffic assistant.

Reads a status snapshot and answers free-form prompts with a canned summary.
Keyword families are checked in order and the first match decides the reply
header; everything else falls back to echoing the question.
"""
import math
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from crossroads.domain.models import AssistantReply, DirectionStatus
from crossroads.domain import config

CONGESTION_KEYWORDS = ("congestion", "traffic jam", "blocked")
ETA_KEYWORDS = ("eta", "time", "when")
EMERGENCY_KEYWORDS = ("emergency", "accident", "incident")
VOLUME_KEYWORDS = ("density", "vehicles", "volume")
SPEED_KEYWORDS = ("speed", "fast", "slow")
ROUTE_KEYWORDS = ("route", "direction", "way")


def format_number(value: Optional[float]) -> str:
    """Prints numbers the way a browser would: 20.0 as "20", 1e-05 as "0.00001",
    1e-07 as "1e-7" and 1e21 as "1e+21".
    """
    if value is None:
        return "n/a"
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    text = repr(number)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    # Positional notation between 1e-7 and 1e21, exponent without padding outside
    if -7 < exponent < 21:
        return format(Decimal(text), "f")
    sign = "+" if exponent > 0 else "-"
    return f"{mantissa}e{sign}{abs(exponent)}"


def summarize(status: Dict[str, DirectionStatus]) -> Tuple[List[str], List[str]]:
    """Returns one line per direction plus the suggestions they trigger."""
    lines = []
    suggestions = []

    for direction, info in status.items():
        density = info.density or 0
        volumes = info.volumes
        lines.append(
            f"{direction}: density {format_number(density)} veh/km, total {volumes.total} vehicles; "
            f"first ETA {format_number(info.firstGroup.estimatedTimeToReach)}s, "
            f"second ETA {format_number(info.secondGroup.estimatedTimeToReach)}s"
        )

        if density >= config.HIGH_DENSITY or volumes.total >= config.HIGH_VOLUME:
            suggestions.append(f"{direction}: high density - consider reducing inflow or rerouting traffic")
        elif density >= config.MODERATE_DENSITY:
            suggestions.append(f"{direction}: moderate density - monitor speed and volumes")

        if info.firstGroup.hasReached and not info.secondGroup.hasReached:
            suggestions.append(
                f"{direction}: first group has reached; you may accelerate the second group or clear the path"
            )

    return lines, suggestions


def _bullets(suggestions: List[str]) -> str:
    return "Suggestions:\n- " + "\n- ".join(suggestions)


def _matches(prompt: str, keywords) -> bool:
    return any(keyword in prompt for keyword in keywords)


def build_reply(status: Dict[str, DirectionStatus], prompt: Optional[str] = None) -> AssistantReply:
    lines, suggestions = summarize(status)

    summary = "Traffic summary:\n" + "\n".join(lines)
    if suggestions:
        summary += "\n\n" + _bullets(suggestions)

    reply = summary

    if prompt and prompt.strip():
        lowered = prompt.lower()

        if _matches(lowered, CONGESTION_KEYWORDS):
            congested = [
                f"{direction} ({format_number(info.density)} veh/km)"
                for direction, info in status.items()
                if (info.density or 0) >= config.HIGH_DENSITY
            ]
            headline = (
                f"High congestion detected in: {', '.join(congested)}" if congested
                else "No major congestion detected."
            )
            reply = f"🚨 Congestion Status:\n{headline}\n\n{summary}"
        elif _matches(lowered, ETA_KEYWORDS):
            advice = _bullets(suggestions) if suggestions else ""
            reply = "⏱️ Estimated Times:\n" + "\n".join(lines) + "\n\n" + advice
        elif _matches(lowered, EMERGENCY_KEYWORDS):
            reply = (
                "🚨 Emergency Protocol:\n"
                "- All lanes in affected directions have reduced speed\n"
                "- Emergency vehicles have priority\n"
                "- Please follow traffic control instructions\n\n"
                f"{summary}"
            )
        elif _matches(lowered, VOLUME_KEYWORDS):
            total_vehicles = sum(info.volumes.total for info in status.values())
            average_density = sum((info.density or 0) for info in status.values()) / max(1, len(status))
            reply = (
                "📊 Traffic Volume Report:\n"
                f"Total Vehicles: {total_vehicles}\n"
                f"Average Density: {average_density:.1f} veh/km\n\n"
                f"{summary}"
            )
        elif _matches(lowered, SPEED_KEYWORDS):
            reply = (
                "🚗 Speed Advisory:\n"
                "Monitor speed limits based on current traffic conditions. Current status:\n"
                f"{summary}"
            )
        elif _matches(lowered, ROUTE_KEYWORDS):
            quiet = [direction for direction, info in status.items() if (info.density or 0) < config.MODERATE_DENSITY]
            headline = (
                f"Recommended directions: {', '.join(quiet)}" if quiet
                else "Monitor all directions for best route."
            )
            reply = f"🗺️ Route Recommendation:\n{headline}\n\n{summary}"
        else:
            reply = f"📍 Traffic Information:\nYour Question: \"{prompt}\"\n\n{summary}"

    return AssistantReply(reply=reply, suggestions=suggestions, statusSnapshot=status)
