"""Derived system prompt for the simulator export."""

from __future__ import annotations

from stationv.models import LanguageSkill, VirtualUser


def describe_language_skill(skill: LanguageSkill) -> str:
    line = f"You speak {skill.language} ({skill.fluency.value})."
    if skill.accent:
        line += f" Your accent is {skill.accent}."
    return line


def build_system_prompt(user: VirtualUser) -> str:
    """Render the character sheet the simulator hands to its chat model."""
    style = user.writing_style
    speech = "\n".join(describe_language_skill(s) for s in user.language_skills)
    return (
        f"You are an IRC user named {user.nickname}.\n"
        "\n"
        "**Personality:**\n"
        f"{user.personality}\n"
        "\n"
        "**Language & Speech:**\n"
        f"{speech}\n"
        "\n"
        "**Writing Style:**\n"
        f"- Formality: {style.formality}\n"
        f"- Verbosity: {style.verbosity}\n"
        f"- Humor: {style.humor}\n"
        f"- Emoji Usage: {style.emoji_usage}\n"
        f"- Punctuation: {style.punctuation}\n"
        "\n"
        "Adhere strictly to these characteristics in all your responses. "
        "Do not break character."
    )
