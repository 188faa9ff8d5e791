"""CLI entry point for stationv."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import NoReturn

import click

from stationv.config import Config
from stationv.constants import (
    EMOJI_LEVELS,
    FORMALITY_LEVELS,
    HUMOR_LEVELS,
    PUNCTUATION_LEVELS,
    VERBOSITY_LEVELS,
)
from stationv.errors import StationError
from stationv.models import (
    DEFAULT_LANGUAGE_SKILL,
    Channel,
    Fluency,
    LanguageSkill,
    UserDraft,
    VirtualUser,
    World,
    WritingStyle,
    new_id,
)
from stationv.repository import WorldRepository
from stationv.storage import JsonDirStore
from stationv.validation import validate_channel_name, validate_nickname


@dataclass
class _State:
    config: Config
    repo: WorldRepository


pass_state = click.make_pass_decorator(_State)


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(1)


def _resolve_user(repo: WorldRepository, ref: str) -> VirtualUser:
    user = repo.get_user(ref) or repo.find_user_by_nickname(ref)
    if user is None:
        _fail(f"No such user: {ref}")
    return user


def _resolve_channel(repo: WorldRepository, ref: str) -> Channel:
    channel = repo.get_channel(ref) or repo.find_channel_by_name(ref)
    if channel is None:
        _fail(f"No such channel: {ref}")
    return channel


def _describe_user(user: VirtualUser) -> str:
    skills = ", ".join(
        f"{s.language} ({s.fluency.value}{', ' + s.accent if s.accent else ''})"
        for s in user.language_skills
    ) or "no languages"
    return f"{user.nickname:<20} {skills}"


def _style_options(func):
    """Attach the five writing-style options to a command."""
    for name, levels in reversed((
        ("formality", FORMALITY_LEVELS),
        ("verbosity", VERBOSITY_LEVELS),
        ("humor", HUMOR_LEVELS),
        ("emoji-usage", EMOJI_LEVELS),
        ("punctuation", PUNCTUATION_LEVELS),
    )):
        func = click.option(f"--{name}", type=click.Choice(levels), default=None)(func)
    return func


def _style_update(base: WritingStyle, **axes: str | None) -> WritingStyle:
    changes = {k: v for k, v in axes.items() if v is not None}
    return base.model_copy(update=changes) if changes else base


def _parse_skills(languages: tuple[str, ...]) -> list[LanguageSkill]:
    """``LANG[:FLUENCY[:ACCENT]]`` → skill, e.g. ``French:Fluent:Parisian``."""
    skills: list[LanguageSkill] = []
    for raw in languages:
        language, _, rest = raw.partition(":")
        fluency, _, accent = rest.partition(":")
        try:
            skills.append(LanguageSkill(
                language=language.strip(),
                fluency=Fluency(fluency.strip().capitalize() or Fluency.NATIVE.value),
                accent=accent.strip(),
            ))
        except ValueError:
            valid = ", ".join(f.value for f in Fluency)
            _fail(f"Invalid language option {raw!r}. Fluency must be one of: {valid}")
    return skills


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.option("--data-dir", default=None, help="Directory holding the saved roster")
@click.option("--provider", default=None, help="LLM provider (google/openai/anthropic/deepseek/openrouter)")
@click.option("--model", "-m", default=None, help="LLM model (e.g. gemini/gemini-2.5-flash)")
@click.option("--api-base", default=None, help="LLM API base URL")
@click.option("--api-key", default=None, help="LLM API key")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def main(
    ctx: click.Context,
    data_dir: str | None,
    provider: str | None,
    model: str | None,
    api_base: str | None,
    api_key: str | None,
    verbose: bool,
) -> None:
    """stationv: roster editor for the Station V IRC simulator."""
    from stationv.llm import get_provider, list_providers

    config = Config.from_env()
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    llm_overrides: dict[str, object] = {}
    if provider:
        pinfo = get_provider(provider)
        if not pinfo:
            _fail(f"Unknown provider: {provider}\nAvailable: {', '.join(list_providers())}")
        if pinfo.api_base:
            llm_overrides["api_base"] = pinfo.api_base
        if not model:
            llm_overrides["model"] = pinfo.default_model
        llm_overrides["provider"] = provider
    if model:
        llm_overrides["model"] = model
    if api_base:
        llm_overrides["api_base"] = api_base
    if api_key:
        llm_overrides["api_key"] = api_key
    if llm_overrides:
        config = replace(config, llm=replace(config.llm, **llm_overrides))
    if data_dir:
        config = replace(config, data_dir=data_dir)

    ctx.obj = _State(config=config, repo=WorldRepository(JsonDirStore(config.data_dir)))


@main.command("models")
def list_models() -> None:
    """List the catalog of generation models."""
    from stationv.llm import MODELS

    for info in MODELS.values():
        click.echo(f"{info.model:<32} {info.name} - {info.description} (cost: {info.cost})")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@main.group()
def users() -> None:
    """Manage virtual users."""


@users.command("list")
@pass_state
def users_list(state: _State) -> None:
    roster = state.repo.users
    click.echo(f"Virtual Users ({len(roster)})")
    for user in roster:
        click.echo(f"  {_describe_user(user)}")


@users.command("show")
@click.argument("user_ref")
@pass_state
def users_show(state: _State, user_ref: str) -> None:
    """Print one user as JSON."""
    import json

    user = _resolve_user(state.repo, user_ref)
    click.echo(json.dumps(user.to_dict(), indent=2, ensure_ascii=False))


@users.command("add")
@click.argument("nickname", required=False)
@click.option("--personality", "-p", default="", help="Free-text personality")
@click.option("--language", "-l", "languages", multiple=True, help="LANG[:FLUENCY[:ACCENT]], repeatable")
@click.option("--ai-nickname", is_flag=True, help="Ask the model for a nickname")
@_style_options
@pass_state
def users_add(
    state: _State,
    nickname: str | None,
    personality: str,
    languages: tuple[str, ...],
    ai_nickname: bool,
    **axes: str | None,
) -> None:
    """Create a user."""
    if ai_nickname:
        from stationv.generators import generate_nickname

        nickname = asyncio.run(generate_nickname(state.config.llm))
    nickname = nickname or ""
    error = validate_nickname(nickname, state.repo.nicknames())
    if error:
        _fail(error)

    draft = UserDraft(
        nickname=nickname,
        personality=personality,
        language_skills=_parse_skills(languages) or [DEFAULT_LANGUAGE_SKILL],
        writing_style=_style_update(WritingStyle(), **axes),
    )
    user = state.repo.upsert_user(draft.with_id())
    click.echo(f"Added {user.nickname} ({user.id})")


@users.command("edit")
@click.argument("user_ref")
@click.option("--nickname", default=None)
@click.option("--personality", "-p", default=None)
@click.option("--language", "-l", "languages", multiple=True, help="Replace all language skills")
@_style_options
@pass_state
def users_edit(
    state: _State,
    user_ref: str,
    nickname: str | None,
    personality: str | None,
    languages: tuple[str, ...],
    **axes: str | None,
) -> None:
    """Edit a user in place (by id or nickname)."""
    user = _resolve_user(state.repo, user_ref)
    updates: dict[str, object] = {}
    if nickname is not None:
        error = validate_nickname(nickname, state.repo.nicknames(), current=user.nickname)
        if error:
            _fail(error)
        updates["nickname"] = nickname
    if personality is not None:
        updates["personality"] = personality
    if languages:
        updates["language_skills"] = _parse_skills(languages)
    updates["writing_style"] = _style_update(user.writing_style, **axes)
    state.repo.upsert_user(user.model_copy(update=updates))
    click.echo(f"Updated {updates.get('nickname', user.nickname)}")


@users.command("remove")
@click.argument("user_ref")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@pass_state
def users_remove(state: _State, user_ref: str, yes: bool) -> None:
    """Delete a user and remove it from every channel."""
    user = _resolve_user(state.repo, user_ref)
    if not yes:
        click.confirm(
            f"Delete user {user.nickname}? They will be removed from all channels.",
            abort=True,
        )
    state.repo.remove_user(user.id)
    click.echo(f"Deleted {user.nickname}")


@users.command("generate")
@click.option("--count", "-c", type=click.IntRange(1, 50), default=5, show_default=True)
@click.option(
    "--strategy",
    "-s",
    type=click.Choice(["random", "template", "ai"]),
    default="template",
    show_default=True,
)
@click.option("--commit", is_flag=True, help="Add the candidates instead of only previewing them")
@pass_state
def users_generate(state: _State, count: int, strategy: str, commit: bool) -> None:
    """Generate candidate users (preview unless --commit)."""
    from stationv.generators import generate

    if strategy == "ai":
        click.echo(f"Generating with {state.config.llm.model}...")
    try:
        drafts = asyncio.run(
            generate(count, strategy, state.repo.nicknames(), llm=state.config.llm)
        )
    except StationError as exc:
        _fail(f"Failed to generate users: {exc}")

    for draft in drafts:
        click.echo(f"  {draft.nickname}: {draft.personality}")
    if commit:
        created = state.repo.add_users(drafts)
        click.echo(f"Added {len(created)} users.")
    else:
        click.echo("Preview only; re-run with --commit to add them.")


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


@main.group()
def channels() -> None:
    """Manage channels."""


@channels.command("list")
@pass_state
def channels_list(state: _State) -> None:
    roster = state.repo.channels
    click.echo(f"Channels ({len(roster)})")
    for channel in roster:
        members = state.repo.members(channel.id)
        click.echo(f"  {channel.name:<20} {len(members)} users  {channel.topic}")


@channels.command("add")
@click.argument("name")
@click.option("--topic", "-t", default="")
@click.option("--user", "-u", "user_refs", multiple=True, help="Member id or nickname, repeatable")
@pass_state
def channels_add(state: _State, name: str, topic: str, user_refs: tuple[str, ...]) -> None:
    """Create a channel."""
    error = validate_channel_name(name)
    if error:
        _fail(error)
    member_ids = list(dict.fromkeys(_resolve_user(state.repo, ref).id for ref in user_refs))
    channel = state.repo.upsert_channel(
        Channel(id=new_id(), name=name, topic=topic, users=member_ids)
    )
    click.echo(f"Added {channel.name} ({channel.id})")


@channels.command("edit")
@click.argument("channel_ref")
@click.option("--name", default=None)
@click.option("--topic", "-t", default=None)
@click.option("--join", "joins", multiple=True, help="Add a member (id or nickname)")
@click.option("--part", "parts", multiple=True, help="Remove a member (id or nickname)")
@pass_state
def channels_edit(
    state: _State,
    channel_ref: str,
    name: str | None,
    topic: str | None,
    joins: tuple[str, ...],
    parts: tuple[str, ...],
) -> None:
    """Edit a channel in place (by id or name)."""
    channel = _resolve_channel(state.repo, channel_ref)
    updates: dict[str, object] = {}
    if name is not None:
        error = validate_channel_name(name)
        if error:
            _fail(error)
        updates["name"] = name
    if topic is not None:
        updates["topic"] = topic
    if joins or parts:
        leaving = {_resolve_user(state.repo, ref).id for ref in parts}
        members = [uid for uid in channel.users if uid not in leaving]
        members += [_resolve_user(state.repo, ref).id for ref in joins]
        updates["users"] = list(dict.fromkeys(members))
    state.repo.upsert_channel(channel.model_copy(update=updates))
    click.echo(f"Updated {updates.get('name', channel.name)}")


@channels.command("remove")
@click.argument("channel_ref")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@pass_state
def channels_remove(state: _State, channel_ref: str, yes: bool) -> None:
    channel = _resolve_channel(state.repo, channel_ref)
    if not yes:
        click.confirm(f"Delete channel {channel.name}?", abort=True)
    state.repo.remove_channel(channel.id)
    click.echo(f"Deleted {channel.name}")


@channels.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@pass_state
def channels_clear(state: _State, yes: bool) -> None:
    """Delete every channel. Users are kept."""
    if not yes:
        click.confirm(f"Delete all {len(state.repo.channels)} channels?", abort=True)
    count = state.repo.clear_channels()
    click.echo(f"Deleted {count} channels")


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


@main.command("export")
@click.argument(
    "dialect",
    type=click.Choice(["world", "users", "enriched", "channels", "csv"]),
)
@click.option("--output", "-o", default=".", help="Output directory")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print instead of writing a file")
@pass_state
def export_cmd(state: _State, dialect: str, output: str, to_stdout: bool) -> None:
    """Export the roster in one of the supported dialects."""
    from stationv.formats import EXPORT_FILENAMES, ExportDialect, render_export

    content = render_export(state.repo, dialect)
    if to_stdout:
        click.echo(content)
        return
    out = Path(output)
    out.mkdir(parents=True, exist_ok=True)
    path = out / EXPORT_FILENAMES[ExportDialect(dialect)]
    path.write_text(content, encoding="utf-8")
    click.echo(f"  ✓ {path}")


@main.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "csv"]),
    default=None,
    help="Override the format implied by the file extension",
)
@pass_state
def import_cmd(state: _State, file: Path, fmt: str | None) -> None:
    """Merge a world (.json) or user list (.json/.csv) into the roster."""
    from stationv.formats import format_from_filename, import_into

    try:
        text = file.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        _fail("File is not valid UTF-8 text.")
    try:
        parsed = import_into(state.repo, text, fmt or format_from_filename(file.name))
    except StationError as exc:
        _fail(str(exc))

    if isinstance(parsed, World):
        click.echo(f"Imported {len(parsed.users)} users and {len(parsed.channels)} channels.")
    else:
        click.echo(f"Imported {len(parsed)} users.")


if __name__ == "__main__":
    main()
