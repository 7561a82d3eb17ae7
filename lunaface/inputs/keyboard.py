"""Keyboard controls — translate key names into face commands.

Keys are plain lowercase strings so any front end (pygame, a terminal,
a browser bridge) can feed them in. Commands are applied through a
FaceRuntime, never by touching the state machine directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from lunaface.core.states import FaceState, Play

if TYPE_CHECKING:
    from lunaface.runtime import FaceRuntime


@dataclass(frozen=True, slots=True)
class SetStateCmd:
    state: FaceState
    play: Play | None = None


@dataclass(frozen=True, slots=True)
class SetThemeCmd:
    theme: str | None = None  # None toggles


@dataclass(frozen=True, slots=True)
class PlayCmd:
    cue: Play


@dataclass(frozen=True, slots=True)
class ToggleCameraCmd:
    pass


Command = Union[SetStateCmd, SetThemeCmd, PlayCmd, ToggleCameraCmd]

KEYMAP: dict[str, Command] = {
    "1": SetThemeCmd("minimal"),
    "2": SetThemeCmd("kawaii"),
    "t": SetThemeCmd(None),
    "i": SetStateCmd(FaceState.IDLE),
    "b": SetStateCmd(FaceState.BLINK),
    "y": SetStateCmd(FaceState.SLEEPY),
    "z": SetStateCmd(FaceState.SLEEPING, play="sleep"),
    "s": SetStateCmd(FaceState.SPEAKING),
    "u": SetStateCmd(FaceState.SURPRISED),
    "a": SetStateCmd(FaceState.ANGRY),
    "h": SetStateCmd(FaceState.HAPPY),
    "l": SetStateCmd(FaceState.LOL),
    "p": PlayCmd("hey"),
    "c": ToggleCameraCmd(),
}

HELP_TEXT = (
    "1 minimal | 2 kawaii | t theme | i idle | b blink | y sleepy | z sleep | "
    "s speaking | u surprised | a angry | h happy | l lol | p play voice | c camera"
)


def command_for_key(key: str) -> Command | None:
    return KEYMAP.get(key.strip().lower()) if key else None


def apply_command(cmd: Command, runtime: FaceRuntime) -> None:
    if isinstance(cmd, SetStateCmd):
        runtime.machine.set_state(cmd.state)
        if cmd.play is not None:
            runtime.play(cmd.play)
    elif isinstance(cmd, SetThemeCmd):
        if cmd.theme is None:
            runtime.toggle_theme()
        else:
            runtime.set_theme(cmd.theme)
    elif isinstance(cmd, PlayCmd):
        runtime.play(cmd.cue)
    elif isinstance(cmd, ToggleCameraCmd):
        runtime.set_camera_enabled(not runtime.pipeline.camera_enabled)


def handle_key(key: str, runtime: FaceRuntime) -> bool:
    """Apply the command bound to *key*; False if the key is unbound."""
    cmd = command_for_key(key)
    if cmd is None:
        return False
    apply_command(cmd, runtime)
    return True
