"""Face preview — drives the face core from the keyboard and draws it.

Run: python tools/face_sim.py

Only rough minimal and kawaii shapes are drawn. Useful for watching blink,
auto-revert and sleep timing live.
"""

from __future__ import annotations

import logging
import math
import sys

import pygame

from lunaface.config import LunaConfig
from lunaface.core.states import FaceState
from lunaface.core.tick_loop import FrameParams
from lunaface.inputs.keyboard import HELP_TEXT, handle_key
from lunaface.runtime import FaceRuntime

WINDOW_W = 640
WINDOW_H = 520
HUD_H = 40
FPS = 60

THEME_COLORS = {
    "minimal": {"bg": (243, 154, 163), "eye": (18, 18, 18), "face": None},
    "kawaii": {"bg": (255, 215, 240), "eye": (22, 22, 22), "face": (255, 255, 255)},
}


def _draw_face(surface: pygame.Surface, f: FrameParams, radius: float) -> None:
    colors = THEME_COLORS.get(f.theme, THEME_COLORS["minimal"])
    surface.fill(colors["bg"])

    cx = WINDOW_W / 2
    cy = (WINDOW_H - HUD_H) / 2
    if colors["face"] is not None:
        pygame.draw.circle(surface, colors["face"], (int(cx), int(cy)), int(radius * 0.95))

    shift_x = (f.drift_x + f.look_x * 0.05) * radius
    shift_y = (f.drift_y + f.look_y * 0.05 + f.sleepiness * 0.08) * radius

    boost = 1.25 if f.state == FaceState.SURPRISED else 1.0
    squint = 0.55 if f.state == FaceState.ANGRY else 1.0
    eye_w = radius * 0.28
    eye_h = max(3.0, eye_w * boost * (1 - f.blink) * (1 - f.sleepiness * 0.65) * squint)
    gap = radius * 0.38
    y = cy - radius * 0.05 + shift_y
    for sign in (-1, 1):
        rect = pygame.Rect(0, 0, int(eye_w), int(eye_h))
        rect.center = (int(cx + sign * gap + shift_x), int(y))
        pygame.draw.rect(surface, colors["eye"], rect)

    if f.state != FaceState.SLEEPING:
        mouth_y = int(cy + radius * 0.35)
        mouth_r = int(radius * (0.11 if f.state in (FaceState.HAPPY, FaceState.LOL) else 0.06))
        arc = pygame.Rect(0, 0, mouth_r * 2, mouth_r * 2)
        arc.center = (int(cx), mouth_y)
        pygame.draw.arc(surface, (60, 30, 30), arc, math.pi, 2 * math.pi, 3)

    if f.drool is not None and f.drool["a"] > 0:
        bubble = pygame.Surface((WINDOW_W, WINDOW_H), pygame.SRCALPHA)
        alpha = int(255 * f.drool["a"])
        pos = (int(cx + f.drool["x"] * radius), int(cy + f.drool["y"] * radius))
        pygame.draw.circle(bubble, (120, 210, 255, alpha), pos, max(1, int(f.drool["r"])))
        surface.blit(bubble, (0, 0))

    if f.state == FaceState.SLEEPING:
        shade = pygame.Surface((WINDOW_W, WINDOW_H - HUD_H), pygame.SRCALPHA)
        shade.fill((0, 0, 0, int(255 * 0.10 * f.breath)))
        surface.blit(shade, (0, 0))


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )
    pygame.init()
    screen = pygame.display.set_mode((WINDOW_W, WINDOW_H))
    pygame.display.set_caption("LunaFace preview")
    font = pygame.font.SysFont("monospace", 12)
    clock = pygame.time.Clock()

    radius = min(WINDOW_W, WINDOW_H - HUD_H) * 0.34
    cfg = LunaConfig()
    cfg.face.fps = FPS
    cfg.face.face_radius = radius
    runtime = FaceRuntime(cfg)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    running = False
                elif event.unicode:
                    handle_key(event.unicode, runtime)

        frame = runtime.loop.step()
        _draw_face(screen, frame, radius)

        hud = font.render(
            f"{frame.state.value:<10} {frame.theme:<8} blink={frame.blink:.2f}  {HELP_TEXT}",
            True,
            (30, 30, 30),
        )
        screen.blit(hud, (6, WINDOW_H - HUD_H + 12))
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
