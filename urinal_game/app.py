"""Pygame UI shell for The Urinal Game.

The deterministic game flow (scenario order, scoring, delays, phases) lives in
urinal_game/game.py. This module only draws what the controller tells it to
and turns mouse/keyboard/joystick input into controller calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

import pygame

from .clock import RealClock
from .game import GameConfig, GameController, Renderer, RendererNotConfiguredError, ScreenName
from .logging_config import configure_logging, debug_enabled
from .scenarios import FeedbackMessage, Fixture, FixtureKind, Rating

logger = logging.getLogger(__name__)

APP_VERSION = "2.0.0"
WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

_BG = (3, 9, 78)
_PANEL_BG = (8, 18, 104)
_HEADER_BG = (18, 30, 118)
_BORDER = (226, 236, 255)
_TEXT_MAIN = (238, 245, 255)
_TEXT_MUTED = (186, 200, 224)
_ACCENT = (255, 58, 242)
_GOOD = (72, 214, 120)
_BAD = (255, 107, 53)
_SELECTED = (255, 214, 64)
_FOCUS = (96, 220, 255)
_PORCELAIN = (232, 238, 246)
_PORCELAIN_DIM = (150, 158, 176)
_STALL_DOOR = (120, 136, 190)
_PERSON = (244, 170, 120)
_SHIRT = (70, 110, 200)

_CONFIRM_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def replace(self, screen: Screen) -> None:
        self._screens.clear()
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class GameScreen:
    """Single screen hosting title, game, feedback and results views.

    Implements the Renderer protocol: the controller pushes view state in,
    ``render`` draws whatever was pushed last.
    """

    def __init__(self, app: App, *, controller_factory: Callable[[Renderer], GameController]) -> None:
        self._app = app

        self._screen = ScreenName.TITLE
        self._scenario_id = 0
        self._problem_text = ""
        self._layout: tuple[Fixture, ...] = ()
        self._on_select: Callable[[int], object] | None = None
        self._selected: int | None = None
        self._revealed: tuple[int, ...] = ()
        self._input_enabled = False
        self._focus: int | None = None
        self._score = 0
        self._feedback: tuple[bool, FeedbackMessage] | None = None
        self._results: tuple[int, Rating] | None = None

        # Mouse hitboxes for selectable fixtures, refreshed during render.
        self._fixture_hitboxes: dict[int, pygame.Rect] = {}

        self._title_font = pygame.font.Font(None, 72)
        self._big_font = pygame.font.Font(None, 52)
        self._mid_font = pygame.font.Font(None, 34)
        self._small_font = pygame.font.Font(None, 26)
        self._hint_font = pygame.font.Font(None, 22)

        self._controller = controller_factory(self)

    @property
    def controller(self) -> GameController:
        return self._controller

    # -- Renderer ------------------------------------------------------------

    def render_layout(
        self,
        scenario_id: int,
        problem_text: str,
        layout: Sequence[Fixture],
        on_fixture_selected: Callable[[int], object],
    ) -> None:
        self._scenario_id = int(scenario_id)
        self._problem_text = str(problem_text)
        self._layout = tuple(layout)
        self._on_select = on_fixture_selected
        self._selected = None
        self._revealed = ()
        self._input_enabled = True
        selectable = self._selectable()
        self._focus = selectable[0] if selectable else None
        self._fixture_hitboxes = {}

    def highlight_selection(self, index: int) -> None:
        self._selected = int(index)

    def reveal_correct_answers(self, indices: Sequence[int]) -> None:
        self._revealed = tuple(int(i) for i in indices)

    def disable_all_input(self) -> None:
        self._input_enabled = False

    def show_screen(self, name: ScreenName) -> None:
        self._screen = ScreenName(name)

    def update_score(self, score: int) -> None:
        self._score = int(score)

    def show_feedback(self, is_correct: bool, feedback: FeedbackMessage) -> None:
        self._feedback = (bool(is_correct), feedback)

    def show_results(self, score: int, rating: Rating) -> None:
        self._results = (int(score), rating)

    # -- input -------------------------------------------------------------

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self._screen is ScreenName.GAME:
                for index, rect in self._fixture_hitboxes.items():
                    if rect.collidepoint(event.pos):
                        self._activate(index)
                        return
            return

        if event.type == pygame.MOUSEMOTION:
            if self._screen is ScreenName.GAME and self._input_enabled:
                for index, rect in self._fixture_hitboxes.items():
                    if rect.collidepoint(event.pos):
                        self._focus = index
                        return
            return

        if event.type == pygame.JOYHATMOTION:
            x, _ = event.value
            if x != 0:
                self._move_focus(x)
            return

        if event.type == pygame.JOYBUTTONDOWN and event.button == 0:
            self._confirm()

    def _handle_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self._app.quit()
            return
        if key in _CONFIRM_KEYS:
            self._confirm()
            return
        if self._screen is not ScreenName.GAME:
            return
        if key in (pygame.K_LEFT, pygame.K_a):
            self._move_focus(-1)
        elif key in (pygame.K_RIGHT, pygame.K_d):
            self._move_focus(1)
        else:
            index = self._index_from_key(key)
            if index is not None:
                self._activate(index)

    def _confirm(self) -> None:
        if self._screen is ScreenName.TITLE:
            self._controller.start()
        elif self._screen is ScreenName.GAME:
            if self._focus is not None:
                self._activate(self._focus)
        elif self._screen is ScreenName.FEEDBACK:
            self._controller.advance()
        elif self._screen is ScreenName.RESULTS:
            self._controller.restart()

    def _activate(self, index: int) -> None:
        # Occupied fixtures are never wired to selection.
        if not self._input_enabled or self._on_select is None:
            return
        if index not in self._selectable():
            return
        self._focus = index
        self._on_select(index)

    def _move_focus(self, delta: int) -> None:
        if not self._input_enabled:
            return
        selectable = self._selectable()
        if not selectable:
            return
        if self._focus not in selectable:
            self._focus = selectable[0]
            return
        pos = selectable.index(self._focus)
        self._focus = selectable[(pos + delta) % len(selectable)]

    def _selectable(self) -> list[int]:
        return [i for i, f in enumerate(self._layout) if not f.occupied]

    @staticmethod
    def _index_from_key(key: int) -> int | None:
        mapping = {
            pygame.K_1: 0,
            pygame.K_2: 1,
            pygame.K_3: 2,
            pygame.K_4: 3,
            pygame.K_5: 4,
            pygame.K_6: 5,
            pygame.K_7: 6,
            pygame.K_8: 7,
            pygame.K_9: 8,
            pygame.K_KP1: 0,
            pygame.K_KP2: 1,
            pygame.K_KP3: 2,
            pygame.K_KP4: 3,
            pygame.K_KP5: 4,
            pygame.K_KP6: 5,
            pygame.K_KP7: 6,
            pygame.K_KP8: 7,
            pygame.K_KP9: 8,
        }
        return mapping.get(key)

    # -- drawing -----------------------------------------------------------

    def render(self, surface: pygame.Surface) -> None:
        # Fire due timers before drawing so the frame reflects them.
        self._controller.update()

        surface.fill(_BG)
        frame = self._draw_frame(surface)

        if self._screen is ScreenName.TITLE:
            self._render_title(surface, frame)
        elif self._screen is ScreenName.GAME:
            self._render_game(surface, frame)
        elif self._screen is ScreenName.FEEDBACK:
            self._render_feedback(surface, frame)
        elif self._screen is ScreenName.RESULTS:
            self._render_results(surface, frame)

    def _draw_frame(self, surface: pygame.Surface) -> pygame.Rect:
        w, h = surface.get_size()
        margin = max(10, min(26, w // 34))
        frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
        pygame.draw.rect(surface, _PANEL_BG, frame)
        pygame.draw.rect(surface, _BORDER, frame, 2)
        return frame

    def _render_title(self, surface: pygame.Surface, frame: pygame.Rect) -> None:
        title = self._title_font.render("THE URINAL GAME", True, _ACCENT)
        surface.blit(title, title.get_rect(center=(frame.centerx, frame.y + frame.h // 3)))

        sub = self._mid_font.render("Test your restroom etiquette.", True, _TEXT_MAIN)
        surface.blit(sub, sub.get_rect(center=(frame.centerx, frame.y + frame.h // 3 + 60)))

        total = self._controller.catalog.scenario_count()
        info = self._small_font.render(f"{total} scenarios. Pick the right spot every time.", True, _TEXT_MUTED)
        surface.blit(info, info.get_rect(center=(frame.centerx, frame.y + frame.h // 3 + 100)))

        hint = self._hint_font.render("Enter/Space: Start  |  Esc: Quit", True, _TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))

    def _render_game(self, surface: pygame.Surface, frame: pygame.Rect) -> None:
        header_h = max(34, min(52, frame.h // 8))
        header = pygame.Rect(frame.x + 2, frame.y + 2, frame.w - 4, header_h)
        pygame.draw.rect(surface, _HEADER_BG, header)
        pygame.draw.line(surface, _BORDER, (header.x, header.bottom), (header.right, header.bottom), 1)

        badge = self._small_font.render(f"PROBLEM {self._scenario_id}", True, _ACCENT)
        surface.blit(badge, (header.x + 12, header.y + (header.h - badge.get_height()) // 2))

        total = self._controller.catalog.scenario_count()
        score = self._small_font.render(f"SCORE {self._score} / {total}", True, _TEXT_MAIN)
        surface.blit(score, (header.right - score.get_width() - 12, header.y + (header.h - score.get_height()) // 2))

        text_rect = pygame.Rect(frame.x + 24, header.bottom + 16, frame.w - 48, 70)
        self._draw_wrapped_text(
            surface, self._problem_text, text_rect, color=_TEXT_MAIN, font=self._mid_font, max_lines=2
        )

        room = pygame.Rect(frame.x + 24, text_rect.bottom + 10, frame.w - 48, frame.bottom - text_rect.bottom - 60)
        self._draw_restroom(surface, room)

        hint = self._hint_font.render(
            "Click a fixture  |  Left/Right + Enter  |  1-9: Pick directly  |  Esc: Quit", True, _TEXT_MUTED
        )
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))

    def _draw_restroom(self, surface: pygame.Surface, room: pygame.Rect) -> None:
        self._fixture_hitboxes = {}
        n = len(self._layout)
        if n == 0:
            return

        pygame.draw.line(surface, _TEXT_MUTED, (room.x, room.bottom - 28), (room.right, room.bottom - 28), 2)

        slot_w = min(130, room.w // n)
        start_x = room.centerx - (slot_w * n) // 2
        body_h = min(190, room.h - 40)

        for index, fixture in enumerate(self._layout):
            slot = pygame.Rect(start_x + index * slot_w, room.bottom - 28 - body_h, slot_w, body_h)
            body = slot.inflate(-max(12, slot_w // 5), 0)
            if fixture.kind is FixtureKind.STALL:
                self._draw_stall(surface, body, fixture)
            else:
                self._draw_urinal(surface, body, fixture)

            if fixture.occupied:
                self._draw_person(surface, body)
            else:
                self._fixture_hitboxes[index] = body
                self._draw_fixture_state(surface, body, index)

            label = "STALL" if fixture.kind is FixtureKind.STALL else str(index + 1)
            text = self._small_font.render(label, True, _TEXT_MUTED)
            surface.blit(text, text.get_rect(midtop=(slot.centerx, slot.bottom + 6)))

    def _draw_urinal(self, surface: pygame.Surface, body: pygame.Rect, fixture: Fixture) -> None:
        color = _PORCELAIN_DIM if (fixture.occupied or not self._input_enabled) else _PORCELAIN
        bowl = pygame.Rect(body.x, body.y + body.h // 3, body.w, body.h // 2)
        pygame.draw.rect(surface, color, bowl, border_radius=max(6, body.w // 3))
        pipe = pygame.Rect(body.centerx - 4, body.y + 8, 8, body.h // 3)
        pygame.draw.rect(surface, _PORCELAIN_DIM, pipe)

    def _draw_stall(self, surface: pygame.Surface, body: pygame.Rect, fixture: Fixture) -> None:
        color = _STALL_DOOR if not fixture.occupied else _PORCELAIN_DIM
        pygame.draw.rect(surface, color, body)
        pygame.draw.rect(surface, _BORDER, body, 2)
        pygame.draw.circle(surface, _BORDER, (body.right - 10, body.centery), 4)

    def _draw_person(self, surface: pygame.Surface, body: pygame.Rect) -> None:
        head_r = max(8, body.w // 6)
        cx = body.centerx
        top = body.y + body.h // 6
        pygame.draw.circle(surface, _PERSON, (cx, top + head_r), head_r)
        torso = pygame.Rect(cx - head_r, top + head_r * 2 + 2, head_r * 2, body.h // 3)
        pygame.draw.rect(surface, _SHIRT, torso, border_radius=4)
        leg_top = torso.bottom
        leg_h = max(10, body.bottom - leg_top)
        pygame.draw.rect(surface, _SHIRT, pygame.Rect(cx - head_r + 2, leg_top, head_r - 3, leg_h))
        pygame.draw.rect(surface, _SHIRT, pygame.Rect(cx + 1, leg_top, head_r - 3, leg_h))

    def _draw_fixture_state(self, surface: pygame.Surface, body: pygame.Rect, index: int) -> None:
        outline = body.inflate(8, 8)
        if index in self._revealed:
            pygame.draw.rect(surface, _GOOD, outline, 4, border_radius=8)
        if index == self._selected:
            pygame.draw.rect(surface, _SELECTED, outline.inflate(8, 8), 4, border_radius=10)
        elif self._input_enabled and index == self._focus:
            pygame.draw.rect(surface, _FOCUS, outline, 2, border_radius=8)

    def _render_feedback(self, surface: pygame.Surface, frame: pygame.Rect) -> None:
        if self._feedback is None:
            return
        is_correct, feedback = self._feedback
        color = _GOOD if is_correct else _BAD

        icon = self._title_font.render("RIGHT" if is_correct else "WRONG", True, color)
        surface.blit(icon, icon.get_rect(center=(frame.centerx, frame.y + frame.h // 4)))

        title = self._big_font.render(feedback.title, True, color)
        surface.blit(title, title.get_rect(center=(frame.centerx, frame.y + frame.h // 4 + 64)))

        msg_rect = pygame.Rect(frame.x + 60, frame.y + frame.h // 4 + 110, frame.w - 120, frame.h // 3)
        self._draw_wrapped_text(
            surface, feedback.message, msg_rect, color=_TEXT_MAIN, font=self._small_font, max_lines=5
        )

        hint = self._hint_font.render("Enter/Space: Continue  |  Esc: Quit", True, _TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))

    def _render_results(self, surface: pygame.Surface, frame: pygame.Rect) -> None:
        if self._results is None:
            return
        score, rating = self._results
        total = self._controller.catalog.scenario_count()

        head = self._mid_font.render("FINAL SCORE", True, _TEXT_MUTED)
        surface.blit(head, head.get_rect(center=(frame.centerx, frame.y + frame.h // 5)))

        value = self._title_font.render(f"{score} / {total}", True, _TEXT_MAIN)
        surface.blit(value, value.get_rect(center=(frame.centerx, frame.y + frame.h // 5 + 56)))

        title = self._big_font.render(rating.title, True, _ACCENT)
        surface.blit(title, title.get_rect(center=(frame.centerx, frame.y + frame.h // 5 + 124)))

        msg_rect = pygame.Rect(frame.x + 60, frame.y + frame.h // 5 + 170, frame.w - 120, frame.h // 4)
        self._draw_wrapped_text(surface, rating.message, msg_rect, color=_TEXT_MAIN, font=self._small_font, max_lines=4)

        hint = self._hint_font.render("Enter/Space: Play again  |  Esc: Quit", True, _TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))

    def _draw_wrapped_text(
        self,
        surface: pygame.Surface,
        text: str,
        rect: pygame.Rect,
        *,
        color: tuple[int, int, int],
        font: pygame.font.Font,
        max_lines: int,
    ) -> None:
        words = str(text).split()
        lines: list[str] = []
        cur = ""
        for word in words:
            trial = word if cur == "" else f"{cur} {word}"
            if font.size(trial)[0] <= rect.w:
                cur = trial
                continue
            if cur:
                lines.append(cur)
            cur = word
        if cur:
            lines.append(cur)

        y = rect.y
        line_h = font.get_linesize() + 2
        for line in lines[: max(0, max_lines)]:
            to_draw = line
            if font.size(to_draw)[0] > rect.w:
                while to_draw and font.size(f"{to_draw}...")[0] > rect.w:
                    to_draw = to_draw[:-1]
                to_draw = f"{to_draw}..." if to_draw else "..."
            surface.blit(font.render(to_draw, True, color), (rect.x, y))
            y += line_h


class LoadErrorScreen:
    """Shown when the game cannot be wired up; offers a reload, never a half-built game."""

    def __init__(self, app: App, *, on_reload: Callable[[], None]) -> None:
        self._app = app
        self._on_reload = on_reload
        self._title_font = pygame.font.Font(None, 52)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in _CONFIRM_KEYS:
            self._on_reload()
        elif event.key == pygame.K_ESCAPE:
            self._app.quit()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(_BG)
        w, h = surface.get_size()
        title = self._title_font.render("Oops! Something went wrong.", True, _BAD)
        surface.blit(title, title.get_rect(center=(w // 2, h // 2 - 40)))
        msg = self._app.font.render("Failed to start the game. Please reload.", True, _TEXT_MUTED)
        surface.blit(msg, msg.get_rect(center=(w // 2, h // 2 + 10)))
        hint = self._app.font.render("Enter: RELOAD  |  Esc: Quit", True, _TEXT_MAIN)
        surface.blit(hint, hint.get_rect(center=(w // 2, h // 2 + 60)))


def _init_joysticks() -> None:
    # Safe on platforms with no joystick support.
    try:
        count = pygame.joystick.get_count()
    except pygame.error:
        return

    for i in range(count):
        try:
            js = pygame.joystick.Joystick(i)
            js.init()
        except pygame.error:
            continue


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    controller_factory: Callable[[Renderer], GameController] | None = None,
) -> int:
    debug = debug_enabled()
    configure_logging(debug=debug)
    logger.debug("The Urinal Game v%s (pygame %s)", APP_VERSION, pygame.version.ver)

    pygame.init()
    _init_joysticks()

    pygame.display.set_caption("The Urinal Game")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    real_clock = RealClock()

    def default_factory(renderer: Renderer) -> GameController:
        return GameController(renderer=renderer, clock=real_clock, config=GameConfig.from_env())

    factory = default_factory if controller_factory is None else controller_factory

    def open_game() -> None:
        try:
            screen = GameScreen(app, controller_factory=factory)
        except (RendererNotConfiguredError, ValueError):
            logger.exception("failed to initialise the game")
            app.replace(LoadErrorScreen(app, on_reload=open_game))
            return
        logger.debug(
            "game initialised: %d scenarios, renderer=%s, config=%s",
            screen.controller.catalog.scenario_count(),
            type(screen).__name__,
            screen.controller.config,
        )
        app.replace(screen)

    open_game()

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0
