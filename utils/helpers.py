"""helpers.py - Reusable drawing helpers for the HUD and end screen."""

import pygame
from settings import WHITE, SCREEN_WIDTH, SCREEN_HEIGHT, FONT_SIZE

_FONTS: dict = {}


def _font(size):
    if size not in _FONTS:
        _FONTS[size] = pygame.font.SysFont(None, size)
    return _FONTS[size]


def draw_text(surface, text, x, y, color=WHITE, size=FONT_SIZE):
    """Render a single line of text at (x, y)."""
    rendered = _font(size).render(text, True, color)
    surface.blit(rendered, (x, y))


def draw_end_screen(surface, message, detail=""):
    """Fill the screen with a dark overlay and show a large
    game-over message, an optional detail line, and a restart hint."""
    overlay = pygame.Surface((SCREEN_WIDTH, SCREEN_HEIGHT))
    overlay.set_alpha(180)
    overlay.fill((0, 0, 0))
    surface.blit(overlay, (0, 0))

    # Main message
    text = _font(72).render(message, True, WHITE)
    rect = text.get_rect(center=(SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2 - 30))
    surface.blit(text, rect)

    if detail:
        sub = _font(30).render(detail, True, (200, 200, 200))
        surface.blit(sub, sub.get_rect(center=(SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2 + 15)))

    # Hint
    hint = _font(30).render("Press R or Space to Restart  |  ESC to Quit", True, WHITE)
    hint_rect = hint.get_rect(center=(SCREEN_WIDTH // 2, SCREEN_HEIGHT // 2 + 55))
    surface.blit(hint, hint_rect)
