"""A window that shows the 64x32 monochrome frame buffer."""

from __future__ import annotations

from typing import Iterator, Optional, Sequence

import pygame

WIDTH = 64
HEIGHT = 32
SCALE = 10
TITLE = "64x32 Display"
BACKGROUND = (0, 0, 0, 255)
FOREGROUND = (255, 255, 255, 255)


def pixel_rects(
    pixels: Sequence[int], width: int = WIDTH, scale: int = SCALE
) -> Iterator[tuple[int, int, int, int]]:
    """Yield an (x, y, w, h) rectangle for every lit pixel."""
    for position, lit in enumerate(pixels):
        if lit:
            y, x = divmod(position, width)
            yield (x * scale, y * scale, scale, scale)


class Display:
    """A scaled window onto the frame buffer."""

    def __init__(self, scale: int = SCALE) -> None:
        self.scale = scale
        self.surface: Optional[pygame.Surface] = None

    @property
    def size(self) -> tuple[int, int]:
        return (WIDTH * self.scale, HEIGHT * self.scale)

    def open(self) -> "Display":
        """Create the window."""
        pygame.init()
        self.surface = pygame.display.set_mode(self.size)
        pygame.display.set_caption(TITLE)
        return self

    def render(self, pixels: Sequence[int]) -> None:
        """Draw a frame: white lit pixels on black."""
        if self.surface is None:
            raise RuntimeError("display is not open")
        self.surface.fill(BACKGROUND)
        for rect in pixel_rects(pixels, WIDTH, self.scale):
            pygame.draw.rect(self.surface, FOREGROUND, rect)
        pygame.display.flip()

    def close(self) -> None:
        """Destroy the window."""
        if self.surface is not None:
            self.surface = None
            pygame.quit()

    def __enter__(self) -> "Display":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()