"""Command line entry point and main loop."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

import pygame

from chipeight.cpu import Chip8, Chip8Error
from chipeight.display import Display

FPS = 60
CYCLES_PER_FRAME = 10
FRAME_DELAY = 1000 // FPS
KEY_WAIT_DELAY = 16

_KEYPAD = {
    pygame.K_x: 0x0,
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_z: 0xA,
    pygame.K_c: 0xB,
    pygame.K_4: 0xC,
    pygame.K_r: 0xD,
    pygame.K_f: 0xE,
    pygame.K_v: 0xF,
}

# Keys accepted while an instruction waits for a key press.
_WAIT_KEYS = {
    pygame.K_1: 0,
    pygame.K_0: 0,
    pygame.K_2: 1,
    pygame.K_3: 2,
    pygame.K_4: 3,
    pygame.K_5: 4,
    pygame.K_6: 5,
    pygame.K_7: 6,
    pygame.K_8: 7,
    pygame.K_9: 8,
    pygame.K_RETURN: 10,
    pygame.K_ESCAPE: 11,
    pygame.K_BACKSPACE: 12,
    pygame.K_TAB: 13,
    pygame.K_SPACE: 14,
    pygame.K_MINUS: 15,
}


def keypad_index(key: int) -> Optional[int]:
    """Return the keypad key a keyboard key drives, or None."""
    return _KEYPAD.get(key)


def wait_keypad_index(key: int) -> Optional[int]:
    """Return the keypad key a keyboard key gives while waiting, or None."""
    return _WAIT_KEYS.get(key)


def _block_for_key(machine: Chip8) -> int:
    """Poll events until a key is pressed, running the timers meanwhile."""
    while True:
        for event in pygame.event.get():
            if event.type == pygame.KEYDOWN:
                key = wait_keypad_index(event.key)
                if key is not None:
                    return key
        machine.tick_timers()
        pygame.time.delay(KEY_WAIT_DELAY)


def run(machine: Chip8, display) -> None:
    """Run the machine at 60 frames a second until the window is closed."""
    running = True
    timer_time = pygame.time.get_ticks()
    while running:
        current_time = pygame.time.get_ticks()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
                key = keypad_index(event.key)
                if key is not None:
                    machine.set_key(key, event.type == pygame.KEYDOWN)

        for _ in range(CYCLES_PER_FRAME):
            machine.step()

        if current_time - timer_time >= FRAME_DELAY:
            machine.tick_timers()
            timer_time = current_time

        display.render(machine.gfx)

        frame_time = pygame.time.get_ticks() - current_time
        if frame_time < FRAME_DELAY:
            pygame.time.delay(FRAME_DELAY - frame_time)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Load a ROM and run it in a window."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("Usage: chipeight romfile")
        return 1

    machine = Chip8(wait_for_key=_block_for_key)
    try:
        machine.load_rom(args[0])
    except OSError as error:
        print(f"Error loading ROM: {error}", file=sys.stderr)
        return 1

    display = Display()
    try:
        display.open()
    except pygame.error as error:
        print(f"Failed to initialize display: {error}", file=sys.stderr)
        display.close()
        return 1

    with display:
        try:
            run(machine, display)
        except Chip8Error as error:
            print(error, file=sys.stderr)
            return 1
    return 0