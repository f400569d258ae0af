from unittest import mock

import pygame

from chipeight.app import (
    CYCLES_PER_FRAME,
    keypad_index,
    main,
    run,
    wait_keypad_index,
)
from chipeight.cpu import Chip8


class Recorder:
    def __init__(self):
        self.frames = []

    def render(self, pixels):
        self.frames.append(bytes(pixels))


def test_keypad_layout_corners():
    assert keypad_index(pygame.K_x) == 0
    assert keypad_index(pygame.K_1) == 1
    assert keypad_index(pygame.K_4) == 12
    assert keypad_index(pygame.K_v) == 15


def test_keypad_covers_all_keys_once():
    keys = [
        pygame.K_x, pygame.K_1, pygame.K_2, pygame.K_3,
        pygame.K_q, pygame.K_w, pygame.K_e, pygame.K_a,
        pygame.K_s, pygame.K_d, pygame.K_z, pygame.K_c,
        pygame.K_4, pygame.K_r, pygame.K_f, pygame.K_v,
    ]
    assert [keypad_index(k) for k in keys] == list(range(16))


def test_unmapped_key():
    assert keypad_index(pygame.K_p) is None
    assert wait_keypad_index(pygame.K_x) is None


def test_wait_key_mapping():
    assert wait_keypad_index(pygame.K_1) == 0
    assert wait_keypad_index(pygame.K_0) == 0
    assert wait_keypad_index(pygame.K_9) == 8
    assert wait_keypad_index(pygame.K_MINUS) == 15


def test_main_without_arguments(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().out


def test_main_with_missing_rom(tmp_path, capsys):
    assert main([str(tmp_path / "absent.ch8")]) == 1
    assert "Error loading ROM" in capsys.readouterr().err


def test_run_executes_one_frame_then_quits():
    machine = Chip8()
    machine.load_bytes(b"".join((0x7001).to_bytes(2, "big") for _ in range(CYCLES_PER_FRAME)))
    events = [
        pygame.event.Event(pygame.KEYDOWN, key=pygame.K_q),
        pygame.event.Event(pygame.QUIT),
    ]
    display = Recorder()
    with mock.patch("pygame.event.get", return_value=events):
        run(machine, display)
    assert machine.v[0] == CYCLES_PER_FRAME
    assert machine.keypad[keypad_index(pygame.K_q)] is True
    assert display.frames == [bytes(machine.gfx)]


def test_run_releases_key():
    machine = Chip8()
    machine.set_key(keypad_index(pygame.K_w), True)
    machine.load_bytes((0x1200).to_bytes(2, "big"))
    events = [
        pygame.event.Event(pygame.KEYUP, key=pygame.K_w),
        pygame.event.Event(pygame.QUIT),
    ]
    with mock.patch("pygame.event.get", return_value=events):
        run(machine, Recorder())
    assert machine.keypad[keypad_index(pygame.K_w)] is False
    assert machine.pc == 0x200