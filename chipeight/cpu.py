"""The CHIP-8 virtual machine: memory, registers, timers and the instruction set."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Callable, Optional, Union

MEMORY_SIZE = 4096
VIDEO_WIDTH = 64
VIDEO_HEIGHT = 32
PROGRAM_START = 0x200
FONT_START = 0x050
STACK_DEPTH = 16
REGISTER_COUNT = 16
KEY_COUNT = 16

FONTSET = bytes(
    [
        0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
        0x20, 0x60, 0x20, 0x20, 0x70,  # 1
        0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
        0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
        0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
        0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
        0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
        0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
        0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
        0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
        0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
        0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
        0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
        0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
        0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
        0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
    ]
)


class Chip8Error(Exception):
    """Base class for errors raised by the machine."""


class UnknownOpcodeError(Chip8Error):
    """Raised when an instruction cannot be decoded."""

    def __init__(self, opcode: int) -> None:
        super().__init__(f"Unknown opcode: 0x{opcode:X}")
        self.opcode = opcode


class StackError(Chip8Error):
    """Raised on a call with a full stack or a return with an empty one."""


KeyWaiter = Callable[["Chip8"], int]


class Chip8:
    """A CHIP-8 machine.

    ``rng`` supplies random bytes through ``randrange``; ``wait_for_key`` is
    called with the machine by the FX0A instruction and returns the key
    pressed. Without one, FX0A takes the lowest key held down, or repeats
    itself on the next step when none is.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        wait_for_key: Optional[KeyWaiter] = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.wait_for_key = wait_for_key
        self.reset()

    def reset(self) -> None:
        """Clear all state and load the font."""
        self.memory = bytearray(MEMORY_SIZE)
        self.memory[FONT_START : FONT_START + len(FONTSET)] = FONTSET
        self.v = bytearray(REGISTER_COUNT)
        self.index = 0
        self.pc = PROGRAM_START
        self.stack: list[int] = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.gfx = bytearray(VIDEO_WIDTH * VIDEO_HEIGHT)
        self.keypad = [False] * KEY_COUNT

    def load_rom(self, path: Union[str, Path]) -> int:
        """Load a ROM file at the program counter; return the bytes loaded."""
        return self.load_bytes(Path(path).read_bytes())

    def load_bytes(self, data: bytes) -> int:
        """Copy a program into memory at the program counter.

        Whatever does not fit in memory is dropped. Returns the number of
        bytes loaded.
        """
        chunk = bytes(data)[: MEMORY_SIZE - self.pc]
        self.memory[self.pc : self.pc + len(chunk)] = chunk
        return len(chunk)

    def set_key(self, key: int, pressed: bool) -> None:
        """Mark a keypad key as held down or released."""
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"key must be in 0..{KEY_COUNT - 1}, not {key}")
        self.keypad[key] = bool(pressed)

    def tick_timers(self) -> None:
        """Count both timers down by one, stopping at zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def _read(self, address: int) -> int:
        return self.memory[address % MEMORY_SIZE]

    def _write(self, address: int, value: int) -> None:
        self.memory[address % MEMORY_SIZE] = value & 0xFF

    def step(self) -> None:
        """Fetch, decode and execute one instruction."""
        opcode = self._read(self.pc) << 8 | self._read(self.pc + 1)
        self.pc = (self.pc + 2) & 0xFFFF

        handler = {
            0x0: self._op_system,
            0x1: self._op_jump,
            0x2: self._op_call,
            0x3: self._op_skip_eq_imm,
            0x4: self._op_skip_ne_imm,
            0x5: self._op_skip_eq_reg,
            0x6: self._op_load_imm,
            0x7: self._op_add_imm,
            0x8: self._op_alu,
            0x9: self._op_skip_ne_reg,
            0xA: self._op_load_index,
            0xB: self._op_jump_offset,
            0xC: self._op_random,
            0xD: self._op_draw,
            0xE: self._op_keys,
            0xF: self._op_misc,
        }.get(opcode >> 12)
        if handler is None:
            raise UnknownOpcodeError(opcode)
        handler(opcode)

    def _skip_if(self, condition: bool) -> None:
        if condition:
            self.pc = (self.pc + 2) & 0xFFFF

    def _op_system(self, opcode: int) -> None:
        if opcode == 0x00E0:
            self.gfx[:] = bytes(len(self.gfx))
        elif opcode == 0x00EE:
            if not self.stack:
                raise StackError("return with an empty stack")
            self.pc = self.stack.pop()

    def _op_jump(self, opcode: int) -> None:
        self.pc = opcode & 0x0FFF

    def _op_call(self, opcode: int) -> None:
        if len(self.stack) >= STACK_DEPTH:
            raise StackError("call with a full stack")
        self.stack.append(self.pc)
        self.pc = opcode & 0x0FFF

    def _op_skip_eq_imm(self, opcode: int) -> None:
        self._skip_if(self.v[(opcode >> 8) & 0xF] == opcode & 0xFF)

    def _op_skip_ne_imm(self, opcode: int) -> None:
        self._skip_if(self.v[(opcode >> 8) & 0xF] != opcode & 0xFF)

    def _op_skip_eq_reg(self, opcode: int) -> None:
        self._skip_if(self.v[(opcode >> 8) & 0xF] == self.v[(opcode >> 4) & 0xF])

    def _op_skip_ne_reg(self, opcode: int) -> None:
        self._skip_if(self.v[(opcode >> 8) & 0xF] != self.v[(opcode >> 4) & 0xF])

    def _op_load_imm(self, opcode: int) -> None:
        self.v[(opcode >> 8) & 0xF] = opcode & 0xFF

    def _op_add_imm(self, opcode: int) -> None:
        x = (opcode >> 8) & 0xF
        self.v[x] = (self.v[x] + (opcode & 0xFF)) & 0xFF

    def _op_alu(self, opcode: int) -> None:
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        v = self.v
        kind = opcode & 0xF
        if kind == 0x0:
            v[x] = v[y]
        elif kind == 0x1:
            v[x] |= v[y]
        elif kind == 0x2:
            v[x] &= v[y]
        elif kind == 0x3:
            v[x] ^= v[y]
        elif kind == 0x4:
            v[x] = (v[x] + v[y]) & 0xFF
            v[0xF] = 1 if v[x] < v[y] else 0
        elif kind == 0x5:
            v[0xF] = 1 if v[x] > v[y] else 0
            v[x] = (v[x] - v[y]) & 0xFF
        elif kind == 0x6:
            v[0xF] = v[x] & 0x1
            v[x] >>= 1
        elif kind == 0x7:
            v[0xF] = 1 if v[y] > v[x] else 0
            v[x] = (v[y] - v[x]) & 0xFF
        elif kind == 0x8:
            v[0xF] = v[x] >> 7
            v[x] = (v[x] << 1) & 0xFF

    def _op_load_index(self, opcode: int) -> None:
        self.index = opcode & 0x0FFF

    def _op_jump_offset(self, opcode: int) -> None:
        self.pc = ((opcode & 0x0FFF) + self.v[0]) & 0xFFFF

    def _op_random(self, opcode: int) -> None:
        self.v[(opcode >> 8) & 0xF] = self.rng.randrange(256) & opcode & 0xFF

    def _op_draw(self, opcode: int) -> None:
        x0 = self.v[(opcode >> 8) & 0xF] % VIDEO_WIDTH
        y0 = self.v[(opcode >> 4) & 0xF] % VIDEO_HEIGHT
        rows = opcode & 0xF
        self.v[0xF] = 0
        for row in range(rows):
            py = y0 + row
            if py >= VIDEO_HEIGHT:
                break
            sprite = self._read(self.index + row)
            for col in range(8):
                px = x0 + col
                if px >= VIDEO_WIDTH:
                    break
                if (sprite >> (7 - col)) & 1:
                    pos = px + py * VIDEO_WIDTH
                    if self.gfx[pos]:
                        self.v[0xF] = 1
                    self.gfx[pos] ^= 1

    def _op_keys(self, opcode: int) -> None:
        key = self.v[(opcode >> 8) & 0xF] & 0xF
        low = opcode & 0xFF
        if low == 0x9E:
            self._skip_if(self.keypad[key])
        elif low == 0xA1:
            self._skip_if(not self.keypad[key])

    def _await_key(self, x: int) -> None:
        if self.wait_for_key is not None:
            self.v[x] = self.wait_for_key(self) & 0xFF
            return
        held = next((key for key, down in enumerate(self.keypad) if down), None)
        if held is None:
            self.pc = (self.pc - 2) & 0xFFFF
        else:
            self.v[x] = held

    def _op_misc(self, opcode: int) -> None:
        x = (opcode >> 8) & 0xF
        low = opcode & 0xFF
        if low == 0x07:
            self.v[x] = self.delay_timer
        elif low == 0x0A:
            self._await_key(x)
        elif low == 0x15:
            self.delay_timer = self.v[x]
        elif low == 0x18:
            self.sound_timer = self.v[x]
        elif low == 0x1E:
            self.index = (self.index + self.v[x]) & 0xFFFF
        elif low == 0x29:
            self.index = self.v[x] * 5
        elif low == 0x33:
            value = self.v[x]
            self._write(self.index, value // 100)
            self._write(self.index + 1, (value // 10) % 10)
            self._write(self.index + 2, value % 10)
        elif low == 0x55:
            for offset, value in enumerate(self.v[: x + 1]):
                self._write(self.index + offset, value)
        elif low == 0x65:
            for offset in range(x + 1):
                self.v[offset] = self._read(self.index + offset)