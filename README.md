# chipeight

A CHIP-8 interpreter. It runs a CHIP-8 ROM image and draws the 64x32 monochrome
screen in a window titled "64x32 Display". The window is scaled ten times, so it
is 640x320 pixels. The interpreter runs at 60 frames per second and executes ten
instructions per frame.

## Installing

```
pip install .
```

This also installs `pygame`. The package uses it for the window, the keyboard and
timing.

## Running a ROM

```
chipeight path/to/game.ch8
```

Close the window to quit.

- If you give no ROM, the command prints a usage line and exits with status 1.
- If the ROM cannot be read, it prints `Error loading ROM: ...` to standard error
  and exits with status 1.
- If the window cannot be created, it prints `Failed to initialize display: ...`
  and exits with status 1.
- If the program fails while running, it prints the error and exits with
  status 1. This happens when a subroutine returns with an empty stack or a
  call is made with all sixteen stack entries in use.

## Keys

The sixteen CHIP-8 keys are on the left side of the keyboard:

| CHIP-8 key | Keyboard |
|------------|----------|
| 1 2 3 C    | 1 2 3 4  |
| 4 5 6 D    | Q W E R  |
| 7 8 9 E    | A S D F  |
| A 0 B F    | Z X C V  |

When a program waits for a key press (instruction `FX0A`), the command stops
running instructions until a key is pressed. The delay and sound timers still
count down while it waits. During the wait a different set of keys applies:

| Keyboard   | CHIP-8 key |
|------------|------------|
| 1 or 0     | 0          |
| 2 to 9     | 1 to 8     |
| Return     | A          |
| Escape     | B          |
| Backspace  | C          |
| Tab        | D          |
| Space      | E          |
| Minus      | F          |

No key gives 9 during a wait. The keys in the first table do not count as a
press during a wait.

## Using it from Python

```python
from chipeight.cpu import Chip8
from chipeight.display import Display
from chipeight.app import run

machine = Chip8()
machine.load_rom("game.ch8")
with Display() as display:
    run(machine, display)
```

`chipeight.cpu.Chip8` holds the interpreter state.

- `memory`, `v`, `index`, `pc`, `stack`, `delay_timer`, `sound_timer`, `gfx` and
  `keypad` hold the machine's state.
- `load_rom(path)` loads a program from a file. `load_bytes(data)` loads one from
  memory. Both load at address 0x200, drop whatever does not fit in 4096 bytes,
  and return the number of bytes loaded.
- `step()` runs one instruction.
- `tick_timers()` counts the delay and sound timers down by one, stopping at zero.
- `set_key(key, pressed)` presses or releases one of the keys 0 to 15. Any other
  key number raises `ValueError`.
- `reset()` clears all state and loads the built-in font at address 0x050.

`Chip8(rng=None, wait_for_key=None)` accepts two optional arguments:

- `rng` is an object with a `randrange` method, such as `random.Random`. The
  `CXNN` instruction draws its random numbers from it.
- `wait_for_key` is called with the machine by `FX0A` and must return the key
  pressed. Without it, `FX0A` takes the lowest-numbered key being held. If no key
  is held, `FX0A` runs again on the next step.

A return with an empty stack or a call with a full stack raises
`chipeight.cpu.StackError`, which is a subclass of `Chip8Error`. Instructions the
interpreter does not recognise within a known instruction group are ignored.

The `chipeight.display` module provides two things:

- `pixel_rects(pixels, width, scale)` yields an `(x, y, w, h)` rectangle for
  every lit pixel of a frame buffer.
- `Display(scale)` draws a frame buffer with white pixels on black. Call `open()`
  before `render(pixels)` and call `close()` when done, or use the display as a
  context manager. Calling `render` before `open` raises `RuntimeError`.

The `chipeight.app` module provides the command's building blocks:

- `keypad_index(key)` returns the CHIP-8 key that a pygame key code drives, or
  `None`.
- `wait_keypad_index(key)` returns the key that a pygame key code gives during an
  `FX0A` wait, or `None`.
- `run(machine, display)` is the main loop. It stops when the window is closed.

## What it does not do

There is no sound. The sound timer counts down, but nothing is played. The
package offers no way to configure the speed, the scale used by the command, or
the keyboard layout.

## Running the tests

```
pip install .[test]
pytest
```