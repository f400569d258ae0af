"""A CHIP-8 interpreter: the machine, a pygame display and a command to run ROMs."""

__version__ = "0.1.0"
__all__ = ["app", "cpu", "display"]