"""Utilities for handling KeyboardInterrupt in try-except blocks.

The compiler invoker runs reader threads next to the main thread; an
interrupt caught there has to reach the main thread as well.
"""

import _thread


def handle_keyboard_interrupt_properly(ke: KeyboardInterrupt) -> None:
    """Propagate a KeyboardInterrupt to the main thread and re-raise it.

    Usage:
        try:
            executor.compile(compiler, argv, source)
        except KeyboardInterrupt as ke:
            handle_keyboard_interrupt_properly(ke)

    Args:
        ke: The KeyboardInterrupt exception to handle

    Raises:
        KeyboardInterrupt: Always re-raises the exception after handling
    """
    _thread.interrupt_main()
    raise ke
