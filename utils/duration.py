"""
Обчислення та форматування тривалості тривоги у хвилинах.
"""

import math

SECONDS_PER_MINUTE = 60.0
# Секунди
LATENESS_TOLERANCE = 0.06


def pluralize(value: int) -> str:
    """Повернути "s" для множини або порожній рядок."""
    return "" if value in (1, -1) else "s"


def ceil_minutes(elapsed_seconds: float) -> int:
    """
    Хвилини з округленням вгору: 1 секунда вже читається як 1 хвилина.

    Допуск LATENESS_TOLERANCE поглинає запізнення таймера на мілісекунди.
    Будь-який додатний час дає щонайменше 1 хвилину.
    """
    if elapsed_seconds <= 0:
        return 0
    minutes = int(math.ceil((elapsed_seconds - LATENESS_TOLERANCE) / SECONDS_PER_MINUTE))
    return max(1, minutes)


def round_minutes(elapsed_seconds: float) -> int:
    """Хвилини з округленням до найближчого (половина вгору)."""
    return int(math.floor(elapsed_seconds / SECONDS_PER_MINUTE + 0.5))


def format_minutes(minutes: int, zero_text: str = None) -> str:
    """
    Сформувати текст тривалості.

    Args:
        minutes: Кількість хвилин
        zero_text: Текст, що замінює "0 minutes" (наприклад, "less than 1 minute")

    Returns:
        Рядок на кшталт "1 minute" або "5 minutes"
    """
    if minutes == 0 and zero_text:
        return zero_text
    return f"{minutes} minute{pluralize(minutes)}"
