import math

WORDS_PER_MINUTE = 200


def calculate_reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> str:
    words = text.split()
    minutes = math.ceil(len(words) / max(words_per_minute, 1)) or 1
    return f"{minutes} min"
