import time


def now_millis() -> int:
    return int(time.time() * 1000)
