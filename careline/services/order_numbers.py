from __future__ import annotations

import secrets
import threading
import time

PREFIX = "ORD"
SUFFIX_LENGTH = 6
BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class OrderNumberGenerator:
    """
    Numéros de commande lisibles : ORD-<epoch-ms>-<6 caractères base36>.

    Dans un même process, un suffixe n'est jamais réutilisé pour la même
    milliseconde (rafales). Entre process, la contrainte unique sur
    orders.order_number prend le relais.
    Pas conçu pour être indevinable.
    """

    def __init__(self, clock=None) -> None:
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._lock = threading.Lock()
        self._current_ms: int | None = None
        self._used: set[str] = set()

    def _random_suffix(self) -> str:
        return "".join(secrets.choice(BASE36) for _ in range(SUFFIX_LENGTH))

    def next(self) -> str:
        with self._lock:
            now_ms = int(self._clock())
            if now_ms != self._current_ms:
                self._current_ms = now_ms
                self._used = set()

            suffix = self._random_suffix()
            while suffix in self._used:
                suffix = self._random_suffix()
            self._used.add(suffix)

        return f"{PREFIX}-{now_ms}-{suffix}"


_default_generator = OrderNumberGenerator()


def generate_order_number() -> str:
    return _default_generator.next()
