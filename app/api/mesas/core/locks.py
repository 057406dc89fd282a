from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator


class MesaLockRegistry:
    """Um lock por mesa: operações da mesma mesa são serializadas, mesas diferentes não competem.

    ``numeracao`` é um lock único para checar e gravar números de mesa; quando
    combinado com o lock da mesa, é sempre adquirido depois dele.
    """

    def __init__(self):
        self._locks: Dict[int, Lock] = {}
        self._lock = Lock()
        self._numeracao = Lock()

    def _get(self, mesa_id: int) -> Lock:
        with self._lock:
            lock = self._locks.get(mesa_id)
            if lock is None:
                lock = Lock()
                self._locks[mesa_id] = lock
            return lock

    @contextmanager
    def lock(self, mesa_id: int) -> Iterator[None]:
        lock = self._get(int(mesa_id))
        with lock:
            yield

    @contextmanager
    def numeracao(self) -> Iterator[None]:
        with self._numeracao:
            yield


mesa_locks = MesaLockRegistry()
