# attestation_core/storage/lock.py
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator
import threading


class ReadWriteLock:
    """
    Many readers or one writer. Waiting writers block new readers so a
    steady stream of searches cannot starve a load.

    Not reentrant: a thread holding the write side must not ask for either side again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cv = threading.Condition(self._lock)
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._lock:
            while self._writer or self._writers_waiting:
                self._cv.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._lock:
                self._readers -= 1
                if self._readers == 0:
                    self._cv.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._lock:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cv.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._lock:
                self._writer = False
                self._cv.notify_all()
