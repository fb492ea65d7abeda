# workers.py
"""
Background task execution for Glitchbox.
Exports encode on a QThreadPool; the surface-sharing capture loop never does.
"""
import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal


class WorkerSignals(QObject):
    started = Signal()
    finished = Signal()
    error = Signal(str)
    progress = Signal(int)
    result = Signal(object)


class Worker(QRunnable):
    """Wraps any function to run in a QThreadPool."""
    def __init__(
        self,
        fn: Callable,
        *args,
        progress_callback: Optional[Callable[[int], Any]] = None,
        **kwargs
    ):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()
        if progress_callback:
            self.signals.progress.connect(progress_callback)

    def run(self) -> None:
        try:
            self.signals.started.emit()
            result = self.fn(*self.args, **self.kwargs)
        except Exception as e:  # noqa: BLE001 - reported through the error signal
            logging.getLogger(__name__).error("Worker error: %s", e)
            self.signals.error.emit(str(e))
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()


def start_worker(worker: Worker, pool: Optional[QThreadPool] = None) -> None:
    """Schedule ``worker`` on ``pool`` (the global pool by default)."""
    (pool or QThreadPool.globalInstance()).start(worker)
