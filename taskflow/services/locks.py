# taskflow/services/locks.py
"""In-process serialization of writes to the same task.

Locks are striped: a task id always maps to the same re-entrant lock, and
unrelated tasks only rarely share one. Cross-process safety comes from
SELECT ... FOR UPDATE and the version column on Task.
"""
import threading
from contextlib import contextmanager

STRIPES = 64

_stripes = tuple(threading.RLock() for _ in range(STRIPES))


def lock_for(task_id: int) -> threading.RLock:
    return _stripes[hash(int(task_id)) % STRIPES]


@contextmanager
def task_lock(task_id: int):
    lock = lock_for(task_id)
    with lock:
        yield
