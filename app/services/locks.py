import threading
from contextlib import contextmanager


class KeyedLock:
    """Thread-safe registry of one mutex per key.

    Requests touching the same key run their critical sections one at a
    time; requests on different keys never wait for each other.

    Locks are never evicted, so the registry holds one entry per distinct
    key: at most teams x questions for submissions, one per team for scores.
    """

    def __init__(self):
        self._locks = {}
        self._registry_lock = threading.Lock()

    def _get(self, key) -> threading.Lock:
        with self._registry_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    @contextmanager
    def hold(self, key):
        lock = self._get(key)
        with lock:
            yield

    def __len__(self):
        with self._registry_lock:
            return len(self._locks)


# (team_id, question_id) -> submission state transitions
submission_locks = KeyedLock()
# team_id -> aggregate score updates
team_locks = KeyedLock()
