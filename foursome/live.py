"""
Live updates for open scorecards.

`feed` is the in-process fan-out every write goes through. Readers do not
hold on to it directly: a GroupSession owns one subscription and one debounce
timer, and releases both when its `with` block ends, so a burst of saves
(four players typing at once) reaches a reader as a single refresh.
"""
import logging
import os
import threading
from collections import defaultdict

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = float(os.getenv("LIVE_DEBOUNCE_SECONDS", "0.4"))


class GroupFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers = defaultdict(list)

    def subscribe(self, group_id, callback):
        with self._lock:
            self._subscribers[group_id].append(callback)

        def unsubscribe():
            with self._lock:
                subs = self._subscribers.get(group_id, [])
                if callback in subs:
                    subs.remove(callback)
                if not subs:
                    self._subscribers.pop(group_id, None)

        return unsubscribe

    def subscriber_count(self, group_id) -> int:
        with self._lock:
            return len(self._subscribers.get(group_id, []))

    def publish(self, group_id):
        with self._lock:
            callbacks = list(self._subscribers.get(group_id, []))
        for cb in callbacks:
            try:
                cb(group_id)
            except Exception:
                # one broken reader must not stop the others or the write
                logger.exception("Live subscriber failed for group %s", group_id)


class Debouncer:
    """Runs fn once, `delay` seconds after the last call()."""

    def __init__(self, delay, fn):
        self.delay = delay
        self.fn = fn
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0
        self._args = ()

    def call(self, *args):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._args = args
            self._generation += 1
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation):
        with self._lock:
            # superseded or cancelled while waiting for the lock
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            args = self._args
        self.fn(*args)

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self):
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
            args = self._args
        self.fn(*args)


class GroupSession:
    def __init__(self, feed, group_id, on_change, delay=DEBOUNCE_SECONDS):
        self.feed = feed
        self.group_id = group_id
        self._debouncer = Debouncer(delay, on_change)
        self._unsubscribe = None

    def __enter__(self):
        self._unsubscribe = self.feed.subscribe(self.group_id, self._debouncer.call)
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._debouncer.cancel()
        return False

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def flush(self):
        self._debouncer.flush()


feed = GroupFeed()
