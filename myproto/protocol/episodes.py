from __future__ import annotations


class TimeoutEpisodeTracker:
    """
    Tracks "waiting for more bytes" episodes and the timeout each one requested.

    A timeout request is issued at most once per episode. A fire that arrives
    after its episode ended (the token completed) is stale and must be ignored.
    """

    def __init__(self) -> None:
        self._episode = 0
        self._waiting = False
        self._requested_for: int | None = None

    @property
    def episode(self) -> int:
        return self._episode

    @property
    def waiting(self) -> bool:
        return self._waiting

    def wait(self) -> bool:
        """Enter (or stay in) a waiting episode; True when a timeout should be requested."""
        if not self._waiting:
            self._episode += 1
            self._waiting = True
        if self._requested_for == self._episode:
            return False
        self._requested_for = self._episode
        return True

    def complete(self) -> None:
        """The pending token finished; any outstanding timeout is now stale."""
        self._waiting = False

    def fire(self) -> bool:
        """Consume a timeout signal; True only if it belongs to the live episode."""
        live = self._waiting and self._requested_for == self._episode
        if live:
            self._waiting = False
        self._requested_for = None
        return live


__all__ = ["TimeoutEpisodeTracker"]
