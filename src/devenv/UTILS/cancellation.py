# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Cancellation and deadline propagation for switch operations.
"""
import threading
import time
from typing import Optional

from ..errors import SwitchCancelledError


class SwitchContext:
    """
    A cancellation signal with an optional deadline.

    Contexts form a tree: a child derived with :meth:`with_timeout` is
    cancelled when its parent is, and its deadline never exceeds the
    parent's. Work running under a context is expected to poll it; nothing
    is interrupted forcibly.
    """

    def __init__(self, timeout: Optional[float] = None, parent: Optional["SwitchContext"] = None):
        """
        :param timeout: Seconds from now until the context expires. None means no own deadline.
        :param parent: Context this one derives from.
        """
        self._parent = parent
        self._event = threading.Event()
        self._reason = "switch cancelled"

        deadline = time.monotonic() + timeout if timeout else None
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline: Optional[float] = deadline

    def with_timeout(self, timeout: Optional[float]) -> "SwitchContext":
        """Derives a child context bounded by ``timeout`` seconds and by this context."""
        return SwitchContext(timeout=timeout, parent=self)

    def cancel(self, reason: str = "switch cancelled") -> None:
        """Signals cancellation to this context and every context derived from it."""
        self._reason = reason
        self._event.set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set() or self.expired:
            return True
        return self._parent is not None and self._parent.cancelled

    def remaining(self) -> Optional[float]:
        """
        Seconds left before the deadline, never negative.

        :return: None when the context has no deadline.
        """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def bound(self, timeout: Optional[float]) -> Optional[float]:
        """Returns ``timeout`` clipped to the time remaining in this context."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)

    def check(self) -> None:
        """
        Raises if the context is no longer live.

        :raises SwitchCancelledError: On cancellation or an elapsed deadline.
        """
        if self._event.is_set():
            raise SwitchCancelledError(self._reason)
        if self.expired:
            raise SwitchCancelledError("switch deadline exceeded")
        if self._parent is not None:
            self._parent.check()
