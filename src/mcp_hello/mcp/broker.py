"""Session-transport broker matching message POSTs to open event streams."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .channel import StreamingChannel
from ..utils.logger import get_logger

logger = get_logger(__name__)


class NoChannelAvailable:
    """Result of a resolve that found no channel to deliver to."""

    def __init__(self, session_id: Optional[str]):
        self.session_id = session_id

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"NoChannelAvailable(session_id={self.session_id!r})"


@dataclass(frozen=True)
class BrokerSnapshot:
    """Point-in-time view of broker state."""

    staged: int
    bound: Tuple[str, ...]


class SessionBroker:
    """Tracks open streaming channels and binds them to session identifiers.

    A channel is staged when its stream opens and bound to a session id when
    the first POST quoting that id arrives. Every method is synchronous, so on
    a single event loop each call is applied atomically.
    """

    def __init__(self):
        self._staged: List[StreamingChannel] = []
        self._bound: Dict[str, StreamingChannel] = {}

    def register_staged(self, channel: StreamingChannel) -> None:
        """Make a freshly opened channel available for promotion."""
        self._staged.append(channel)
        logger.info(
            "Channel staged",
            extra={"session_id": channel.session_id, "staged": len(self._staged)},
        )

    def resolve(
        self, session_id: Optional[str]
    ) -> Union[StreamingChannel, NoChannelAvailable]:
        """Find the channel a message for ``session_id`` should go to.

        A bound id returns its channel. An unbound id promotes a staged
        channel: the one that announced that id if present, otherwise the most
        recently staged one. Without an id the most recently staged, then the
        most recently bound, channel is returned and nothing is promoted.
        """
        if session_id:
            channel = self._bound.get(session_id)
            if channel is not None:
                return channel

            channel = self._claim_staged(session_id)
            if channel is None:
                return NoChannelAvailable(session_id)

            self._bound[session_id] = channel
            logger.info(
                "Channel promoted",
                extra={"session_id": session_id, "staged": len(self._staged)},
            )
            return channel

        if self._staged:
            return self._staged[-1]
        if self._bound:
            return next(reversed(self._bound.values()))
        return NoChannelAvailable(None)

    def _claim_staged(self, session_id: str) -> Optional[StreamingChannel]:
        """Remove and return the staged channel to bind to ``session_id``."""
        if not self._staged:
            return None

        for index in range(len(self._staged) - 1, -1, -1):
            if self._staged[index].session_id == session_id:
                return self._staged.pop(index)

        # Client quoted an id no staged channel announced: last in, first claimed
        return self._staged.pop()

    def unregister(self, channel: StreamingChannel) -> None:
        """Forget a channel wherever it is held. Unknown channels are ignored."""
        for index, staged in enumerate(self._staged):
            if staged is channel:
                del self._staged[index]
                logger.info(
                    "Staged channel unregistered",
                    extra={"session_id": channel.session_id},
                )
                return

        for session_id, bound in self._bound.items():
            if bound is channel:
                del self._bound[session_id]
                logger.info(
                    "Bound channel unregistered", extra={"session_id": session_id}
                )
                return

    def snapshot(self) -> BrokerSnapshot:
        return BrokerSnapshot(staged=len(self._staged), bound=tuple(self._bound))

    def __contains__(self, channel: StreamingChannel) -> bool:
        return any(c is channel for c in self._staged) or any(
            c is channel for c in self._bound.values()
        )
