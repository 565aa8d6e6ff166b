"""
HollaEx streaming session.

Owns one logical WebSocket connection to the exchange stream and drives
the connect -> open -> fail -> reconnect cycle. The desired subscription
set survives reconnects and is replayed in full on every open.

Connection Management:
    - Fixed-delay reconnect (no backoff, no jitter, no retry cap)
    - JSON ping/pong heartbeat: {"op": "ping"} every ping_interval seconds,
      connection treated as failed after ping_timeout seconds without pong
    - Connection-time authentication via signed query parameters
    - Explicit state machine with state-change notifications

State machine:
    disconnected -> connecting -> open -> (disconnected | closing -> disconnected)

Every connection attempt gets a new generation id. Callbacks of a
superseded attempt compare their generation with the current one and
return without touching state, so a stale socket can never reschedule a
reconnect or start a second heartbeat.

Note:
    Reconnection retries forever at a fixed interval until disconnect()
    is called. A misconfigured or unreachable host produces a steady
    stream of connection attempts.

Example:
    >>> session = StreamingSession(config, signer=signer)
    >>> await session.connect(["orderbook:xht-usdt", "wallet"])
    >>> await session.wait_until_open(timeout=10)
    >>> async for message in session.stream_messages():
    ...     print(message)
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
)

import structlog
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from hollaex_sdk.auth.signer import Signer
from hollaex_sdk.auth.urls import build_query
from hollaex_sdk.config.models import ClientConfig
from hollaex_sdk.exceptions import NotConnectedError
from hollaex_sdk.models.session import SessionState, StateChange
from hollaex_sdk.models.topics import Topic
from hollaex_sdk.streaming.subscriptions import SubscriptionRegistry, TopicLike

logger = structlog.get_logger(__name__)

PING_FRAME = {"op": "ping"}

StateListener = Callable[[StateChange], None]
MessageHandler = Callable[[Any], None]
Connector = Callable[..., Awaitable[Any]]

_STREAM_END = object()


def _is_pong(message: Any) -> bool:
    if message == "pong":
        return True
    if isinstance(message, dict):
        return message.get("message") == "pong" or message.get("op") == "pong"
    return False


class StreamingSession:
    """
    Authenticated WebSocket session with subscription replay.

    Attributes:
        url: Streaming endpoint URL (without authentication query).
        state: Current SessionState.
        reconnect_count: Reconnection attempts started in this session.

    Example:
        >>> session = StreamingSession(ClientConfig())
        >>> await session.connect(["trade:xht-usdt"])
        >>> session.add_state_listener(lambda change: print(change.current))
    """

    def __init__(
        self,
        config: ClientConfig,
        signer: Optional[Signer] = None,
        connector: Optional[Connector] = None,
    ):
        """
        Initialize streaming session.

        Args:
            config: Client configuration.
            signer: Signer for connection authentication; None connects
                anonymously (account topics will not deliver events).
            connector: Coroutine factory opening a WebSocket
                (default: websockets.connect).
        """
        self._config = config
        self._settings = config.connection
        self._signer = signer
        self._connector: Connector = connector or websockets.connect
        self.url = config.ws_url

        self._registry = SubscriptionRegistry()
        self._state = SessionState.DISCONNECTED
        self._generation = 0
        self._ws: Optional[Any] = None
        self._auto_reconnect = self._settings.auto_reconnect
        self._clear_on_close = False

        self._run_task: Optional[asyncio.Task] = None
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._reconnect_count = 0
        self._last_pong_at = 0.0
        self._last_message_at: Optional[datetime] = None

        self._open_event = asyncio.Event()
        self._messages: asyncio.Queue = asyncio.Queue(
            maxsize=self._settings.message_queue_size
        )
        self._state_listeners: List[StateListener] = []
        self._message_handlers: List[MessageHandler] = []

        logger.info(
            "stream_session_initialized",
            url=self.url,
            authenticated=signer is not None,
            reconnect_interval=self._settings.reconnect_interval_seconds,
            ping_interval=self._settings.ping_interval_seconds,
        )

    # -------------------------------------------------------------------------
    # Observability
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the stream is open."""
        return self._state.is_open and self._ws is not None

    @property
    def reconnect_count(self) -> int:
        return self._reconnect_count

    @property
    def last_message_at(self) -> Optional[datetime]:
        """Get timestamp of last received message."""
        return self._last_message_at

    @property
    def subscriptions(self) -> FrozenSet[Topic]:
        """Desired subscription set."""
        return self._registry.desired

    def add_state_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with a StateChange on every transition."""
        self._state_listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        if listener in self._state_listeners:
            self._state_listeners.remove(listener)

    def add_message_handler(self, handler: MessageHandler) -> None:
        """Register a callback invoked with every decoded data message."""
        self._message_handlers.append(handler)

    def remove_message_handler(self, handler: MessageHandler) -> None:
        if handler in self._message_handlers:
            self._message_handlers.remove(handler)

    async def wait_until_open(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the stream to be open.

        Returns:
            bool: True if open, False if the timeout elapsed first.
        """
        try:
            await asyncio.wait_for(self._open_event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return self._state.is_open

    async def stream_messages(self) -> AsyncIterator[Any]:
        """
        Stream decoded data messages.

        Survives reconnects; ends once the session is disconnected or closed.

        Yields:
            Any: Parsed JSON message (pong frames excluded).
        """
        while True:
            message = await self._messages.get()
            if message is _STREAM_END:
                break
            yield message

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def connect(self, topics: Optional[Iterable[TopicLike]] = None) -> None:
        """
        Start the streaming session.

        Replaces the desired subscription set and starts a connection
        attempt without waiting for it. An active connection is torn down
        and replaced. Use wait_until_open() or a state listener to observe
        progress.

        Args:
            topics: Topics to subscribe to once the stream opens.
        """
        if self._state is not SessionState.DISCONNECTED or self._ws is not None:
            await self._detach("superseded")

        self._auto_reconnect = self._settings.auto_reconnect
        self._clear_on_close = False
        self._drain_stream_end()
        self._registry.replace(topics)
        self._start_attempt("connect")

    async def disconnect(self) -> None:
        """
        Close the stream and stop reconnecting.

        Clears the desired subscription set and ends stream_messages().

        Raises:
            NotConnectedError: If the stream is not open.
        """
        if not self.is_connected:
            raise NotConnectedError("Cannot disconnect: stream is not open")

        self._auto_reconnect = False
        self._clear_on_close = True
        self._cancel_reconnect()
        self._stop_heartbeat()
        self._transition(SessionState.CLOSING, "disconnect_requested")

        ws = self._ws
        try:
            await ws.close()
        except WebSocketException as e:
            logger.warning("stream_close_error", url=self.url, error=str(e))

        task = self._run_task
        if task is not None and task is not asyncio.current_task():
            await asyncio.wait({task})

    async def close(self) -> None:
        """
        Tear the session down from any state.

        Safe to call multiple times and when never connected.
        """
        self._auto_reconnect = False
        self._cancel_reconnect()
        task = self._run_task

        await self._detach("closed")

        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            await asyncio.wait({task})

        self._registry.clear()
        self._end_stream()

    async def subscribe(self, topics: Iterable[TopicLike]) -> List[Topic]:
        """
        Subscribe to topics.

        Sends one subscribe frame per topic not already desired. Symbol
        narrowed market topics are skipped while the unscoped topic is
        desired; unrecognized topic names are ignored.

        Args:
            topics: Topics in "topic" or "topic:symbol" notation.

        Returns:
            List[Topic]: Topics a frame was sent for.

        Raises:
            NotConnectedError: If the stream is not open.
        """
        if not self.is_connected:
            raise NotConnectedError("Cannot subscribe: stream is not open")

        generation = self._generation
        to_send = self._registry.plan_subscribe(topics)
        for topic in to_send:
            await self._send_frame(generation, {"op": "subscribe", "args": [topic.wire]})

        if to_send:
            logger.info("stream_subscribed", topics=[t.wire for t in to_send])
        return to_send

    async def unsubscribe(self, topics: Iterable[TopicLike]) -> List[Topic]:
        """
        Unsubscribe from topics.

        Sends one unsubscribe frame per desired topic and removes it from the
        desired set. No acknowledgement is awaited.

        Returns:
            List[Topic]: Topics a frame was sent for.

        Raises:
            NotConnectedError: If the stream is not open.
        """
        if not self.is_connected:
            raise NotConnectedError("Cannot unsubscribe: stream is not open")

        generation = self._generation
        to_send = self._registry.plan_unsubscribe(topics)
        for topic in to_send:
            await self._send_frame(generation, {"op": "unsubscribe", "args": [topic.wire]})

        if to_send:
            logger.info("stream_unsubscribed", topics=[t.wire for t in to_send])
        return to_send

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _transition(self, new_state: SessionState, reason: Optional[str] = None) -> None:
        previous = self._state
        if previous == new_state:
            return

        self._state = new_state
        if new_state.is_open:
            self._open_event.set()
        else:
            self._open_event.clear()

        logger.info(
            "stream_state_changed",
            url=self.url,
            previous=previous.value,
            current=new_state.value,
            reason=reason,
            generation=self._generation,
        )

        change = StateChange(previous=previous, current=new_state, reason=reason)
        for listener in list(self._state_listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("stream_state_listener_error", url=self.url)

    def _connection_url(self) -> str:
        if self._signer is None:
            return self.url
        auth = self._signer.sign_stream()
        return f"{self.url}?{build_query(auth.as_query())}"

    def _start_attempt(self, reason: str) -> None:
        self._cancel_reconnect()
        self._generation += 1
        generation = self._generation
        self._transition(SessionState.CONNECTING, reason)
        self._run_task = asyncio.get_running_loop().create_task(
            self._run(generation), name=f"hollaex-stream-{generation}"
        )

    async def _run(self, generation: int) -> None:
        """Drive one connection attempt from handshake to close."""
        logger.info(
            "stream_connecting",
            url=self.url,
            generation=generation,
            reconnect_count=self._reconnect_count,
        )

        try:
            ws = await self._connector(
                self._connection_url(),
                ping_interval=None,  # application-level heartbeat
                ping_timeout=None,
                open_timeout=self._settings.connect_timeout_seconds,
                close_timeout=10,
                max_size=2**22,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self._handle_failure(generation, e)
            return

        if generation != self._generation:
            logger.debug("stream_stale_socket_discarded", url=self.url, generation=generation)
            await ws.close()
            return

        self._ws = ws
        await self._handle_open(generation)

        reason = "closed"
        try:
            async for raw in ws:
                self._handle_frame(generation, raw)
        except ConnectionClosed as e:
            reason = "connection_lost"
            logger.warning(
                "stream_connection_lost", url=self.url, generation=generation, error=str(e)
            )
        except WebSocketException as e:
            reason = "websocket_error"
            logger.error("stream_error", url=self.url, generation=generation, error=str(e))

        self._handle_close(generation, reason)

    async def _handle_open(self, generation: int) -> None:
        self._last_pong_at = asyncio.get_running_loop().time()
        self._transition(SessionState.OPEN, "handshake_complete")
        self._heartbeat_task = asyncio.get_running_loop().create_task(
            self._heartbeat(generation), name=f"hollaex-heartbeat-{generation}"
        )
        await self._replay(generation)

    async def _replay(self, generation: int) -> None:
        """Re-declare the whole desired set on a fresh connection."""
        topics = self._registry.plan_replay()
        if not topics:
            return

        logger.info(
            "stream_replaying_subscriptions",
            url=self.url,
            generation=generation,
            topics=[t.wire for t in topics],
        )
        for topic in topics:
            if generation != self._generation or not self._state.is_open:
                return
            # may have been unsubscribed while earlier frames were in flight
            if topic not in self._registry:
                continue
            await self._send_frame(generation, {"op": "subscribe", "args": [topic.wire]})

    def _handle_failure(self, generation: int, error: BaseException) -> None:
        """Handshake failed before the socket opened."""
        if generation != self._generation:
            return

        self._ws = None
        logger.warning(
            "stream_connection_failed",
            url=self.url,
            generation=generation,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._after_disconnect("connection_failed")

    async def _fail_open(self, generation: int, reason: str) -> None:
        """Failure on an open socket: close it and let the close handler recover."""
        if generation != self._generation or not self._state.is_open:
            return

        self._transition(SessionState.CLOSING, reason)
        # the caller may be the heartbeat itself; let it finish the close
        if self._heartbeat_task is asyncio.current_task():
            self._heartbeat_task = None
        ws = self._ws
        if ws is None:
            return
        try:
            await ws.close()
        except WebSocketException as e:
            logger.warning("stream_close_error", url=self.url, error=str(e))

    def _handle_close(self, generation: int, reason: str) -> None:
        if generation != self._generation:
            return

        self._stop_heartbeat()
        self._ws = None
        logger.info("stream_closed", url=self.url, generation=generation, reason=reason)
        self._after_disconnect(reason)

    def _after_disconnect(self, reason: str) -> None:
        if self._auto_reconnect:
            self._transition(SessionState.DISCONNECTED, reason)
            self._schedule_reconnect()
            return

        if self._clear_on_close:
            self._registry.clear()
            self._end_stream()
        self._transition(SessionState.DISCONNECTED, reason)

    def _schedule_reconnect(self) -> None:
        self._cancel_reconnect()
        delay = self._settings.reconnect_interval_seconds
        logger.info(
            "stream_reconnect_scheduled",
            url=self.url,
            delay_seconds=delay,
            attempt=self._reconnect_count + 1,
        )
        self._reconnect_handle = asyncio.get_running_loop().call_later(
            delay, self._reconnect, self._generation
        )

    def _reconnect(self, generation: int) -> None:
        self._reconnect_handle = None
        if (
            generation != self._generation
            or not self._auto_reconnect
            or self._state is not SessionState.DISCONNECTED
        ):
            return
        self._reconnect_count += 1
        self._start_attempt("reconnect")

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    async def _detach(self, reason: str) -> None:
        """Invalidate the current attempt and drop its socket."""
        self._generation += 1
        self._cancel_reconnect()
        self._stop_heartbeat()

        ws, self._ws = self._ws, None
        self._transition(SessionState.DISCONNECTED, reason)
        if ws is not None:
            try:
                await ws.close()
            except WebSocketException as e:
                logger.warning("stream_close_error", url=self.url, error=str(e))

    # -------------------------------------------------------------------------
    # Heartbeat
    # -------------------------------------------------------------------------

    async def _heartbeat(self, generation: int) -> None:
        """
        Send periodic ping frames and watch for pong responses.

        A missing pong for longer than ping_timeout fails the connection.
        The task wakes at the next ping or at the pong deadline, whichever
        comes first, so a dead socket is noticed within ping_timeout.
        """
        loop = asyncio.get_running_loop()
        interval = self._settings.ping_interval_seconds
        timeout = self._settings.ping_timeout_seconds
        next_ping = loop.time() + interval
        try:
            while generation == self._generation and self._state.is_open:
                deadline = self._last_pong_at + timeout
                await asyncio.sleep(max(0.0, min(next_ping, deadline) - loop.time()))
                if generation != self._generation or not self._state.is_open:
                    return

                now = loop.time()
                silence = now - self._last_pong_at
                if silence >= timeout:
                    logger.warning(
                        "stream_heartbeat_timeout",
                        url=self.url,
                        generation=generation,
                        seconds_since_pong=round(silence, 3),
                    )
                    await self._fail_open(generation, "heartbeat_timeout")
                    return

                if now >= next_ping:
                    await self._send_frame(generation, PING_FRAME)
                    next_ping = now + interval

        except asyncio.CancelledError:
            logger.debug("stream_heartbeat_cancelled", url=self.url, generation=generation)

    def _stop_heartbeat(self) -> None:
        task = self._heartbeat_task
        self._heartbeat_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # -------------------------------------------------------------------------
    # Frames
    # -------------------------------------------------------------------------

    async def _send_frame(self, generation: int, payload: Dict[str, Any]) -> bool:
        """
        Send one JSON frame on the current socket.

        Send failures are logged and absorbed; the read loop notices the dead
        socket and the replay on the next open restores the desired set.
        """
        ws = self._ws
        if ws is None or generation != self._generation:
            return False

        try:
            await ws.send(json.dumps(payload))
        except ConnectionClosed as e:
            logger.warning(
                "stream_send_failed",
                url=self.url,
                op=payload.get("op"),
                error=str(e),
            )
            return False

        logger.debug("stream_frame_sent", url=self.url, op=payload.get("op"), args=payload.get("args"))
        return True

    def _handle_frame(self, generation: int, raw: Any) -> None:
        if generation != self._generation:
            return

        self._last_message_at = datetime.now(timezone.utc)
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(
                "stream_invalid_json",
                url=self.url,
                error=str(e),
                message=str(raw)[:100],
            )
            return

        if _is_pong(message):
            self._last_pong_at = asyncio.get_running_loop().time()
            logger.debug("stream_pong_received", url=self.url)
            return

        for handler in list(self._message_handlers):
            try:
                handler(message)
            except Exception:
                logger.exception("stream_message_handler_error", url=self.url)

        self._enqueue(message)

    def _enqueue(self, item: Any) -> None:
        if self._messages.full():
            self._messages.get_nowait()
            logger.warning(
                "stream_message_dropped",
                url=self.url,
                queue_size=self._messages.maxsize,
            )
        self._messages.put_nowait(item)

    def _end_stream(self) -> None:
        self._enqueue(_STREAM_END)

    def _drain_stream_end(self) -> None:
        """Drop end markers left by a previous disconnect."""
        kept = []
        while not self._messages.empty():
            item = self._messages.get_nowait()
            if item is not _STREAM_END:
                kept.append(item)
        for item in kept:
            self._messages.put_nowait(item)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"StreamingSession(url={self.url}, "
            f"state={self._state.value}, "
            f"subscriptions={len(self._registry)}, "
            f"reconnects={self._reconnect_count})"
        )
