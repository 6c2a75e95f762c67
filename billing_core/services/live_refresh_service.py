"""Live refresh over a Server-Sent Events channel."""
import json
import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

import requests

from billing_core.exceptions import ChannelError

logger = logging.getLogger(__name__)

SNAPSHOT_EVENT = 'snapshot'
UPDATE_EVENT = 'update'


class ServerEvent:
    """One dispatched SSE event."""

    def __init__(self, event: str = 'message', data: str = '', id: Optional[str] = None):
        self.event = event
        self.data = data
        self.id = id

    def json(self) -> Any:
        return json.loads(self.data)

    def __repr__(self):
        return f"<ServerEvent(event={self.event!r}, bytes={len(self.data)})>"


def iter_events(lines: Iterable[str]) -> Iterator[ServerEvent]:
    """
    Group raw stream lines into events.

    A blank line dispatches the pending event; `:` lines are comments;
    multiple `data:` lines are joined with newlines. Events with no data
    and no explicit name are dropped.
    """
    event_name = None
    data_lines = []
    last_id = None

    for raw in lines:
        if isinstance(raw, bytes):
            raw = raw.decode('utf-8')
        line = raw.rstrip('\r\n')

        if not line:
            if data_lines or event_name:
                yield ServerEvent(event_name or 'message', '\n'.join(data_lines), last_id)
            event_name = None
            data_lines = []
            continue

        if line.startswith(':'):
            continue

        field, _, value = line.partition(':')
        if value.startswith(' '):
            value = value[1:]

        if field == 'event':
            event_name = value
        elif field == 'data':
            data_lines.append(value)
        elif field == 'id':
            last_id = value
        # 'retry' and unknown fields are ignored

    if data_lines or event_name:
        yield ServerEvent(event_name or 'message', '\n'.join(data_lines), last_id)


class LiveRefreshSubscriber:
    """
    Standing subscription that keeps a view in step with the backend.

    - `snapshot` events carry a full payload handed to `on_snapshot`
    - `update` events are bare signals; `on_update` re-fetches everything
    - on any channel failure the subscriber closes itself and calls
      `on_error`; there is no reconnect loop

    Use `run()` to consume in the current thread or `start()` for a
    background thread. Always `close()` (or use it as a context manager)
    when the view goes away.
    """

    def __init__(
        self,
        client,
        path: str,
        on_update: Callable[[], Any],
        on_snapshot: Optional[Callable[[Dict[str, Any]], Any]] = None,
        on_error: Optional[Callable[[ChannelError], Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ):
        self.client = client
        self.path = path
        self.params = dict(params or {})
        self.on_update = on_update
        self.on_snapshot = on_snapshot
        self.on_error = on_error

        self._response: Optional[requests.Response] = None
        self._thread: Optional[threading.Thread] = None
        self._closed = threading.Event()
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def _connect(self) -> requests.Response:
        response = self.client.open_stream(self.path, self.params)
        with self._lock:
            if self.closed:
                response.close()
                raise ChannelError('Subscription closed before it connected')
            self._response = response
        logger.info(f"[SSE] Subscribed to {self.path} {self.params}")
        return response

    def dispatch(self, event: ServerEvent) -> None:
        """Route one event to the matching callback."""
        if event.event == SNAPSHOT_EVENT:
            if self.on_snapshot is None:
                self.on_update()
                return
            try:
                payload = event.json()
            except ValueError:
                logger.warning(f"[SSE] Discarding malformed snapshot ({len(event.data)} bytes)")
                return
            try:
                self.on_snapshot(payload)
            except Exception as e:
                logger.warning(f"[SSE] Discarding snapshot that could not be applied: {e!r}")
        elif event.event == UPDATE_EVENT:
            self.on_update()
        else:
            logger.debug(f"[SSE] Ignoring event {event.event!r}")

    def run(self) -> None:
        """
        Consume the stream until it ends, fails or is closed.

        The channel is always closed on exit, including when a callback
        raises; that exception is reported to `on_error` and re-raised.
        """
        try:
            response = self._connect()
            for event in iter_events(response.iter_lines(decode_unicode=True)):
                if self.closed:
                    break
                self.dispatch(event)
            else:
                logger.info(f"[SSE] Stream {self.path} ended by server")
        except ChannelError as e:
            self._fail(e)
            return
        except (requests.RequestException, UnicodeDecodeError) as e:
            if self.closed:
                return
            self._fail(ChannelError(f"Live updates interrupted: {e}"))
            return
        except Exception as e:
            logger.error(f"[SSE] Handler for {self.path} failed: {e!r}")
            self._fail(ChannelError(f"Live updates stopped: {e}"))
            raise
        finally:
            self.close()

    def start(self) -> 'LiveRefreshSubscriber':
        """Run the subscription in a daemon thread."""
        if self._thread is not None:
            raise RuntimeError('Subscriber already started')
        self._thread = threading.Thread(
            target=self.run, name=f"sse:{self.path}", daemon=True
        )
        self._thread.start()
        return self

    def _fail(self, error: ChannelError) -> None:
        if self.closed:
            return
        logger.warning(f"[SSE] {error.message}; closing without retry")
        self.close()
        if self.on_error is not None:
            self.on_error(error)

    def close(self) -> None:
        """Tear down the channel. Safe to call more than once."""
        with self._lock:
            self._closed.set()
            response, self._response = self._response, None
        if response is not None:
            response.close()
            logger.info(f"[SSE] Unsubscribed from {self.path}")

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
