__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import json
import logging
import time

import requests
import websocket

from printerface.exceptions import TransportError

DEFAULT_TIMEOUT = 30


def build_base_url(
    https=False, httpuser=None, httppass=None, host=None, port=None, prefix=None
):
    protocol = "https" if https else "http"
    httpauth = "{}:{}@".format(httpuser, httppass) if httpuser and httppass else ""
    host = host if host else "127.0.0.1"
    port = ":{}".format(port) if port else ":5000"
    prefix = prefix if prefix else ""

    return "{}://{}{}{}{}".format(protocol, httpauth, host, port, prefix)


class SocketTimeout(BaseException):
    pass


class SocketClient:
    """
    Thin wrapper around a :class:`websocket.WebSocketApp` running on its own
    thread. All push updates arrive on that thread.
    """

    def __init__(self, url, daemon=True, **kwargs):
        self._url = url
        self._daemon = daemon
        self._ws_kwargs = kwargs

        self._ws = None
        self._thread = None

        self._logger = logging.getLogger(__name__)

    def _prepare(self):
        """Prepares socket and thread for a new connection."""

        if self._ws is not None:
            try:
                self._ws.close()
            except Exception:
                self._logger.exception("Error while closing the previous socket")

        callbacks = {}
        for callback in ("on_open", "on_message", "on_error", "on_close"):
            # websocket does a type check against a python function type, so no
            # functools.partial here
            def factory(cb):
                return lambda *fargs, **fkwargs: self._on_callback(cb, *fargs, **fkwargs)

            callbacks[callback] = factory(callback)

        kwargs = dict(self._ws_kwargs)
        kwargs.update(callbacks)
        self._ws = websocket.WebSocketApp(self._url, **kwargs)

        import threading

        self._thread = threading.Thread(target=self._on_thread_run)
        self._thread.daemon = self._daemon

    def _on_thread_run(self):
        self._ws.run_forever()

    def _on_callback(self, cb, *args, **kwargs):
        cb_func = self._ws_kwargs.get(cb, None)
        if callable(cb_func):
            cb_func(*args, **kwargs)

    def connect(self):
        """Connects the socket."""
        self._prepare()
        self._thread.start()

    def wait(self, timeout=None):
        """Waits for the closing of the socket or the timeout."""
        start = time.time()
        while self._thread.is_alive():
            if timeout and time.time() > start + timeout:
                raise SocketTimeout()
            self._thread.join(timeout=1.0)

    def disconnect(self):
        """Disconnect the web socket."""
        if self._ws:
            self._ws.close()

    def send(self, data):
        payload = '["' + json.dumps(data).replace('"', '\\"') + '"]'
        self._ws.send(payload)


class Connection:
    """
    HTTP connection to the printer server.

    Every request is sent with the configured API key. Bodies are returned as
    text, any non-2xx answer raises a :class:`~printerface.exceptions.TransportError`
    carrying the status code.

    Arguments:
        baseurl (str): base url of the server, see :func:`build_base_url`
        apikey (str): API key to authenticate with
        timeout (float): default request timeout in seconds
    """

    def __init__(self, baseurl, apikey, timeout=None):
        self.baseurl = baseurl
        self.apikey = apikey
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT

        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(cls, settings):
        baseurl = build_base_url(
            https=settings.https,
            httpuser=settings.httpuser,
            httppass=settings.httppass,
            host=settings.host,
            port=settings.port,
            prefix=settings.prefix,
        )
        return cls(baseurl, settings.apikey, timeout=settings.timeout)

    def prepare_request(self, method=None, path=None, params=None):
        while path.startswith("/"):
            path = path[1:]
        url = self.baseurl + "/" + path

        headers = {}
        if self.apikey:
            headers["X-Api-Key"] = self.apikey

        return requests.Request(
            method=method, url=url, params=params, headers=headers
        ).prepare()

    def request(self, method, path, data=None, params=None, timeout=None):
        if timeout is None:
            timeout = self.timeout

        request = self.prepare_request(method, path, params=params)
        if data is not None:
            request.prepare_body(None, None, json=data)

        self._logger.debug(f"{method} {request.url}")
        try:
            with requests.Session() as s:
                response = s.send(request, timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(
                "{} {} failed".format(method, request.url), cause=e
            ) from e

        if not 200 <= response.status_code < 300:
            raise TransportError(
                "{} {} answered with {}".format(method, request.url, response.status_code),
                status_code=response.status_code,
            )

        return response

    def get(self, path, params=None, timeout=None):
        """Performs a GET request against ``path`` and returns the body text."""
        return self.request("GET", path, params=params, timeout=timeout).text

    def post_json(self, path, data, params=None, timeout=None):
        """POSTs ``data`` as JSON to ``path`` and returns the body text."""
        return self.request("POST", path, data=data, params=params, timeout=timeout).text

    def create_socket(self, **kwargs):
        import random
        import uuid

        # SockJS websocket URL, see
        # - http://sockjs.github.io/sockjs-protocol/sockjs-protocol-0.3.3.html#section-37
        # - http://sockjs.github.io/sockjs-protocol/sockjs-protocol-0.3.3.html#section-50
        protocol = "wss" if self.baseurl.startswith("https:") else "ws"
        url = "{}://{}/sockjs/{:0>3d}/{}/websocket".format(
            protocol,
            self.baseurl[self.baseurl.find("//") + 2 :],  # host + port + prefix
            random.randrange(0, stop=999),  # server_id
            uuid.uuid4(),  # session_id
        )

        on_open_cb = kwargs.get("on_open", None)
        on_heartbeat_cb = kwargs.get("on_heartbeat", None)
        on_message_cb = kwargs.get("on_message", None)
        on_close_cb = kwargs.get("on_close", None)
        on_error_cb = kwargs.get("on_error", None)
        daemon = kwargs.get("daemon", True)

        def authenticate(ws):
            # passive login to retrieve username and session key for the API key
            data = json.loads(self.post_json("api/login", {"passive": True}))
            socket.send({"auth": "{name}:{session}".format(**data)})

        def on_message(ws, message):
            message_type = message[0]

            if message_type == "h":
                if callable(on_heartbeat_cb):
                    on_heartbeat_cb(ws)
                return
            elif message_type in ("o", "c"):
                return

            if not callable(on_message_cb):
                return

            message_body = message[1:]
            if not message_body:
                return

            data = json.loads(message_body)

            if message_type == "m":
                data = [
                    data,
                ]

            for d in data:
                if isinstance(d, str):
                    d = json.loads(d)
                for internal_type, internal_message in d.items():
                    on_message_cb(ws, internal_type, internal_message)
                    if internal_type == "connected":
                        authenticate(ws)

        def on_open(ws):
            if callable(on_open_cb):
                on_open_cb(ws)

        def on_close(ws, *args):
            if callable(on_close_cb):
                on_close_cb(ws)

        def on_error(ws, error):
            if callable(on_error_cb):
                on_error_cb(ws, error)

        socket = SocketClient(
            url,
            daemon=daemon,
            on_open=on_open,
            on_message=on_message,
            on_close=on_close,
            on_error=on_error,
        )
        socket.connect()

        return socket
