"""A class to send form-encoded records over HTTP."""

import json
import logging
import time
from typing import Any, Dict, Optional

import requests

from . import version
from .encode import encode, encode_into
from .sink import FormSink
from .value import to_value

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class FormClient:
    """Maintains a single session between this machine and a web service.

    Parameters are given as records (usually dataclass instances) and are
    encoded with :py:func:`urlform.encode`. Queries put them in the URL,
    submissions send them as a form body.

    The :py:attr:`session` attribute is a :py:class:`requests.Session`
    object. Customise networking options by manipulating it.

    Responses, as received by :py:mod:`requests`, are retained as attribute
    :py:attr:`response` of this object. It is overwritten on each request.

    """

    def __init__(self, uri="", timeout=None, logger=None):
        """Create a client.

        :param uri: base URI that request paths are appended to
        :type uri: str
        :param timeout: (optional) default timeout in seconds
        :type timeout: int or float
        :param logger: (optional) logger to use instead of ``FormClient``
        :returns: None

        """
        self.uri = uri
        self.timeout = timeout
        self.session = requests.Session()
        self.user_agent = "urlform/" + version.__version__
        self.session.headers.update({"User-Agent": self.user_agent})
        self.response: Optional[requests.Response] = None
        if logger is not None:
            self.logger = logger
        else:
            self.logger = logging.getLogger("FormClient")

    def load_config(self, path: str) -> Dict[str, Any]:
        """Load ``uri``, ``timeout`` and ``loglevel`` from a JSON file.

        Missing keys leave the current settings untouched.

        """
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
        self.uri = cfg.get("uri", self.uri)
        self.timeout = cfg.get("timeout", self.timeout)
        if "loglevel" in cfg:
            self.logger.setLevel(cfg["loglevel"])
        return cfg

    def close(self) -> None:
        """Close this session."""
        self.session.close()

    def prepare(
        self, method: str, path: str, params: Any = None
    ) -> requests.PreparedRequest:
        """Build a request for ``path`` carrying ``params``.

        ``GET`` and ``HEAD`` requests carry the encoded record as the query
        string, other methods as a form body. ``None`` means no parameters.

        """
        method = method.upper()
        url = self.uri + path
        if method in ("GET", "HEAD"):
            if params is not None:
                url = self._with_query(url, params)
            request = requests.Request(method, url)
        else:
            encoded = "" if params is None else encode(params)
            request = requests.Request(
                method,
                url,
                data=encoded,
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
        return self.session.prepare_request(request)

    @staticmethod
    def _with_query(url: str, params: Any) -> str:
        if "?" in url:
            # keep the existing query, separate new pairs with "&"
            sink = FormSink(url, start_position=url.index("?") + 1)
        else:
            sink = FormSink(url + "?")
        encode_into(to_value(params), sink)
        query_url = sink.finish()
        return query_url if sink.pair_count else url

    def _send(self, prepared: requests.PreparedRequest, timeout=None) -> Any:
        if timeout is None:
            timeout = self.timeout
        self.logger.debug("Request: %s %s", prepared.method, prepared.url)
        t_start = time.monotonic()
        self.response = self.session.send(prepared, timeout=timeout)
        t_taken = time.monotonic() - t_start
        if t_taken > 1.0:
            self.logger.warning(
                "Slow request: %s took %fs", prepared.url, t_taken
            )

        if self.response.status_code not in (200, 201, 202):
            self.response.raise_for_status()

        return self.response.json()

    def query(self, path: str, params: Any = None, timeout=None) -> Any:
        """Perform a GET request with ``params`` in the query string.

        :returns: :py:meth:`requests.Response.json`-deserialised Python object
        :raises: `requests.HTTPError`: if response status not successful
        :raises: `urlform.EncodeError`: if ``params`` cannot be encoded

        """
        return self._send(self.prepare("GET", path, params), timeout)

    def submit(self, path: str, params: Any = None, timeout=None) -> Any:
        """Perform a POST request with ``params`` as a form body.

        :returns: :py:meth:`requests.Response.json`-deserialised Python object
        :raises: `requests.HTTPError`: if response status not successful
        :raises: `urlform.EncodeError`: if ``params`` cannot be encoded

        """
        return self._send(self.prepare("POST", path, params), timeout)
