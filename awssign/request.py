"""
The HTTP request value read (and extended) by the signer.
"""

from urllib.parse import (
    SplitResult, quote as url_quote, unquote as url_unquote, urlsplit)

from urllib3 import HTTPHeaderDict

from .exc import InvalidRequestError

# Unreserved characters from RFC 3986 (besides letters and digits)
_unreserved = "-_.~"

# Ports that are implied by the URI scheme
_default_ports = {
    "http": 80,
    "https": 443,
}

class Request(object):
    """
    An HTTP request to be signed: method, URI, headers, and body.

    Headers are held in a case-insensitive mapping that allows a header to
    be repeated; each occurrence is kept as a separate value.
    """

    def __init__(self, method="GET", uri="/", headers=None, body=b""):
        """
        Request(
            method: str="GET",
            uri: str="/",
            headers: Optional[Union[Mapping, Iterable[Tuple[str, str]]]]=None,
            body: bytes=b"")

        uri may be absolute ("https://host/path?query") or only a path and
        query ("/path?query"). In the latter case a Host header must be
        supplied before the request can be signed.
        """
        super(Request, self).__init__()
        self.method = method
        self.uri = uri
        self.headers = headers
        self.body = body
        return

    def __repr__(self):
        return "Request(%r, %r, headers=%r, body=<%d bytes>)" % (
            self.method, self.uri, list(self.headers.iteritems()),
            len(self.body))

    @property
    def method(self):
        """
        The HTTP method (GET, POST, PUT), upper-cased.
        """
        return self._method

    @method.setter
    def method(self, value):
        if not isinstance(value, str):
            raise TypeError("Expected method to be a string.")

        self._method = value.upper()
        return

    @property
    def uri(self):
        """
        The request URI, including any query string.
        """
        return self._uri

    @uri.setter
    def uri(self, value):
        if not isinstance(value, str):
            raise TypeError("Expected uri to be a string.")

        self._uri = value
        return

    @property
    def headers(self):
        """
        The HTTP headers as an HTTPHeaderDict.
        """
        return self._headers

    @headers.setter
    def headers(self, value):
        new_headers = HTTPHeaderDict()

        if value is None:
            self._headers = new_headers
            return

        if isinstance(value, HTTPHeaderDict):
            items = value.iteritems()
        elif hasattr(value, "items"):
            items = value.items()
        else:
            try:
                items = iter(value)
            except TypeError:
                raise TypeError(
                    "Expected headers to be a mapping or an iterable of "
                    "(name, value) pairs: %r" % type(value).__name__)

        for key, header_values in items:
            if not isinstance(key, str):
                raise TypeError("Header must be a string: %r" % (key,))

            if isinstance(header_values, str):
                header_values = [header_values]

            try:
                hv_iter = iter(header_values)
            except TypeError:
                raise TypeError(
                    "Header %r value must be a string or an iterable of "
                    "strings: %r" % (key, type(header_values).__name__))

            for i, el in enumerate(hv_iter):
                if not isinstance(el, str):
                    raise TypeError(
                        "Header %r value %d must be a string: %r" %
                        (key, i, type(el).__name__))
                new_headers.add(key, el)

        self._headers = new_headers
        return

    @property
    def body(self):
        """
        The body sent with the request. This is undecoded bytes.
        """
        return self._body

    @body.setter
    def body(self, value):
        if not isinstance(value, bytes):
            raise TypeError("Expected body to be a byte array.")

        self._body = value
        return

    @property
    def path(self):
        """
        The path component of the URI.
        """
        return _split_uri(self.uri).path

    @property
    def query_string(self):
        """
        The raw query string portion of the URI (without the '?').
        """
        return _split_uri(self.uri).query

    @property
    def fragment(self):
        """
        The fragment portion of the URI (without the '#').
        """
        return _split_uri(self.uri).fragment

    @property
    def host(self):
        """
        The host named by the URI, with the port appended when it isn't the
        default for the scheme. None if the URI carries no host.
        An InvalidRequestError is raised if the port is not a number.
        """
        parts = _split_uri(self.uri)
        hostname = parts.hostname
        if not hostname:
            return None

        if ":" in hostname:
            # IPv6 literal
            hostname = "[%s]" % hostname

        try:
            port = parts.port
        except ValueError as e:
            raise InvalidRequestError(
                "Invalid port in URI %r: %s" % (self.uri, e))

        if port is not None and port != _default_ports.get(parts.scheme):
            return "%s:%d" % (hostname, port)

        return hostname

    def get_query_param(self, name):
        """
        get_query_param(name) -> Optional[str]

        Return the un-escaped value of the first query parameter called name,
        or None if it isn't present. A parameter given without '=' has the
        value "".
        """
        for key, value in _split_query(self.query_string):
            if url_unquote(key) == name:
                return "" if value is None else url_unquote(value)

        return None

    def set_query_param(self, name, value):
        """
        set_query_param(name, value)

        Set the query parameter called name to value, replacing every existing
        occurrence. The new parameter takes the place of the first occurrence,
        or is appended if there was none.
        """
        encoded = (url_quote(name, safe=_unreserved) + "=" +
                   url_quote(str(value), safe=_unreserved))

        params = []
        replaced = False
        for key, old_value in _split_query(self.query_string):
            if url_unquote(key) == name:
                if not replaced:
                    params.append(encoded)
                    replaced = True
                continue

            params.append(key if old_value is None else key + "=" + old_value)

        if not replaced:
            params.append(encoded)

        parts = _split_uri(self.uri)
        self.uri = _join_uri(parts._replace(query="&".join(params)))
        return

    def remove_query(self):
        """
        remove_query() -> str

        The URI without its query string or fragment.
        """
        parts = _split_uri(self.uri)
        return _join_uri(parts._replace(query="", fragment=""))

    def copy(self):
        """
        Return an independent copy of this request. Changing the copy's
        headers or URI leaves this request untouched.
        """
        return Request(
            method=self.method, uri=self.uri, headers=self.headers.copy(),
            body=self.body)

def _split_uri(uri):
    """
    Split a URI into a SplitResult.

    A URI starting with '/' is taken to be a path (as on an HTTP request
    line), so "//example//" is a path rather than a scheme-relative URI.
    """
    if uri.startswith("/"):
        rest, _, fragment = uri.partition("#")
        path, _, query = rest.partition("?")
        return SplitResult("", "", path, query, fragment)

    return urlsplit(uri)

def _join_uri(parts):
    """
    Reassemble a SplitResult produced by _split_uri.
    """
    uri = parts.path
    if parts.scheme or parts.netloc:
        uri = "%s://%s%s" % (parts.scheme, parts.netloc, uri)
    if parts.query:
        uri += "?" + parts.query
    if parts.fragment:
        uri += "#" + parts.fragment
    return uri

def _split_query(query_string):
    """
    Split a raw query string into (key, value) pairs without decoding them.
    The value is None when the parameter has no '='. Empty components are
    skipped.
    """
    for component in query_string.split("&"):
        if component == "":
            continue

        try:
            key, value = component.split("=", 1)
        except ValueError:
            key = component
            value = None

        yield key, value

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
