"""
SigV4 signing routines.
"""

from hashlib import sha256
import hmac
from logging import getLogger
from re import compile as re_compile
from urllib.parse import quote as url_quote, unquote_to_bytes

from .dateutil import (
    format_amz_date, format_amz_datestamp, format_http_date, parse_iso8601,
    parse_rfc1123, utcnow)
from .exc import InvalidDateError, InvalidRequestError
from .request import Request, _unreserved

# pylint: disable=C0103

# Algorithm for AWS SigV4
AWS4_HMAC_SHA256 = "AWS4-HMAC-SHA256"

# Signature scope terminator
AWS4_REQUEST = "aws4_request"

# Payload hash used when the body is not part of the signature
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

# Bounds on the lifetime of a presigned URL, in seconds (7 days max)
MIN_EXPIRES = 1
MAX_EXPIRES = 604800

# The only ISO 8601 form accepted in a request: the AWS basic format
_amz_date_regex = re_compile(r"^[0-9]{8}T[0-9]{6}Z$")

# Header and query string keys
_authorization = "Authorization"
_date = "Date"
_host = "Host"
_x_amz_algorithm = "X-Amz-Algorithm"
_x_amz_content_sha256 = "X-Amz-Content-Sha256"
_x_amz_credential = "X-Amz-Credential"
_x_amz_date = "X-Amz-Date"
_x_amz_expires = "X-Amz-Expires"
_x_amz_security_token = "X-Amz-Security-Token"
_x_amz_signature = "X-Amz-Signature"
_x_amz_signedheaders = "X-Amz-SignedHeaders"

# Logging instance
log = getLogger("awssign.sigv4")

class AWSSigV4Signer(object):
    """
    Sign HTTP requests and URIs with AWS SigV4 (AWS4-HMAC-SHA256).

    A signer holds only its credentials and scope; it never changes after
    construction and may be shared between threads. Each request passed in
    must not be modified by anyone else while it is being signed.
    """

    def __init__(self, access_key_id, secret_key, region, service,
                 security_token=None):
        """
        AWSSigV4Signer(
            access_key_id: str,
            secret_key: str,
            region: str,
            service: str,
            security_token: Optional[str]=None)

        access_key_id: The access key id (e.g. "AKIDEXAMPLE"), not the
            account id.
        secret_key: The secret key paired with the access key id.
        region: The region (or pseudo-region) of the endpoint, e.g.
            "us-east-1".
        service: The name of the service being called, e.g. "glacier".
        security_token: A session token for temporary credentials. When
            given, it is sent (and signed) as X-Amz-Security-Token.
        """
        super(AWSSigV4Signer, self).__init__()

        for name, value in (("access_key_id", access_key_id),
                            ("secret_key", secret_key),
                            ("region", region),
                            ("service", service)):
            if not isinstance(value, str):
                raise TypeError("Expected %s to be a string." % name)

        if security_token is not None and not isinstance(security_token, str):
            raise TypeError("Expected security_token to be a string.")

        self._access_key_id = access_key_id
        self._secret_key = secret_key
        self._region = region
        self._service = service
        self._security_token = security_token
        return

    def __repr__(self):
        return "AWSSigV4Signer(access_key_id=%r, region=%r, service=%r)" % (
            self.access_key_id, self.region, self.service)

    @property
    def access_key_id(self):
        """
        The access key id used to sign requests.
        """
        return self._access_key_id

    @property
    def region(self):
        """
        The region the service is running in.
        """
        return self._region

    @property
    def service(self):
        """
        The name of the service being invoked.
        """
        return self._service

    @property
    def security_token(self):
        """
        The session token sent with requests, or None.
        """
        return self._security_token

    def request_timestamp(self, request):
        """
        request_timestamp(request) -> datetime

        The instant the request is signed for. This is taken from, in order:
        the X-Amz-Date header, the X-Amz-Date query parameter, or the Date
        header. If none is present, the current time is used and written to
        the request's Date header so that later reads agree.

        An InvalidDateError is raised if the date found cannot be parsed.
        """
        date_str = _first_header(request, _x_amz_date)
        if not date_str:
            date_str = request.get_query_param(_x_amz_date)
        if not date_str:
            date_str = _first_header(request, _date)

        if not date_str:
            timestamp = utcnow().replace(microsecond=0)
            request.headers[_date] = format_http_date(timestamp)
            return timestamp

        return parse_request_date(date_str)

    def credential_scope(self, timestamp):
        """
        credential_scope(timestamp) -> str

        The date/region/service/aws4_request scope for the given instant.
        """
        return "/".join([format_amz_datestamp(timestamp), self.region,
                         self.service, AWS4_REQUEST])

    def credential(self, timestamp):
        """
        credential(timestamp) -> str

        The access key id followed by the credential scope.
        """
        return self.access_key_id + "/" + self.credential_scope(timestamp)

    def augment_request(self, request):
        """
        augment_request(request) -> Request

        Return a copy of request with the headers required for signing
        filled in: X-Amz-Date, X-Amz-Content-Sha256, Host, and (with a
        session token) X-Amz-Security-Token. Values already present are
        kept.
        """
        request = request.copy()
        headers = request.headers

        if not _first_header(request, _x_amz_date):
            timestamp = self.request_timestamp(request)
            headers[_x_amz_date] = format_amz_date(timestamp)

        if not _first_header(request, _x_amz_content_sha256):
            headers[_x_amz_content_sha256] = sha256(request.body).hexdigest()

        if not _first_header(request, _host):
            headers[_host] = _required_host(request)

        if (self.security_token is not None and
                not _first_header(request, _x_amz_security_token)):
            headers[_x_amz_security_token] = self.security_token

        return request

    def augment_uri(self, uri, expires_in=None):
        """
        augment_uri(uri, expires_in=None) -> Request

        Build a GET request for uri carrying the query parameters required
        for a presigned URL: X-Amz-Date, X-Amz-Algorithm, X-Amz-Credential,
        X-Amz-Expires, X-Amz-SignedHeaders, and (with a session token)
        X-Amz-Security-Token. Parameters already present in uri are kept,
        except that X-Amz-Expires is always clamped to [1, 604800].
        """
        request = Request("GET", uri)
        _required_host(request)

        if request.get_query_param(_x_amz_date) is None:
            request.set_query_param(_x_amz_date, format_amz_date(utcnow()))

        timestamp = self.request_timestamp(request)

        if request.get_query_param(_x_amz_algorithm) is None:
            request.set_query_param(_x_amz_algorithm, AWS4_HMAC_SHA256)

        if request.get_query_param(_x_amz_credential) is None:
            request.set_query_param(
                _x_amz_credential, self.credential(timestamp))

        expires = request.get_query_param(_x_amz_expires)
        if expires is None:
            request.set_query_param(_x_amz_expires, clamp_expires(expires_in))
        else:
            try:
                clamped = clamp_expires(int(expires))
            except ValueError:
                raise InvalidRequestError(
                    "X-Amz-Expires is not an integer: %r" % (expires,))
            if str(clamped) != expires:
                request.set_query_param(_x_amz_expires, clamped)

        if request.get_query_param(_x_amz_signedheaders) is None:
            request.set_query_param(_x_amz_signedheaders, "host")

        if (self.security_token is not None and
                request.get_query_param(_x_amz_security_token) is None):
            request.set_query_param(_x_amz_security_token, self.security_token)

        return request

    def canonical_request(self, request):
        """
        canonical_request(request) -> str

        The AWS SigV4 canonical request for the request as it stands.
        """
        return get_canonical_request(request)

    def string_to_sign(self, request):
        """
        string_to_sign(request) -> str

        The AWS SigV4 string to sign for the request as it stands.
        """
        timestamp = self.request_timestamp(request)
        return self._string_to_sign(request, timestamp)

    def signature(self, request):
        """
        signature(request) -> str

        The hex-encoded AWS SigV4 signature of the request as it stands.
        """
        timestamp = self.request_timestamp(request)
        return self._signature(request, timestamp)

    def authorization(self, request):
        """
        authorization(request) -> str

        The value of the Authorization header for the request as it stands:
            AWS4-HMAC-SHA256 Credential=<id>/<scope>,SignedHeaders=<h1;h2>,
            Signature=<hex>
        (on a single line, with no spaces after the commas).
        """
        timestamp = self.request_timestamp(request)
        signature = self._signature(request, timestamp)
        signed_headers = ";".join(
            get_signed_header_names(_with_host_header(request)))

        return "%s Credential=%s,SignedHeaders=%s,Signature=%s" % (
            AWS4_HMAC_SHA256, self.credential(timestamp), signed_headers,
            signature)

    def sign(self, request):
        """
        sign(request) -> Request

        Return a signed copy of request. The copy carries the Authorization
        header along with any of X-Amz-Date, X-Amz-Content-Sha256, and Host
        that had to be added. The request passed in is left unchanged.
        """
        request = self.augment_request(request)
        request.headers[_authorization] = self.authorization(request)
        log.debug("Signed %s %s", request.method, request.uri)
        return request

    def sign_uri(self, uri, expires_in=None):
        """
        sign_uri(uri, expires_in=None) -> str

        Return uri presigned with the SigV4 query parameters and
        X-Amz-Signature. expires_in is the lifetime in seconds; it defaults
        to, and is clamped to, at most 604800 (7 days) and at least 1.
        """
        request = self.augment_uri(uri, expires_in)
        signature = self.signature(request)

        result = (request.remove_query() + "?" +
                  get_canonical_query_string(request.query_string) +
                  "&" + _x_amz_signature + "=" + signature)

        if request.fragment:
            result += "#" + request.fragment

        log.debug("Presigned %s (expires in %s seconds)",
                  request.remove_query(),
                  request.get_query_param(_x_amz_expires))
        return result

    def _string_to_sign(self, request, timestamp):
        canonical_request = get_canonical_request(request)
        log.debug("Canonical request:\n%s", canonical_request)

        string_to_sign = build_string_to_sign(
            canonical_request, timestamp, self.credential_scope(timestamp))
        log.debug("String to sign:\n%s", string_to_sign)
        return string_to_sign

    def _signature(self, request, timestamp):
        string_to_sign = self._string_to_sign(request, timestamp)
        k_signing = derive_signing_key(
            self._secret_key, format_amz_datestamp(timestamp), self.region,
            self.service)
        return compute_signature(k_signing, string_to_sign)

def parse_request_date(date_str):
    """
    parse_request_date(date_str) -> datetime

    Parse a date from a request, either in the AWS basic ISO 8601 format
    (20150830T123600Z) or in RFC 1123 format (Sun, 30 Aug 2015 12:36:00 GMT).

    Other ISO 8601 forms (extended, or with an offset) are rejected; the
    X-Amz-Date text is signed as-is and must equal the string to sign
    timestamp.

    An InvalidDateError is raised if neither format matches.
    """
    if _amz_date_regex.match(date_str):
        date = parse_iso8601(date_str)
    else:
        date = parse_rfc1123(date_str)
    if not date:
        raise InvalidDateError(
            "Date is not a valid ISO 8601 or RFC 1123 string: %r" % date_str)

    return date

def aws_uri_escape(value):
    """
    aws_uri_escape(value) -> str

    Percent-encode value according to the SigV4 URI encoding rules:
    * Alpha, digit, and the symbols '-', '.', '_', and '~' are left alone.
    * Every other byte of the UTF-8 encoding is percent-encoded with
      upper-case hex digits; this includes '/', '*' (%2A), and space (%20).

    Existing percent-encodings are decoded first, so escaping an already
    escaped value returns it unchanged.
    """
    return url_quote(unquote_to_bytes(value), safe=_unreserved)

def get_canonical_uri_path(uri_path):
    """
    get_canonical_uri_path(uri_path) -> str

    Normalizes the specified URI path, removing empty and '.' segments and
    resolving '..' segments, then escapes each remaining segment. A '..'
    with nothing left to remove is ignored rather than treated as an error.

    The result always starts with '/'; a trailing '/' on the input is kept.
    """
    components = []

    for component in uri_path.split("/"):
        component = aws_uri_escape(component)

        if component in ("", "."):
            continue
        elif component == "..":
            if components:
                components.pop()
        else:
            components.append(component)

    result = "/" + "/".join(components)
    if uri_path.endswith("/") and not result.endswith("/"):
        result += "/"

    return result

def get_canonical_query_string(query_string):
    """
    get_canonical_query_string(query_string) -> str

    Re-encode each key=value pair of the query string (a '+' is read as a
    space) and sort the pairs by key, then by value. Repeated keys are kept
    as separate pairs. A pair without '=' gets an empty value.
    """
    if not query_string:
        return ""

    params = []
    for component in query_string.split("&"):
        if component == "":
            continue

        try:
            key, value = component.split("=", 1)
        except ValueError:
            key = component
            value = ""

        params.append((_escape_query_component(key),
                       _escape_query_component(value)))

    # Everything is ASCII after escaping, so this is a byte-wise order.
    params.sort()
    return "&".join(["%s=%s" % param for param in params])

def get_signed_header_names(request):
    """
    get_signed_header_names(request) -> List[str]

    The lower-cased, sorted names of the headers to sign. If the request URI
    carries X-Amz-SignedHeaders, exactly those headers are signed; otherwise
    every header on the request (except Authorization) is.
    """
    signed_headers = request.get_query_param(_x_amz_signedheaders)
    if signed_headers is not None:
        names = signed_headers.split(";")
    else:
        names = [name for name in request.headers
                 if name.lower() != _authorization.lower()]

    return sorted(set([name.strip().lower() for name in names
                       if name.strip()]))

def get_canonical_headers(request, signed_header_names):
    """
    get_canonical_headers(request, signed_header_names) -> str

    The canonical headers block: one "name:values\\n" line per signed header.
    Each value is trimmed of leading and trailing whitespace; repeated
    headers have their values sorted and joined with ','.
    """
    lines = []
    for name in signed_header_names:
        values = sorted([value.strip()
                         for value in request.headers.getlist(name)])
        lines.append("%s:%s\n" % (name, ",".join(values)))

    return "".join(lines)

def get_canonical_request(request):
    """
    get_canonical_request(request) -> str

    The AWS SigV4 canonical request given an HTTP request. This process is
    outlined here:
    http://docs.aws.amazon.com/general/latest/gr/sigv4-create-canonical-request.html

    The canonical request is:
        request_method + '\\n' +
        canonical_uri_path + '\\n' +
        canonical_query_string + '\\n' +
        canonical_headers + '\\n' +
        signed_headers + '\\n' +
        payload_hash

    The payload hash is the X-Amz-Content-Sha256 header, or UNSIGNED-PAYLOAD
    if it is absent. A Host header is built from the URI if needed.
    """
    request = _with_host_header(request)
    signed_header_names = get_signed_header_names(request)

    payload_hash = _first_header(request, _x_amz_content_sha256)
    if not payload_hash:
        payload_hash = UNSIGNED_PAYLOAD

    return "\n".join([
        request.method,
        get_canonical_uri_path(request.path),
        get_canonical_query_string(request.query_string),
        get_canonical_headers(request, signed_header_names),
        ";".join(signed_header_names),
        payload_hash])

def build_string_to_sign(canonical_request, timestamp, credential_scope):
    """
    build_string_to_sign(canonical_request, timestamp, credential_scope) -> str

    The AWS SigV4 string to sign:
        AWS4-HMAC-SHA256 + '\\n' +
        timestamp (YYYYMMDDTHHMMSSZ) + '\\n' +
        credential_scope + '\\n' +
        sha256(canonical_request).hexdigest()
    """
    return "\n".join([
        AWS4_HMAC_SHA256,
        format_amz_date(timestamp),
        credential_scope,
        sha256(canonical_request.encode("utf-8")).hexdigest()])

def derive_signing_key(secret_key, datestamp, region, service):
    """
    derive_signing_key(secret_key, datestamp, region, service) -> bytes

    Derive the SigV4 signing key through the HMAC-SHA256 chain
    secret -> date -> region -> service -> aws4_request.
    """
    k_secret = b"AWS4" + secret_key.encode("utf-8")
    k_date = hmac.new(k_secret, datestamp.encode("utf-8"), sha256).digest()
    k_region = hmac.new(k_date, region.encode("utf-8"), sha256).digest()
    k_service = hmac.new(k_region, service.encode("utf-8"), sha256).digest()
    return hmac.new(k_service, AWS4_REQUEST.encode("utf-8"), sha256).digest()

def compute_signature(signing_key, string_to_sign):
    """
    compute_signature(signing_key, string_to_sign) -> str

    The hex-encoded HMAC-SHA256 of the string to sign.
    """
    return hmac.new(signing_key, string_to_sign.encode("utf-8"),
                    sha256).hexdigest()

def clamp_expires(expires_in):
    """
    clamp_expires(expires_in) -> int

    The presigned URL lifetime to use: MAX_EXPIRES if expires_in is None,
    otherwise expires_in clamped to [MIN_EXPIRES, MAX_EXPIRES]. Values out
    of range are clamped rather than rejected.
    """
    if expires_in is None:
        return MAX_EXPIRES

    return max(MIN_EXPIRES, min(MAX_EXPIRES, int(expires_in)))

def _escape_query_component(value):
    return url_quote(unquote_to_bytes(value.replace("+", " ")),
                     safe=_unreserved)

def _first_header(request, name):
    """
    The first value of the named header (stripped), or None.
    """
    values = request.headers.getlist(name)
    if not values:
        return None
    return values[0].strip()

def _required_host(request):
    host = request.host
    if host is None:
        raise InvalidRequestError(
            "Cannot determine the host of %r; an absolute URI or a Host "
            "header is required" % (request.uri,))
    return host

def _with_host_header(request):
    """
    Return request if it has a Host header, otherwise a copy with a Host
    header built from its URI.
    """
    if _first_header(request, _host):
        return request

    request = request.copy()
    request.headers[_host] = _required_host(request)
    return request

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
