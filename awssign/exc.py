#!/usr/bin/env python
"""
AWS signing exceptions.
"""

class SigningError(Exception):
    """
    Base class for errors raised while signing a request.
    """
    pass

class InvalidDateError(SigningError, ValueError):
    """
    An exception indicating that a date supplied with the request could not
    be parsed as either an ISO 8601 or an RFC 1123 timestamp.
    """
    pass

class InvalidRequestError(SigningError, ValueError):
    """
    An exception indicating that the request lacks something required to
    sign it (for example, a host to build the Host header from).
    """
    pass

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
