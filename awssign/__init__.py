#!/usr/bin/env python
"""
AWS signature (SigV4) request signing.
"""

from .exc import InvalidDateError, InvalidRequestError, SigningError
from .request import Request
from .sigv4 import AWSSigV4Signer, AWS4_HMAC_SHA256, UNSIGNED_PAYLOAD

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
