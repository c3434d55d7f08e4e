# lm_core/common/middleware.py
from __future__ import annotations

import re

from django.utils.deprecation import MiddlewareMixin

from lm_core.common.api.exceptions import ensure_request_id

REQUEST_ID_HEADER = "X-Request-Id"
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (client supplied X-Request-Id if sane, else a new uuid)
    and echoes it back on the response so error envelopes and logs can be correlated.
    """

    META_KEY = "HTTP_X_REQUEST_ID"

    def process_request(self, request):
        incoming = request.META.get(self.META_KEY, "")
        if incoming and _VALID_REQUEST_ID.match(incoming):
            request.request_id = incoming
        ensure_request_id(request)

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[REQUEST_ID_HEADER] = rid
        return response
