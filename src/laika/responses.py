"""JSON response class with an explicit charset.

Starlette only appends "; charset=utf-8" to text/* media types, and
clients of this API match the full header value.
"""

from fastapi.responses import JSONResponse


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"
