from fastapi import Response
from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware as StarletteCORSMiddleware

# Set again by Response for the empty body
_BODY_HEADERS = ("content-length", "content-type")


class CORSMiddleware(StarletteCORSMiddleware):
    """
    Starlette's CORS middleware, except that an accepted preflight is
    answered with an empty 200 like any other OPTIONS request to the
    functions.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response

        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in _BODY_HEADERS
        }
        return Response(status_code=response.status_code, headers=headers)
