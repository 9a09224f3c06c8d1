r"""HTTP status codes, including synthetic codes for local failures.

More info: https://en.wikipedia.org/wiki/List_of_HTTP_status_codes
"""

from __future__ import annotations

__all__ = ["HTTPStatusCode"]

from enum import IntEnum


class HTTPStatusCode(IntEnum):
    r"""HTTP status code of a response envelope.

    Negative members and ``UNKNOWN_STATUS`` are synthetic codes for
    failures detected before or instead of an HTTP exchange.

    Example:
        ```pycon
        >>> from netkit.status import HTTPStatusCode
        >>> HTTPStatusCode.from_code(404)
        <HTTPStatusCode.NOT_FOUND: 404>
        >>> HTTPStatusCode.from_code(299)
        <HTTPStatusCode.UNKNOWN_STATUS: 0>
        >>> HTTPStatusCode.NO_INTERNET.description
        'No internet connection to hosts.'

        ```
    """

    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101

    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFORMATION = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206

    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    UNUSED = 306
    TEMPORARY_REDIRECT = 307

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTHENTICATION_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    PAYLOAD_TOO_LARGE = 413
    REQUEST_URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    REQUESTED_RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505

    INVALID_URL = -1001
    COULD_NOT_PARSE_RESPONSE = -1002
    NO_INTERNET = -1003
    UNKNOWN_STATUS = 0

    @classmethod
    def from_code(cls, status_code: int) -> HTTPStatusCode:
        """Map an integer status code to a member.

        Args:
            status_code: The raw status code.

        Returns:
            The matching member, or ``UNKNOWN_STATUS`` if the code is not
            part of the table.
        """
        try:
            return cls(status_code)
        except ValueError:
            return cls.UNKNOWN_STATUS

    @property
    def is_success(self) -> bool:
        """``True`` for status codes in the 200-399 range."""
        return 200 <= self.value <= 399

    @property
    def description(self) -> str:
        """A short human readable description of the status code."""
        return _DESCRIPTIONS.get(self, "Unknown status code")


_DESCRIPTIONS: dict[HTTPStatusCode, str] = {
    HTTPStatusCode.CONTINUE: "The client should proceed to send the request body",
    HTTPStatusCode.SWITCHING_PROTOCOLS: "The server has agreed to switch protocols",
    HTTPStatusCode.OK: "Standard response for successful HTTP requests",
    HTTPStatusCode.CREATED: "The request has been fulfilled, resulting in the creation of a new resource",
    HTTPStatusCode.ACCEPTED: "The request has been accepted for processing, but the processing has not been completed",
    HTTPStatusCode.NON_AUTHORITATIVE_INFORMATION: "A transforming proxy returned a modified version of the origin's response",
    HTTPStatusCode.NO_CONTENT: "The server successfully processed the request and is not returning any content",
    HTTPStatusCode.RESET_CONTENT: "The server successfully processed the request and requires the requester to reset the document view",
    HTTPStatusCode.PARTIAL_CONTENT: "The server is delivering only part of the resource due to a range header",
    HTTPStatusCode.MULTIPLE_CHOICES: "Indicates multiple options for the resource from which the client may choose",
    HTTPStatusCode.MOVED_PERMANENTLY: "This and all future requests should be directed to the given URI",
    HTTPStatusCode.FOUND: "The resource was found under another URI",
    HTTPStatusCode.SEE_OTHER: "The response can be found under another URI using a GET method",
    HTTPStatusCode.NOT_MODIFIED: "The resource has not been modified since the version specified by the request headers",
    HTTPStatusCode.USE_PROXY: "The requested resource is available only through a proxy",
    HTTPStatusCode.UNUSED: "No longer used",
    HTTPStatusCode.TEMPORARY_REDIRECT: "The request should be repeated with another URI",
    HTTPStatusCode.BAD_REQUEST: "The server cannot or will not process the request due to an apparent client error",
    HTTPStatusCode.UNAUTHORIZED: "Authentication is required and has failed or has not yet been provided",
    HTTPStatusCode.PAYMENT_REQUIRED: "Reserved for future use",
    HTTPStatusCode.FORBIDDEN: "The request was valid, but the server is refusing to respond to it",
    HTTPStatusCode.NOT_FOUND: "The requested resource could not be found",
    HTTPStatusCode.METHOD_NOT_ALLOWED: "The request method is not supported for the requested resource",
    HTTPStatusCode.NOT_ACCEPTABLE: "The resource cannot generate content acceptable according to the Accept headers",
    HTTPStatusCode.PROXY_AUTHENTICATION_REQUIRED: "The client must first authenticate itself with the proxy",
    HTTPStatusCode.REQUEST_TIMEOUT: "The server timed out waiting for the request",
    HTTPStatusCode.CONFLICT: "The request could not be processed because of a conflict in the request",
    HTTPStatusCode.GONE: "The resource requested is no longer available and will not be available again",
    HTTPStatusCode.LENGTH_REQUIRED: "The request did not specify the length of its content",
    HTTPStatusCode.PRECONDITION_FAILED: "The server does not meet one of the preconditions of the request",
    HTTPStatusCode.PAYLOAD_TOO_LARGE: "The request is larger than the server is willing or able to process",
    HTTPStatusCode.REQUEST_URI_TOO_LONG: "The URI provided was too long for the server to process",
    HTTPStatusCode.UNSUPPORTED_MEDIA_TYPE: "The request entity has a media type which the server does not support",
    HTTPStatusCode.REQUESTED_RANGE_NOT_SATISFIABLE: "The server cannot supply the requested portion of the file",
    HTTPStatusCode.EXPECTATION_FAILED: "The server cannot meet the requirements of the Expect request-header field",
    HTTPStatusCode.INTERNAL_SERVER_ERROR: "An unexpected condition was encountered on the server",
    HTTPStatusCode.NOT_IMPLEMENTED: "The server does not recognize the request method or lacks the ability to fulfill it",
    HTTPStatusCode.BAD_GATEWAY: "The gateway received an invalid response from the upstream server",
    HTTPStatusCode.SERVICE_UNAVAILABLE: "The server is currently unavailable",
    HTTPStatusCode.GATEWAY_TIMEOUT: "The gateway did not receive a timely response from the upstream server",
    HTTPStatusCode.HTTP_VERSION_NOT_SUPPORTED: "The server does not support the HTTP protocol version used in the request",
    HTTPStatusCode.INVALID_URL: "Invalid url",
    HTTPStatusCode.COULD_NOT_PARSE_RESPONSE: "Could not parse response",
    HTTPStatusCode.NO_INTERNET: "No internet connection to hosts.",
}
