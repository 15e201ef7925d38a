"""xcurl errors - every user-facing failure is an XcurlError."""


class XcurlError(Exception):
    """Base class for errors reported as a single ERROR line by the CLI."""


class InvalidParameter(XcurlError):
    pass


class InvalidUrl(XcurlError):
    pass


class UnsupportedEncoding(XcurlError):
    """No body encoder exists for the negotiated request content type."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"unsupported body encoding: {content_type}")


class MalformedBody(XcurlError):
    pass


class TransportError(XcurlError):
    pass


class RenderError(XcurlError):
    pass


class ConfigError(XcurlError):
    pass
