from typing import Any, Optional


class TypegenError(Exception):
    """Base class for every generator failure"""


class ShapeError(TypegenError):
    def __init__(self, message: str, kind: Optional[str] = None, path: Optional[str] = None):
        self.message = message
        self.kind = kind
        self.path = path
        location = ''
        if kind is not None:
            location += f"[{kind}] "
        if path is not None:
            location += f"{path}: "
        super().__init__(f"{location}{message}")


class InvalidAttributeError(TypegenError):
    def __init__(self, attribute: str, message: str, received: Any = None):
        self.attribute = attribute
        self.message = message
        self.received = received
        super().__init__(f"Attribute '{attribute}': {message} (received {received!r})")


class UnsupportedDispatcherError(TypegenError):
    def __init__(self, registry: str, message: str):
        self.registry = registry
        self.message = message
        super().__init__(f"Dispatcher '{registry}': {message}")


class DownloadError(TypegenError):
    def __init__(self, url: str, status: int):
        self.url = url
        self.status = status
        super().__init__(f"Failed to download {url} (status {status})")
