"""
deskrag exceptions.
"""


class DeskRagError(Exception):
    """Base exception for deskrag errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ModelServiceError(DeskRagError):
    """Raised when a call to the model service fails."""


class ServiceConnectionError(ModelServiceError):
    """Raised when the model service cannot be reached."""

    def __init__(self, url: str, reason: str = "connection failed"):
        self.url = url
        super().__init__(f"Cannot reach model service at {url}: {reason}")


class ServiceStatusError(ModelServiceError):
    """Raised when the model service answers with a non-success status."""

    def __init__(self, url: str, status_code: int, body: str = ""):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Model service error {status_code} calling {url}: {body}")


class MalformedResponseError(ModelServiceError):
    """Raised when a model service response cannot be parsed."""

    def __init__(self, message: str = "Malformed response from model service"):
        super().__init__(message)


class EmptyEmbeddingError(ModelServiceError):
    """Raised when the model service returns an empty embedding vector."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Received empty embedding from model '{model}'")


class VectorDimensionError(DeskRagError, ValueError):
    """Raised when two vectors cannot be compared."""


class DirectoryReadError(DeskRagError):
    """Raised when the document directory itself cannot be read."""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        super().__init__(f"error reading directory {directory}: {reason}")


class StoreLockError(DeskRagError):
    """Raised when the vector store is written outside its exclusive section."""

    def __init__(self, message: str = "Vector store writes require exclusive access"):
        super().__init__(message)
