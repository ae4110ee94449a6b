"""Step-tagged errors raised inside the citizen sync pipeline.

Each error knows the pipeline step it belongs to and the HTTP status the API
reports it with. The orchestrator catches them at the step boundary and turns
them into a PipelineFailure; they never reach the route layer.
"""

from typing import Literal

Step = Literal["input", "validate", "deproc", "notify", "persist", "db"]

# Upstream bodies are cut to this many characters before being echoed back.
DETAIL_LIMIT = 800


def truncate_detail(text: str | None) -> str:
    return (text or "")[:DETAIL_LIMIT]


class PipelineError(Exception):
    """Base class. Subclasses fix the HTTP status; callers fix the step."""

    http_status = 500

    def __init__(self, step: Step, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.step = step
        self.message = message
        self.detail = truncate_detail(detail) if detail is not None else None


class InputValidationError(PipelineError):
    """Malformed or missing request fields. Client fault."""

    http_status = 400

    def __init__(self, message: str) -> None:
        super().__init__("input", message)


class ConfigurationError(PipelineError):
    """Missing gateway credentials. Operator fault, reported under the db step."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__("db", message)


class UpstreamTransportError(PipelineError):
    """Non-2xx status, transport failure, or unusable body from the gateway."""

    http_status = 502


class UpstreamShapeError(PipelineError):
    """Deproc answered but carried no recognisable citizen record.

    Reported at a success status: the request was fine, there was just
    nothing to show.
    """

    http_status = 200

    def __init__(self, message: str) -> None:
        super().__init__("deproc", message)


class PersistenceError(PipelineError):
    """Storing the profile failed."""

    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__("persist", message)
