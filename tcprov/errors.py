"""Error taxonomy for CI calls and provisioning steps."""


class CIError(RuntimeError):
    """Base for anything the CI client raises."""


class ServerError(CIError):
    def __init__(self, status_code: int, body: str, hint: str = "") -> None:
        self.status_code = status_code
        self.body = body
        message = f"HTTP {status_code}: {body}"
        if hint:
            message = f"{message}\n{hint}"
        super().__init__(message)


class NetworkError(CIError):
    pass


class FatalStepError(RuntimeError):
    """A critical resource could not be ensured; the run stops here."""

    def __init__(self, step: str, name: str, cause: Exception) -> None:
        self.step = step
        self.name = name
        super().__init__(f"{step}: {name} failed: {cause}")


class NonFatalStepError(RuntimeError):
    """A best-effort resource failed; recorded as a warning and skipped."""

    def __init__(self, step: str, name: str, cause: Exception) -> None:
        self.step = step
        self.name = name
        super().__init__(f"{name} already exists or could not be added: {cause}")
