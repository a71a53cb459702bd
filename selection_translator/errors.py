
class TranslatorError(Exception):
    """Base class for every failure reported by the translator core."""


class ParseError(TranslatorError, ValueError):
    """A shortcut string could not be parsed."""

    def __init__(self, token, message=None):
        self.token = token
        super().__init__(message or f"Unrecognized shortcut token: '{token}'")


class TransportError(TranslatorError):
    """Network failure or timeout while talking to a backend."""


class HttpStatusError(TranslatorError):
    """A backend answered with a non-2xx status."""

    def __init__(self, status_code, body=""):
        self.status_code = status_code
        self.body = body
        detail = f": {body}" if body else ""
        super().__init__(f"API error {status_code}{detail}")


class RegistrationError(TranslatorError):
    """The OS hotkey facility refused a shortcut."""

    def __init__(self, spec, reason=""):
        self.spec = spec
        self.reason = reason
        message = f"Could not register shortcut '{spec}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
