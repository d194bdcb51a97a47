"""Exceptions raised across Mockup Studio.

Panels and stages catch these at the call site and surface ``str(exc)``
next to the control that triggered the request; nothing here is fatal.
"""


class MockupStudioError(Exception):
    """Base exception for Mockup Studio."""


class InvalidImageError(MockupStudioError):
    """A user-supplied file is not a usable image. Raised before any network call."""


class InvalidCharacteristicError(MockupStudioError):
    """A model characteristic was set to a value outside its option set."""
    
    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"'{value}' is not a valid option for {name}.")


class FlowTransitionError(MockupStudioError):
    """The flow controller was asked for a screen change it cannot make."""


class GatewayError(MockupStudioError):
    """The Gemini gateway failed or returned no usable payload."""


class ModelDeclinedError(GatewayError):
    """The model answered with text where an image was expected."""
    
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Model Error: {text}")


class CredentialError(GatewayError):
    """The selected API key is missing or was rejected by the API."""
