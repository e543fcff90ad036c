"""Broker error taxonomy.

Every error carries the HTTP status it maps to and the message shown to the
caller. The message is deliberately generic for authentication failures;
the real cause goes to the server log only.
"""


class BrokerError(Exception):
    status_code = 400
    public_message = "Bad request"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.public_message)
        self.detail = detail or self.public_message


# --- Validation ---

class MissingFieldsError(BrokerError):
    public_message = "email and password are required"


class MissingDeviceIdError(BrokerError):
    public_message = "deviceId is required"


class DuplicateEmailError(BrokerError):
    public_message = "Email is already registered"


# --- Authentication ---

class InvalidCredentialsError(BrokerError):
    public_message = "Invalid email or password"


class AuthenticationError(BrokerError):
    status_code = 401
    public_message = "Invalid or expired token"


class MissingTokenError(AuthenticationError):
    pass


class InvalidTokenError(AuthenticationError):
    pass


class ExpiredTokenError(AuthenticationError):
    pass


# --- State preconditions ---

class NoBoundDeviceError(BrokerError):
    public_message = "No device registered. Register a device first."


# --- External provider ---

class ProviderError(BrokerError):
    status_code = 500
    public_message = "Media session provider unavailable"
