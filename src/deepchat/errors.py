"""Exception hierarchy for deepchat.

Configuration errors are fatal and stop the program before any network
activity. API errors are reported per turn and never end the session.
"""


class DeepChatError(Exception):
    """Base class for all deepchat errors."""


class ConfigError(DeepChatError):
    """Missing or invalid configuration value."""


class CommandError(DeepChatError):
    """Unknown command name passed to the dispatcher."""


class ApiError(DeepChatError):
    """Base class for failures talking to the chat-completion API.

    Attributes:
        hint: Short suggestion shown to the user alongside the error
        status_code: HTTP status when the failure came from a response
    """

    hint: str = "Please try again."

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(ApiError):
    hint = "Please check your DEEPSEEK_API_KEY in the environment or .env file."


class RateLimitedError(ApiError):
    hint = "Rate limit exceeded. Please wait a moment before trying again."


class ServerError(ApiError):
    hint = "The API server reported an error. Try again shortly."


class RequestRejectedError(ApiError):
    hint = "The API rejected the request. Check the model name and settings."


class NetworkError(ApiError):
    hint = "Please check your internet connection and try again."


class ApiTimeoutError(ApiError):
    hint = "The request timed out. Try again or raise TIMEOUT."


class MalformedResponseError(ApiError):
    hint = "The API returned an unexpected response."
