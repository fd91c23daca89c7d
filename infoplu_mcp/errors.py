from .client import ApiResponseError, ApiTransportError

API_NAME = "Géoportail de l'Urbanisme API"


def handle_api_error(error: BaseException) -> str:
    """
    Map any failure raised while serving a tool into a user-facing message.
    Never raises; the result is returned to the agent as a normal tool result.
    """
    if isinstance(error, ApiResponseError):
        status = error.status
        msg = error.message
        if status == 400:
            return f"Error: Invalid request parameters — {msg}. Check your input values and try again."
        if status == 404:
            return (
                "Error: Resource not found. The requested document or territory does not exist. "
                "Use a search tool to find valid IDs."
            )
        if status == 429:
            return "Error: Rate limit exceeded. Please wait a moment before making more requests."
        if status in (500, 502, 503):
            return f"Error: The {API_NAME} is temporarily unavailable (status {status}). Try again later."
        return f"Error: API request failed with status {status}. {msg}"

    if isinstance(error, ApiTransportError):
        if error.kind == "timeout":
            return "Error: Request timed out. The API is slow to respond — try again."
        if error.kind == "connection":
            return (
                f"Error: Cannot reach the {API_NAME}. Check your network connection "
                "or the INFOPLU_API_BASE_URL environment variable."
            )

    return f"Error: {error}"
