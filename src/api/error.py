from fastapi import status
from src.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


# Business error codes that are the client's fault; anything else is a 500
CLIENT_ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_TELEGRAM_AUTH": status.HTTP_401_UNAUTHORIZED,
    "AUTH_DATA_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_REVOKED": status.HTTP_401_UNAUTHORIZED,
    "WRONG_TOKEN_TYPE": status.HTTP_401_UNAUTHORIZED,
    "DEVICE_MISMATCH": status.HTTP_401_UNAUTHORIZED,
    "USER_BANNED": status.HTTP_403_FORBIDDEN,
    "SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
}


def raise_for_error(error: Error) -> None:
    """Translate a use case Error into the matching HTTP exception"""
    status_code = CLIENT_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
