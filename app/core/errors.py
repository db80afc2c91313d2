from typing import Dict, List, Optional


class DirectoryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DirectoryError):
    """Referenced building, activity or organization does not exist."""
    status_code = 404


class BadRequestError(DirectoryError):
    """Input is well-formed but not enough to run the query."""
    status_code = 400


class ValidationError(DirectoryError):
    """Malformed or missing input, reported per field."""
    status_code = 422

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        if message is None:
            # как в laravel: первое сообщение идет в message
            message = next(
                (msgs[0] for msgs in errors.values() if msgs),
                "The given data was invalid.",
            )
        super().__init__(message)
        self.errors = errors
