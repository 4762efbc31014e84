class HvscError(Exception):
    """Base exception for hvsc."""


class ArchiveIOError(HvscError):
    """Raised when a HVSC text file cannot be opened or read."""

    def __init__(self, path: str, reason: str, lineno: int = 0):
        self.path = path
        self.reason = reason
        self.lineno = lineno
        where = f"{path}:{lineno}" if lineno else path
        super().__init__(f"I/O error on {where}: {reason}")


class TimestampError(HvscError):
    """Raised when text does not hold a valid ``M:SS`` timestamp."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid timestamp {text!r}: {reason}")


class InvalidFileError(HvscError):
    """Raised when a file is not a valid PSID/RSID file."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid SID file {path}: {reason}")


class PathError(HvscError):
    """Raised when a SID file path does not live below the HVSC root."""

    def __init__(self, path: str, root: str):
        self.path = path
        self.root = root
        super().__init__(f"{path} is not inside the HVSC root {root}")
