class EncodeError(Exception):
    """Base class for everything that can go wrong while encoding."""


class TopLevelShapeError(EncodeError):
    def __init__(self):
        super().__init__("top-level serializer supports only structs")


class UnsupportedValueKindError(EncodeError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"unsupported value type: {kind}")


class InvalidUtf8Error(EncodeError):
    def __init__(self, err: UnicodeDecodeError):
        self.start = err.start
        self.end = err.end
        self.reason = err.reason
        super().__init__(
            f"invalid UTF-8: {err.reason} at byte {err.start}"
        )


class CustomError(EncodeError):
    def __init__(self, message: str):
        super().__init__(message)


class SinkFinishedError(Exception):
    def __init__(self):
        super().__init__("form sink already finished")
