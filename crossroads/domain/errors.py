class CrossroadsError(Exception):
    """Base class for errors raised by the traffic domain."""


class UnknownDirectionError(CrossroadsError):
    def __init__(self, direction):
        self.direction = direction
        super().__init__(f"Invalid direction: {direction!r}")


class InvalidParameterError(CrossroadsError, ValueError):
    def __init__(self, name, value, reason):
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name} {value!r}: {reason}")
