"""Exception types raised by the simulator."""


class HemosimError(Exception):
    """Base class for all simulator errors."""


class InvalidParameter(HemosimError, ValueError):
    """Raised when a parameter or run option is outside its valid domain."""


class InvalidInput(HemosimError, ValueError):
    """Raised when an input document or trace cannot be used (empty, malformed)."""


class NumericalInstability(HemosimError, ArithmeticError):
    """Raised when a state variable stops being finite during integration."""

    def __init__(self, step: int, variable: str, value: float):
        self.step = step
        self.variable = variable
        self.value = value
        super().__init__(f"{variable} became non-finite ({value!r}) at step {step}")
