class FlowError(Exception):
    """Base class for all errors raised by the solvers."""


class DomainError(FlowError, ValueError):
    """Non-physical geometric or hydraulic input (e.g. a non-positive depth)."""


class ConfigurationError(FlowError, ValueError):
    """A physically inapplicable setup, such as a zero bed slope for normal depth
    or a time step that violates the Courant condition.
    """


class ConvergenceError(FlowError, RuntimeError):
    """Raised when Newton-Raphson fails to converge.

    Args:
        message (str): Description of the failure.
        iterations (int): Number of iterations performed.
        last_value (float, optional): Last iterate. Defaults to None.
    """
    def __init__(self, message: str, iterations: int, last_value: float = None):
        super().__init__(message)
        self.iterations = iterations
        self.last_value = last_value


class DivergenceError(FlowError, RuntimeError):
    """Raised when a standard-step profile cannot be continued.

    Args:
        message (str): Description of the failure.
        step (int): Index of the step that failed.
        last_point (ProfilePoint): The last accepted profile point.
    """
    def __init__(self, message: str, step: int, last_point=None):
        super().__init__(message)
        self.step = step
        self.last_point = last_point


class StabilityError(FlowError, RuntimeError):
    """Raised when an explicit scheme produces a non-physical state.

    Args:
        message (str): Description of the failure.
        step (int): Time level that could not be computed.
        node (int): First offending spatial node.
        last_row (dict, optional): Flow, depth and area at the last committed time level.
    """
    def __init__(self, message: str, step: int, node: int = None, last_row: dict = None):
        super().__init__(message)
        self.step = step
        self.node = node
        self.last_row = last_row
