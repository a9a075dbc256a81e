class RankwiseError(Exception):
    """Base class for errors raised by the scoring and estimation core."""


class DataUnavailable(RankwiseError):
    """No calibration data could be loaded for an exam category."""

    def __init__(self, category: str, reason: str = "no calibration rows"):
        self.category = category
        self.reason = reason
        super().__init__(f"calibration data unavailable for '{category}': {reason}")


class InvalidInput(RankwiseError, ValueError):
    pass


class UnknownCategory(InvalidInput):

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"no candidate pool size configured for '{category}'")
