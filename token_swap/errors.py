class FetchError(Exception):
    """Price feed could not be fetched or its body is not a list of observations."""


class CatalogNotReadyError(Exception):
    pass


class SameTokenSelectionError(ValueError):
    pass


class UnknownTokenError(LookupError):
    pass


class InvalidSlippageError(ValueError):
    pass


class SwapRejectedError(ValueError):
    pass


class SwapInProgressError(Exception):
    pass
