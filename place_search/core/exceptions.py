class PlaceSearchError(Exception):
    """Base error of the search pipeline, carries its HTTP mapping."""

    status_code = 500
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidParameter(PlaceSearchError):
    status_code = 400
    code = "INVALID_PARAMETER"
    default_message = "Invalid parameter"


class UnsupportedSearchType(PlaceSearchError):
    status_code = 500
    code = "UNSUPPORTED_SEARCH_TYPE"
    default_message = "Unsupported search type"


class PlaceNotFound(PlaceSearchError):
    status_code = 404
    code = "PLACE_NOT_FOUND"
    default_message = "Place not found"


class UpstreamFailure(PlaceSearchError):
    status_code = 502
    code = "UPSTREAM_FAILURE"
    default_message = "Upstream service failure"

    def __init__(self, source: str, message: str = None):
        self.source = source
        super().__init__(message or f"{source} call failed")
