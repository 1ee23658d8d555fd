"""Constants shared across pymodelsync modules."""

#: Field used as primary key when a model does not configure one.
DEFAULT_PRIMARY_KEY = "id"

#: Default total timeout (seconds) for a single RESTful request.
DEFAULT_REST_TIMEOUT: float = 30.0

#: Query parameter names understood by json-server style APIs.
DEFAULT_SORT_PARAM = "_sort"
DEFAULT_ORDER_PARAM = "_order"
DEFAULT_LIMIT_PARAM = "_limit"

USER_AGENT = "pymodelsync/0.1 (+aiohttp)"
