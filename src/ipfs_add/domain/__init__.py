from .cid import Cid, Link
from .errors import (
    CidFormatError,
    GatewayError,
    IpfsAddError,
    OperationCancelled,
    ResponseDecodeError,
)
from .results import AddResult, ObjectStat

__all__ = [
    "AddResult",
    "Cid",
    "CidFormatError",
    "GatewayError",
    "IpfsAddError",
    "Link",
    "ObjectStat",
    "OperationCancelled",
    "ResponseDecodeError",
]
