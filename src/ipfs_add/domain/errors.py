class IpfsAddError(Exception):
    """Base exception for domain-specific errors."""


class GatewayError(IpfsAddError):
    """
    An error reported by the IPFS gateway itself (as opposed to the transport).

    Renders as ``"{command}: {code}: {message}"``; the command and code
    segments are left out when empty.
    """

    def __init__(self, command: str = "", message: str = "", code: int = 0) -> None:
        self.command = command
        self.message = message
        self.code = code
        super().__init__(str(self))

    def __str__(self) -> str:
        out = ""
        if self.command:
            out = f"{self.command}: "
        if self.code:
            out = f"{out}{self.code}: "
        return out + self.message

    def __repr__(self) -> str:
        return (
            f"GatewayError(command={self.command!r}, "
            f"message={self.message!r}, code={self.code!r})"
        )


class CidFormatError(IpfsAddError, ValueError):
    """A content identifier JSON blob that does not follow the {"/": ...} form."""


class ResponseDecodeError(IpfsAddError, ValueError):
    """A successful gateway response whose fields have an unexpected shape."""


class OperationCancelled(IpfsAddError):
    """The caller's cancellation event was set while work was still pending."""
