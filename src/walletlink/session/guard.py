"""Authorization checks derived from session state."""

from walletlink.errors import InvalidParamsError, UnauthorizedError, UnknownAddressError
from walletlink.session.state import SessionState
from walletlink.utils.encoding import ensure_address_string


class AuthorizationGuard:
    """Gates privileged methods on the session's authorized accounts."""

    def __init__(self, session: SessionState):
        self._session = session

    def is_authorized(self) -> bool:
        return self._session.is_connected

    def require_authorization(self) -> None:
        """Raise UnauthorizedError unless at least one account is granted."""
        if not self.is_authorized():
            raise UnauthorizedError()

    def is_known_address(self, address: str) -> bool:
        try:
            canonical = ensure_address_string(address)
        except InvalidParamsError:
            return False
        return canonical in self._session.addresses

    def ensure_known_address(self, address: str) -> None:
        if not self.is_known_address(address):
            raise UnknownAddressError()
