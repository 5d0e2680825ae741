"""
Client storage port.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from ..errors import ServerError
from ..models import Client, User


class ClientService(ABC):
    """Retrieves registered clients."""

    @abstractmethod
    async def get(self, client_id: str) -> Optional[Client]:
        """Retrieve a client."""
        pass

    @abstractmethod
    async def get_authenticated(
        self,
        client_id: str,
        client_secret: Optional[str] = None,
    ) -> Optional[Client]:
        """
        Retrieve a client if the credentials are valid.

        A client authenticating without a secret is a public client; return
        ``None`` when the client is required to present one.
        """
        pass

    async def get_user(self, client: Union[Client, str]) -> Optional[User]:
        """Retrieve the user a client acts as in the client credentials grant."""
        raise ServerError("client_service.get_user not implemented")
