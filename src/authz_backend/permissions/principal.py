from typing import Optional
from pydantic import BaseModel

from authz_backend.api.exceptions import UnauthorizedException


class Principal(BaseModel):
    """Authenticated identity attached to a request."""
    user_id: Optional[str] = None

    def get_user_id_or_throw(self) -> str:
        if self.user_id is None:
            raise UnauthorizedException()
        return self.user_id
