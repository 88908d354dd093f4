import logging

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from scoped_query.core.security import JWTError, decode_jwt

bearer = HTTPBearer(auto_error=False)
_LOG = logging.getLogger(__name__)


def get_current_principal(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict | None:
    # Missing or broken tokens yield no principal; the scope resolver rejects it with 401.
    if not creds:
        return None
    try:
        return decode_jwt(creds.credentials)
    except JWTError:
        _LOG.info("rejected bearer token", exc_info=True)
        return None
