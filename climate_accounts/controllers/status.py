"""Service health."""

from ..services.session_store import SessionCache
from ..services.users import UserStore
from .util import ResponseData


def service_status(users: UserStore, cache: SessionCache) -> ResponseData:
    """Probe the user store and the session cache."""
    store_ok = users.supervisor.is_available()
    cache_ok = cache.supervisor.is_available()
    data = {
        'store': {'available': store_ok,
                  'state': users.supervisor.state.value},
        'cache': {'available': cache_ok,
                  'state': cache.supervisor.state.value},
    }
    return data, 200 if store_ok and cache_ok else 503, {}
