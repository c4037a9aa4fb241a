# Security module
from housekeeping.security.auth import (
    create_access_token, decode_token, get_current_actor,
    require_role, require_manager, require_housekeeper, require_any_role
)

__all__ = [
    'create_access_token', 'decode_token', 'get_current_actor',
    'require_role', 'require_manager', 'require_housekeeper', 'require_any_role'
]
