from .config import EngineConfig, LogLevel, get_config, load_config_from_env, set_config
from .exceptions import (
    BizcoreError,
    ConfigurationError,
    InvalidPermissionFormat,
    UnknownRoleError,
    fail_closed,
)
from .logging import (
    PermissionLogFormatter,
    PrincipalLoggerAdapter,
    get_principal_logger,
    safe_preview,
    setup_logging,
)
from .permissions import (
    CAPABILITY_ACTIONS,
    ROLE_DEFAULTS,
    ROLE_PERMISSION_TABLE,
    Actions,
    AuthorizationContext,
    CapabilityMap,
    EffectivePermissionSet,
    Modules,
    Permission,
    PermissionCache,
    PermissionKind,
    Permissions,
    Principal,
    Role,
    VisibilityScope,
    can_view_all,
    check_role_table,
    compute_effective,
    defaults_for,
    filter_authorized,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_authorized,
    is_valid,
    module_permissions,
    parse,
    parse_many,
    submodule_permissions,
    to_string,
)
from .service import AuthorizationRequest, AuthorizationResponse, PolicyEvaluationService

__version__ = "0.1.0"

__all__ = [
    'EngineConfig',
    'LogLevel',
    'get_config',
    'load_config_from_env',
    'set_config',
    'BizcoreError',
    'ConfigurationError',
    'InvalidPermissionFormat',
    'UnknownRoleError',
    'fail_closed',
    'PermissionLogFormatter',
    'PrincipalLoggerAdapter',
    'get_principal_logger',
    'safe_preview',
    'setup_logging',
    'CAPABILITY_ACTIONS',
    'ROLE_DEFAULTS',
    'ROLE_PERMISSION_TABLE',
    'Actions',
    'AuthorizationContext',
    'CapabilityMap',
    'EffectivePermissionSet',
    'Modules',
    'Permission',
    'PermissionCache',
    'PermissionKind',
    'Permissions',
    'Principal',
    'Role',
    'VisibilityScope',
    'can_view_all',
    'check_role_table',
    'compute_effective',
    'defaults_for',
    'filter_authorized',
    'has_all_permissions',
    'has_any_permission',
    'has_permission',
    'is_authorized',
    'is_valid',
    'module_permissions',
    'parse',
    'parse_many',
    'submodule_permissions',
    'to_string',
    'AuthorizationRequest',
    'AuthorizationResponse',
    'PolicyEvaluationService',
]
