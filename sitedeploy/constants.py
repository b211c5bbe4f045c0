"""
sitedeploy Constants

Centralized constants for defaults, environment variables and messages.
"""

# Default SSH Configuration
DEFAULT_SSH_USER = "root"
DEFAULT_SSH_PORT = 22
DEFAULT_SSH_KEY_PATH = "~/.ssh/id_rsa"

# Default Remote Paths
DEFAULT_REMOTE_PATH = "/var/www/nomasdesinformacion"
DEFAULT_BACKUP_PATH = "/var/www/nomasdesinformacion-backups"

# rsync Configuration
DEFAULT_EXCLUDE_PATTERNS = [".git", "node_modules", ".env", "*.log", ".DS_Store"]
RSYNC_BASE_FLAGS = ["-avz", "--delete"]

# Safety Settings
DEFAULT_MAX_BACKUPS = 5
DEFAULT_REQUIRE_CONFIRMATION = True

# Local Layout
CONFIG_FILENAME = "deploy-config.json"
ENV_FILENAME = ".env"
LOCAL_SOURCE_DIRNAME = "public"
LOGS_DIRNAME = "logs"

# Backups
BACKUP_PREFIX = "backup-"
ROLLBACK_TMP_SUFFIX = ".rollback-tmp"
ROLLBACK_OLD_SUFFIX = ".rollback-old"

# Environment variables that seed the defaults (config key -> variable)
ENV_VARS = {
    "host": "DEPLOY_HOST",
    "user": "DEPLOY_USER",
    "port": "DEPLOY_PORT",
    "key_path": "DEPLOY_KEY_PATH",
    "remote_path": "DEPLOY_REMOTE_PATH",
    "backup_path": "DEPLOY_BACKUP_PATH",
}

# Keys written by the old JavaScript deploy script
LEGACY_KEY_ALIASES = {
    "keyPath": "key_path",
    "remotePath": "remote_path",
    "backupPath": "backup_path",
    "exclude": "exclude_patterns",
    "maxBackups": "max_backups",
    "requireConfirmation": "require_confirmation",
}

# Log Configuration
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"

# Error Messages
ERROR_NOT_CONFIGURED = "Deployment not configured"
ERROR_LOCAL_PATH_MISSING = "Local path not found: {path}"
ERROR_NO_BACKUPS = "No backups available for rollback"
ERROR_BACKUP_NOT_FOUND = "Backup not found: {name}"

# Hints
ROLLBACK_COMMAND = "sitedeploy --rollback"
HINT_CONFIGURE = "Run: sitedeploy --config"
HINT_ROLLBACK = f"Consider rolling back: {ROLLBACK_COMMAND}"
