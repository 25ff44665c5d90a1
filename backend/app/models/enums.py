from enum import Enum


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SUPPORT = "SUPPORT"


class ResponseStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"


class AuditAction(str, Enum):
    # User management
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"

    # Authentication
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    FAILED_LOGIN = "FAILED_LOGIN"
    PASSWORD_RESET = "PASSWORD_RESET"
    SEND_EMAIL = "SEND_EMAIL"
    VERIFY_EMAIL = "VERIFY_EMAIL"

    # Pair management
    CREATE_PAIR = "CREATE_PAIR"
    UPDATE_PAIR = "UPDATE_PAIR"
    DELETE_PAIR = "DELETE_PAIR"

    # Subscription management
    CREATE_SUBSCRIPTION = "CREATE_SUBSCRIPTION"
    UPDATE_SUBSCRIPTION = "UPDATE_SUBSCRIPTION"
    CANCEL_SUBSCRIPTION = "CANCEL_SUBSCRIPTION"

    # Payment management
    PROCESS_PAYMENT = "PROCESS_PAYMENT"
    REFUND_PAYMENT = "REFUND_PAYMENT"
    CREATE_PAYMENT = "CREATE_PAYMENT"
    UPDATE_PAYMENT = "UPDATE_PAYMENT"
    DELETE_PAYMENT = "DELETE_PAYMENT"

    # Email
    EMAIL_CREATED = "EMAIL_CREATED"
    EMAIL_UPDATED = "EMAIL_UPDATED"
    EMAIL_OPENED = "EMAIL_OPENED"
    EMAIL_CLICKED = "EMAIL_CLICKED"
    CAMPAIGN_CREATED = "CAMPAIGN_CREATED"

    # Notifications
    CREATE_NOTIFICATION = "CREATE_NOTIFICATION"
    UPDATE_NOTIFICATION = "UPDATE_NOTIFICATION"
    DELETE_NOTIFICATION = "DELETE_NOTIFICATION"

    # System administration
    SYSTEM_BACKUP = "SYSTEM_BACKUP"
    SYSTEM_RESTORE = "SYSTEM_RESTORE"
    CONFIG_UPDATE = "CONFIG_UPDATE"

    # Data management
    DATA_EXPORT = "DATA_EXPORT"
    DATA_IMPORT = "DATA_IMPORT"

    # Security
    ROLE_CHANGE = "ROLE_CHANGE"
    PERMISSION_CHANGE = "PERMISSION_CHANGE"


class AuditTargetType(str, Enum):
    USER = "USER"
    PAIR = "PAIR"
    SUBSCRIPTION = "SUBSCRIPTION"
    PAYMENT = "PAYMENT"
    SYSTEM = "SYSTEM"
    CONFIG = "CONFIG"
    EMAIL = "EMAIL"
    CAMPAIGN = "CAMPAIGN"
    NOTIFICATION = "NOTIFICATION"


class NotificationType(str, Enum):
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    SUBSCRIPTION_CONFIRMED = "SUBSCRIPTION_CONFIRMED"
    SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"
    RENEWAL_REMINDER = "RENEWAL_REMINDER"
    TRADINGVIEW_INVITE_SENT = "TRADINGVIEW_INVITE_SENT"
    TRADINGVIEW_INVITE_COMPLETED = "TRADINGVIEW_INVITE_COMPLETED"
    COMMISSION_EARNED = "COMMISSION_EARNED"
    PAYOUT_PROCESSED = "PAYOUT_PROCESSED"
    USER_REGISTRATION = "USER_REGISTRATION"
    ADMIN_ACTION_REQUIRED = "ADMIN_ACTION_REQUIRED"
    SECURITY_ALERT = "SECURITY_ALERT"
    SYSTEM_MAINTENANCE = "SYSTEM_MAINTENANCE"
    NEW_FEATURE_ANNOUNCEMENT = "NEW_FEATURE_ANNOUNCEMENT"
    GENERAL = "GENERAL"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TrackingKind(str, Enum):
    OPEN = "open"
    CLICK = "click"
