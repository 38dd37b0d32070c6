class AppStatusCode:
    # Generic
    OPERATION_SUCCESSFUL = "100"
    DATA_RETRIEVED_SUCCESSFULLY = "101"
    CREATED_SUCCESSFULLY = "102"
    UPDATED_SUCCESSFULLY = "103"
    DELETED_SUCCESSFULLY = "104"
    OPERATION_FAILED = "150"
    INVALID_INPUT = "151"
    REQUIRED_VALIDATION_ERROR = "152"
    NOT_FOUND = "153"
    DEPENDENCY_FAILURE = "154"

    # Authentication
    AUTHENTICATION_TOKEN_INVALID = "200"
    AUTHENTICATION_TOKEN_EXPIRED = "201"
    AUTHENTICATION_SESSION_TIMEOUT = "202"
    AUTHENTICATION_USER_INVALID = "203"
    AUTHENTICATION_USER_INACTIVE = "204"
    AUTHENTICATION_CREDENTIALS_INVALID = "205"
    AUTHENTICATION_UNAUTHORIZED_ACCESS = "206"

    # Users
    USER_USERNAME_IS_UNIQUE = "300"
    USER_EMAIL_IS_UNIQUE = "301"
    USER_HAS_ACTIVE_RESERVATIONS = "302"

    # Parking
    SPACE_NOT_AVAILABLE = "400"
    RESERVATION_PERIOD_INVALID = "401"
    RESERVATION_DOCUMENT_REQUIRED = "402"
    RESERVATION_STATUS_TRANSITION_INVALID = "403"
    DOCUMENT_INVALID = "404"
    DOCUMENT_STORAGE_FAILED = "405"
