"""Backend endpoint paths and client defaults."""

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_SECONDS = 10

API_ENDPOINTS = {
    "LOCATIONS": "/api/v1/locations",
    "AUTH": {
        "GOOGLE_LOGIN": "/api/v1/auth/google/login",
        "GOOGLE_LOGIN_CODE": "/api/v1/auth/google/login/code",
        "LOGOUT": "/api/v1/auth/logout",
        "USER_PROFILE": "/api/v1/users/self",
        "TOKEN_REFRESH": "/api/v1/auth/token/refresh",
    },
    "STORES": "/api/v1/stores",
    "REPORTS": "/api/v1/reports",
}

TOKEN_REFRESH_PATH = API_ENDPOINTS["AUTH"]["TOKEN_REFRESH"]
LOGOUT_PATH = API_ENDPOINTS["AUTH"]["LOGOUT"]
USER_PROFILE_PATH = API_ENDPOINTS["AUTH"]["USER_PROFILE"]


def location_by_id(location_id: str) -> str:
    return f"{API_ENDPOINTS['LOCATIONS']}/{location_id}"


def report_by_id(report_id: str) -> str:
    return f"{API_ENDPOINTS['REPORTS']}/{report_id}"


__all__ = [
    "API_ENDPOINTS",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "LOGOUT_PATH",
    "TOKEN_REFRESH_PATH",
    "USER_PROFILE_PATH",
    "location_by_id",
    "report_by_id",
]
