"""
utils/constants.py

Purpose: Centralized static content

- Storage keys
- Route permission table and navigation entries
- Public and guarded paths
- User-facing messages

(Prevents hardcoding across the codebase)
"""

# ============================================================
# STORAGE KEYS
# ============================================================

IDENTITIES_STORAGE_KEY = "mockUsers"
COLLECTION_STORAGE_PREFIX = "mock_"


def collection_storage_key(collection: str) -> str:
    return f"{COLLECTION_STORAGE_PREFIX}{collection}"


# ============================================================
# ROLES & ROUTES
# ============================================================

ROLE_ADMIN = "admin"
ROLE_USER = "user"

# Route access by role
ROUTE_PERMISSIONS = {
    "/dashboard": (ROLE_ADMIN, ROLE_USER),
    "/dashboard/users": (ROLE_ADMIN,),
    "/dashboard/products": (ROLE_ADMIN,),
    "/dashboard/reports": (ROLE_ADMIN, ROLE_USER),
    "/dashboard/settings": (ROLE_ADMIN, ROLE_USER),
}

# Routes missing from the table are admin-only
DEFAULT_ROUTE_ROLES = (ROLE_ADMIN,)

NAVIGATION_ITEMS = (
    {"name": "Dashboard", "href": "/dashboard", "icon": "home"},
    {"name": "Users", "href": "/dashboard/users", "icon": "users"},
    {"name": "Products", "href": "/dashboard/products", "icon": "shopping-bag"},
    {"name": "Reports", "href": "/dashboard/reports", "icon": "chart-bar"},
    {"name": "Settings", "href": "/dashboard/settings", "icon": "cog"},
)

PUBLIC_PATHS = frozenset({"/", "/auth/login", "/auth/register"})

# Paths the route guard looks at; everything else passes straight through
GUARDED_EXACT_PATHS = frozenset({"/", "/dashboard", "/auth/login", "/auth/register"})
GUARDED_PREFIXES = ("/dashboard/",)

LOGIN_PATH = "/auth/login"
DASHBOARD_PATH = "/dashboard"


# ============================================================
# EXPORT
# ============================================================

USERS_EXPORT_FILENAME = "users-export.csv"
PRODUCTS_EXPORT_FILENAME = "products-export.csv"


# ============================================================
# SEED DATA
# ============================================================

PRODUCT_CATEGORIES = ("Electronics", "Clothing", "Home", "Books", "Food")

PRODUCT_DESCRIPTION = "Lorem ipsum dolor sit amet, consectetur adipiscing elit."


# ============================================================
# MESSAGES
# ============================================================

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists."
USER_NOT_FOUND_MESSAGE = "User not found."
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."
NOT_AUTHENTICATED_MESSAGE = "You must be logged in to view this page."
UNAUTHORIZED_MESSAGE = "You do not have permission to access this page."
NAME_REQUIRED_MESSAGE = "Name is required"
CURRENT_PASSWORD_REQUIRED_MESSAGE = "Current password is required"
CURRENT_PASSWORD_INCORRECT_MESSAGE = "Current password is incorrect"
