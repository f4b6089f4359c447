"""Core constants: query cache key names and shared literal values.

Single source of truth for cache key structure (DRY). Logical query names
double as the prefixes the realtime invalidator targets.
"""

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Logical query names (first component of every query cache key)
QUERY_CAROUSEL_SLIDES = "carousel-slides"
QUERY_PUBLISHED_CATEGORIES = "published-categories"
QUERY_HOME_PAGE_SECTIONS = "home-page-sections"
QUERY_PAGES = "pages"
QUERY_MENU_ITEMS = "menu-items"
QUERY_NAVBAR_CONFIG = "navbar-config"
QUERY_TENANT_LIMITS = "tenant-limits"
QUERY_PLAN_FEATURES = "tenant-plan-features"
QUERY_SITE_CONFIG = "tenant-site-config"
QUERY_PROFILE_THEME = "profile-theme"
QUERY_ADMIN_USERS = "admin-users"

# Record store tables
TABLE_TENANTS = "tenants"
TABLE_TENANT_DOMAINS = "tenant_domains"
TABLE_TENANT_LIMITS = "tenant_limits"
TABLE_PRODUCTS = "products"
TABLE_PAGES = "pages"
TABLE_CAROUSEL_SLIDES = "carousel_slides"
TABLE_CATEGORIES = "categories"
TABLE_MENU_ITEMS = "menu_items"
TABLE_NAVBAR_CONFIG = "navbar_config"
TABLE_PROFILES = "profiles"
TABLE_PUBLIC_SHOP_INFO = "public_shop_info"

# Page slug holding the composed home page sections
HOME_PAGE_SLUG = "home"

# Change channel names
CHANGE_CHANNEL_PREFIX = "cms_changes"
TENANT_CHANNEL_PREFIX = "tenant-cms"
