"""
Tenancy configuration constants.

The root-domain and reserved-name lists here are only fallbacks; the running
service reads them from Settings (STOREFRONT_ROOT_DOMAINS and
STOREFRONT_RESERVED_SUBDOMAINS) so adding a domain never touches code.

Default theme and header/footer values match the column defaults of a freshly
created store, so a store with missing configuration renders exactly like a
brand new one.
"""

# ────────────────────────────────────────────────────────────────
# Host resolution
# ────────────────────────────────────────────────────────────────

DEFAULT_ROOT_DOMAINS: tuple[str, ...] = (
    "extendbee.com",
    "nepal-shop-nest.lovable.app",
)

DEFAULT_RESERVED_SUBDOMAINS: frozenset[str] = frozenset({
    "www",
    "app",
    "admin",
    "dashboard",
    "api",
    "mail",
    "smtp",
    "ftp",
    "cdn",
    "static",
    "assets",
    "dev",
    "staging",
    "test",
})

LOCAL_HOSTNAMES: frozenset[str] = frozenset({"localhost", "127.0.0.1"})

STORE_PATH_PREFIX = "/store"


# ────────────────────────────────────────────────────────────────
# Configuration defaults
# ────────────────────────────────────────────────────────────────

DEFAULT_THEME_COLORS: dict[str, str] = {
    "primary": "222 47% 31%",
    "secondary": "210 40% 96%",
    "accent": "217 91% 60%",
    "background": "0 0% 100%",
    "foreground": "222 47% 11%",
    "muted": "210 40% 96%",
    "mutedForeground": "215 16% 47%",
    "border": "214 32% 91%",
    "success": "142 76% 36%",
    "warning": "38 92% 50%",
    "error": "0 84% 60%",
}

DEFAULT_THEME_TYPOGRAPHY: dict[str, str] = {
    "headingFont": "Plus Jakarta Sans",
    "bodyFont": "Plus Jakarta Sans",
    "baseFontSize": "16px",
    "headingWeight": "700",
    "bodyWeight": "400",
}

DEFAULT_THEME_LAYOUT: dict[str, str] = {
    "containerMaxWidth": "1280px",
    "sectionPadding": "4rem",
    "borderRadius": "0.5rem",
    "buttonRadius": "0.375rem",
}

DEFAULT_HEADER_OPTIONS: dict = {
    "layout": "logo-center",
    "sticky": True,
    "showSearch": True,
    "showCart": True,
    "showAccount": False,
    "announcementBar": None,
    "backgroundColor": None,
    "textColor": None,
}

DEFAULT_FOOTER_OPTIONS: dict = {
    "layout": "multi-column",
    "columns": [],
    "showNewsletter": True,
    "showSocialLinks": True,
    "showPaymentIcons": True,
    "copyrightText": None,
    "backgroundColor": None,
    "textColor": None,
}

DEFAULT_SOCIAL_LINKS: dict = {
    "facebook": None,
    "instagram": None,
    "twitter": None,
    "youtube": None,
    "tiktok": None,
    "pinterest": None,
}
