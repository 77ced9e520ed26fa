"""Language selection and per-language copy.

A non-default language is selected with a URL prefix (``/it/faq``). The
middleware strips the prefix before routing and stores the language code on
``request.state.locale``.
"""
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from protectionpro.config import settings

LANGUAGE_NAMES = {
    "en": "English",
    "it": "Italiano",
    "es": "Español",
    "de": "Deutsch",
    "fr": "Français",
    "nl": "Nederlands",
    "ja": "日本語",
    "th": "ไทย",
    "pt-pt": "Português",
    "he": "עברית",
    "zh-hans": "简体中文",
    "zh-hant": "繁體中文",
}

RTL_LANGUAGES = {"he"}

CHOOSE_LANGUAGE = {
    "en": "Choose Language",
    "it": "Scegli la lingua",
    "es": "Elige lengua",
}

REPORTS_LOGIN = {
    "en": "Reports Login",
    "it": "Login Statistiche",
    "es": "Login Reportes",
}

# Embedded form ids, per language
CONTACT_FORM_ID = 1
DISTRIBUTOR_FORM_IDS = {"en": 2, "it": 4, "es": 6}
TRANSLATION_CONTACT_FORM_IDS = {
    "zh-hans": 8,
    "fr": 9,
    "de": 10,
    "ja": 11,
    "nl": 12,
    "zh-hant": 13,
    "he": 14,
    "pt-pt": 15,
    "th": 16,
}

# 404 copy for languages that do not use the Site Essentials text
NOT_FOUND_COPY = {
    "it": {
        "title": "Pagina non trovata",
        "body": (
            "Siamo spiacenti ma qualcosa è andato storto. Controlla l'URL e "
            "ricomincia dalla casella di ricerca, oppure usa il link qui sotto "
            "per tornare alla nostra home page."
        ),
        "buttons": [
            ("", "Vai alla pagina iniziale"),
            ("/distributore", "Diventa un Distributore"),
            ("/domande-frequenti/", "Domande Frequenti"),
        ],
    },
}

NOT_FOUND_PATHS = ["", "/distributor", "/faq"]

SUCCESS_PAGES = {
    "consumer-success",
    "thank-you-distributor",
    "distributor-success",
    "retailer-success",
    "success",
}


def split_locale(path: str) -> tuple[str, str]:
    """Split ``/it/faq`` into ``("it", "/faq")``.

    Paths without an enabled non-default language prefix belong to the default
    language and are returned unchanged.
    """
    parts = path.lstrip("/").split("/", 1)
    code = parts[0]
    if code and code != settings.default_language and code in settings.languages:
        rest = parts[1] if len(parts) > 1 else ""
        return code, "/" + rest
    return settings.default_language, path


def site_url(path: str = "", locale: Optional[str] = None) -> str:
    """Site-relative URL of ``path`` in ``locale``."""
    locale = locale or settings.default_language
    path = path if not path or path.startswith("/") else "/" + path
    if locale == settings.default_language:
        return path or "/"
    return f"/{locale}{path}"


def body_language_class(locale: str) -> str:
    return locale if locale in ("es", "it") else "en"


def localized(table: dict[str, str], locale: str) -> str:
    return table.get(locale, table[settings.default_language])


def form_embed(form_id: Optional[int]) -> str:
    if form_id is None:
        return ""
    return f'<div class="ninja-form" data-form-id="{form_id}"></div>'


def get_locale(request: Request) -> str:
    return getattr(request.state, "locale", settings.default_language)


class LocaleMiddleware(BaseHTTPMiddleware):
    """Strip the language prefix from the path and remember the language."""

    async def dispatch(self, request, call_next):
        locale, path = split_locale(request.url.path)
        request.state.locale = locale
        if path != request.url.path:
            request.scope["path"] = path
            request.scope["raw_path"] = path.encode()
        return await call_next(request)
