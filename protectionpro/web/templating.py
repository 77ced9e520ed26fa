from datetime import datetime, timezone
from pathlib import Path

from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from protectionpro.config import settings
from protectionpro.core.locale import (
    CHOOSE_LANGUAGE,
    LANGUAGE_NAMES,
    REPORTS_LOGIN,
    RTL_LANGUAGES,
    body_language_class,
    form_embed,
    localized,
    site_url,
)
from protectionpro.services.content import HEAD_TAGS, strip_tags, trim_words
from protectionpro.web.fields import render_field_control

templates_path = Path(__file__).parent.parent.parent / "templates"
templates = Jinja2Templates(directory=templates_path)

env = templates.env
env.globals.update(
    app_name=settings.app_name,
    site_url=site_url,
    language_names=LANGUAGE_NAMES,
    rtl_languages=RTL_LANGUAGES,
    choose_language=lambda locale: localized(CHOOSE_LANGUAGE, locale),
    reports_login=lambda locale: localized(REPORTS_LOGIN, locale),
    body_language_class=body_language_class,
    form_embed=lambda form_id: Markup(form_embed(form_id)),
    render_field_control=render_field_control,
    current_year=lambda: datetime.now(timezone.utc).year,
)
env.filters["trim_words"] = trim_words
env.filters["head_tags"] = lambda value: Markup(strip_tags(value, HEAD_TAGS))
