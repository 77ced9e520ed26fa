from markupsafe import Markup, escape

from protectionpro.schemas.site_options import FieldType, OptionField


def render_field_control(field: OptionField, value: str) -> Markup:
    """Admin form control for an option, pre-filled with its current value.

    The value is always escaped here, rich text included: the browser decodes
    it back inside the textarea so the stored text round-trips unchanged.
    """
    key = escape(field.key)
    if field.type is FieldType.RICH_TEXT:
        return Markup(
            '<textarea id="{key}" name="{key}" rows="10" cols="50" '
            'class="large-text code">{value}</textarea>'
            '<br /><span class="description">{desc}</span>'
        ).format(key=key, value=value or "", desc=field.description)

    control = Markup(
        '<input class="regular-text {css}" type="text" id="{key}" name="{key}" value="{value}" />'
    ).format(css=field.css_class, key=key, value=value or "")
    if field.description:
        control += Markup('<br /><span class="description">{desc}</span>').format(
            desc=field.description
        )
    return control
