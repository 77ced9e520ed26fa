"""Site Essentials options schema.

The options record is one flat mapping of string keys to string values. Every
key is declared here once, together with its section and the field type that
decides how the value is written into a page:

* ``TEXT`` values are escaped wherever they are rendered.
* ``RICH_TEXT`` values hold trusted snippets (tag manager, analytics, copy with
  markup). They are entity-decoded and written raw into the site.
* ``MARKUP`` values are single-line inputs holding trusted markup such as icon
  tags or a verification meta tag. They are written raw as well.

The admin form always escapes values into its controls, whatever the type.
"""
import enum
import html
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from markupsafe import Markup, escape

OPTION_NAME = "site_essentials"


class FieldType(str, enum.Enum):
    TEXT = "text"
    RICH_TEXT = "textarea"
    MARKUP = "markup"

    @property
    def is_raw(self) -> bool:
        return self is not FieldType.TEXT


@dataclass(frozen=True)
class OptionField:
    key: str
    label: str
    type: FieldType = FieldType.TEXT
    description: str = ""
    section: str = ""
    default: str = ""
    css_class: str = "css_class"


@dataclass
class OptionSection:
    id: str
    title: str
    fields: list[OptionField] = field(default_factory=list)


class OptionsRegistry:
    """Ordered declaration of option sections and their fields."""

    def __init__(self, option_name: str = OPTION_NAME):
        self.option_name = option_name
        self._sections: dict[str, OptionSection] = {}
        self._fields: dict[str, OptionField] = {}

    def add_section(self, section_id: str, title: str) -> OptionSection:
        if section_id in self._sections:
            raise ValueError(f"Section already registered: {section_id}")
        section = OptionSection(id=section_id, title=title)
        self._sections[section_id] = section
        return section

    def add_field(
        self,
        section_id: str,
        key: str,
        label: str,
        type: FieldType = FieldType.TEXT,
        description: str = "",
        default: str = "",
    ) -> OptionField:
        if section_id not in self._sections:
            raise ValueError(f"Unknown section: {section_id}")
        if key in self._fields:
            raise ValueError(f"Option already registered: {key}")
        option_field = OptionField(
            key=key,
            label=label,
            type=type,
            description=description,
            section=section_id,
            default=default,
        )
        self._sections[section_id].fields.append(option_field)
        self._fields[key] = option_field
        return option_field

    def sections(self) -> list[OptionSection]:
        return list(self._sections.values())

    def fields(self) -> list[OptionField]:
        return list(self._fields.values())

    def keys(self) -> list[str]:
        return list(self._fields)

    def field(self, key: str) -> Optional[OptionField]:
        return self._fields.get(key)

    def empty_record(self) -> dict[str, str]:
        return {f.key: f.default for f in self._fields.values()}

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        return len(self._fields)


def build_site_essentials_registry() -> OptionsRegistry:
    """Declare the Social Links, Google Scripts and 404 Page Text sections."""
    registry = OptionsRegistry()

    registry.add_section("social", "Social Links")
    registry.add_field(
        "social", "twitter_link", "Twitter",
        description="Twitter Link - Example: http://twitter.com/username",
    )
    registry.add_field(
        "social", "facebook_link", "Facebook",
        description="Facebook Link - Example: http://facebook.com/username",
    )
    registry.add_field(
        "social", "gplus_link", "Google+",
        description="Google+ Link - Example: http://plus.google.com/user_id",
    )
    registry.add_field(
        "social", "youtube_link", "Youtube",
        description="Youtube Link - Example: https://www.youtube.com/channel/channel_id",
    )
    registry.add_field(
        "social", "linkedin_link", "LinkedIn",
        description="LinkedIn Link - Example: http://linkedin.com/in/username",
    )

    registry.add_section("google", "Google Scripts")
    registry.add_field(
        "google", "webmaster_tools", "Webmaster Tools Verification",
        type=FieldType.MARKUP,
        description='Meta Tag - Example: <meta name="google-site-verification" content="...">',
    )
    registry.add_field(
        "google", "gtm_code_head", "Tag Manager Code (head)",
        type=FieldType.RICH_TEXT,
        description="Tag Manager Code <head>",
    )
    registry.add_field(
        "google", "gtm_code_body", "Tag Manager Code (body)",
        type=FieldType.RICH_TEXT,
        description="Tag Manager Code <body>",
    )
    registry.add_field(
        "google", "ga_code", "Google Analytics Code",
        type=FieldType.RICH_TEXT,
        description="Google Analytics Code",
    )

    registry.add_section("404", "404 Page Text")
    registry.add_field(
        "404", "404_title", "404 Title",
        description="404 Title - Example: Page Not Found",
    )
    registry.add_field(
        "404", "404_body", "404 Text",
        type=FieldType.RICH_TEXT,
        description="404 Paragraph Text",
    )
    for position, icon, text in (
        ("left", "fa-home", "Go To Homepage"),
        ("middle", "fa-question-circle", "Read FAQs"),
        ("right", "fa-cubes", "Become A Distributor"),
    ):
        title = position.capitalize()
        registry.add_field(
            "404", f"404_{position}_button_icon", f"{title} Button Icon",
            type=FieldType.MARKUP,
            description=(
                f"{title} Button Icon - Example: "
                f"<i class='fa {icon}' aria-hidden='true'></i>"
            ),
        )
        registry.add_field(
            "404", f"404_{position}_button_text", f"{title} Button Text",
            description=f"{title} Button Text - Example: {text}",
        )

    return registry


site_essentials = build_site_essentials_registry()


def coerce_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return ""


class SiteOptions(Mapping):
    """Read-only view of the options record handed to every renderer."""

    def __init__(
        self,
        values: Optional[Mapping[str, Any]] = None,
        registry: OptionsRegistry = site_essentials,
    ):
        self.registry = registry
        self._values = registry.empty_record()
        for key, value in (values or {}).items():
            if key in registry:
                self._values[key] = coerce_value(value)

    def get(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        return value if value else default

    def render(self, key: str) -> Markup:
        """Value ready for a template, escaped or raw per its field type."""
        option_field = self.registry.field(key)
        value = self.get(key)
        if option_field is None or not option_field.type.is_raw:
            return escape(value)
        if option_field.type is FieldType.RICH_TEXT:
            return Markup(html.unescape(value))
        return Markup(value)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __getitem__(self, key: str) -> str:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        filled = sorted(k for k, v in self._values.items() if v)
        return f"SiteOptions(filled={filled})"
