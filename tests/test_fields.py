"""Tests for the admin form controls."""
from protectionpro.schemas.site_options import site_essentials
from protectionpro.web.fields import render_field_control


def test_text_input_escapes_value():
    field = site_essentials.field("404_title")
    html = str(render_field_control(field, '<b>Oops</b> & "friends"'))
    assert 'value="&lt;b&gt;Oops&lt;/b&gt; &amp; &#34;friends&#34;"' in html
    assert "<b>" not in html


def test_text_input_keeps_plain_url_unchanged():
    field = site_essentials.field("twitter_link")
    html = str(render_field_control(field, "http://twitter.com/example"))
    assert 'value="http://twitter.com/example"' in html
    assert 'name="twitter_link"' in html
    assert 'class="regular-text css_class"' in html


def test_textarea_escapes_value():
    field = site_essentials.field("gtm_code_head")
    html = str(render_field_control(field, "<script>gtm()</script>"))
    assert html.startswith('<textarea id="gtm_code_head" name="gtm_code_head"')
    assert "&lt;script&gt;gtm()&lt;/script&gt;</textarea>" in html


def test_description_is_escaped():
    field = site_essentials.field("webmaster_tools")
    html = str(render_field_control(field, ""))
    assert '&lt;meta name=' in html
    assert 'value=""' in html
