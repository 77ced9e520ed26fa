"""Tests for the public pages and their use of the options."""
from protectionpro.db.models.content import PostType
from protectionpro.services.site_options import SiteOptionsService


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_404_title_is_escaped(client, db):
    await SiteOptionsService(db).save({
        "404_title": "<b>Oops</b>",
        "404_body": "&lt;em&gt;Gone&lt;/em&gt;",
        "404_left_button_icon": "<i class='fa fa-home'></i>",
        "404_left_button_text": "Home & Away",
    })

    r = await client.get("/no-such-page")
    assert r.status_code == 404
    assert "&lt;b&gt;Oops&lt;/b&gt;" in r.text
    assert "<b>Oops</b>" not in r.text
    assert "<em>Gone</em>" in r.text
    assert "<i class='fa fa-home'></i><br />Home &amp; Away" in r.text
    assert 'href="/distributor"' in r.text


async def test_404_without_options_renders(client):
    r = await client.get("/news/missing-post")
    assert r.status_code == 404
    assert 'class="error-buttons"' in r.text


async def test_italian_404(client, db):
    await SiteOptionsService(db).save({"404_title": "Not Found", "404_middle_button_icon": "<i class='fa fa-q'></i>"})

    r = await client.get("/it/pagina-mancante")
    assert r.status_code == 404
    assert "Pagina non trovata" in r.text
    assert "Not Found" not in r.text
    assert 'href="/it/distributore"' in r.text
    assert "<i class='fa fa-q'></i>" in r.text
    assert '<body class="it' in r.text


async def test_gtm_snippets_render_raw(client, db, make_item):
    await make_item(PostType.PAGE, "Home", slug="home", template="home")
    await SiteOptionsService(db).save({
        "gtm_code_head": "<script>dataLayer=[]</script>",
        "gtm_code_body": "&lt;noscript&gt;gtm&lt;/noscript&gt;",
        "webmaster_tools": '<meta name="google-site-verification" content="abc">',
    })

    r = await client.get("/")
    assert r.status_code == 200
    assert "<script>dataLayer=[]</script>" in r.text
    assert "<noscript>gtm</noscript>" in r.text
    assert '<meta name="google-site-verification" content="abc">' in r.text


async def test_social_links_hidden_when_empty(client, db, make_item):
    await make_item(PostType.PAGE, "About", slug="about", template="about")
    await SiteOptionsService(db).save({"twitter_link": "http://twitter.com/example"})

    r = await client.get("/about")
    assert 'href="http://twitter.com/example"' in r.text
    assert "fa-twitter" in r.text
    assert "fa-facebook" not in r.text


async def test_faq_page_lists_oldest_first(client, make_item):
    await make_item(PostType.PAGE, "FAQ", slug="faq", template="faq")
    await make_item(PostType.FAQ, "First question")
    await make_item(PostType.FAQ, "Second question")

    r = await client.get("/faq")
    assert r.status_code == 200
    assert r.text.index("First question") < r.text.index("Second question")
    assert 'class="accordion-item is-active"' in r.text


async def test_faq_search_partial(client, make_item):
    await make_item(PostType.FAQ, "Warranty length", content_html="<p>One year</p>")

    r = await client.get("/partials/faq-search", params={"q": "warranty"})
    assert r.status_code == 200
    assert "Warranty length" in r.text

    r = await client.get("/partials/faq-search", params={"q": "zzz"})
    assert "Sorry, no FAQs match that search. Please try again." in r.text


async def test_news_archive_and_post(client, make_item):
    await make_item(
        PostType.POST,
        "Launch",
        slug="launch",
        content_html="<p>" + " ".join(["word"] * 30) + "</p>",
    )

    r = await client.get("/news")
    assert r.status_code == 200
    assert "Latest ProtectionPro News and Announcements" in r.text
    assert " ".join(["word"] * 20) + "..." in r.text
    assert "Read More..." in r.text

    r = await client.get("/news/launch")
    assert r.status_code == 200
    assert "Posted on" in r.text


async def test_locale_prefix_selects_translation(client, make_item):
    await make_item(PostType.PAGE, "About", slug="about", translation_group="about")
    await make_item(PostType.PAGE, "Chi siamo", slug="about", locale="it", translation_group="about")

    r = await client.get("/it/about")
    assert r.status_code == 200
    assert "Chi siamo" in r.text
    assert 'lang="it"' in r.text
    assert 'href="/about" hreflang="en"' in r.text


async def test_success_pages_are_noindex(client, make_item):
    await make_item(PostType.PAGE, "Thanks", slug="success", template="form_confirmation")
    await make_item(PostType.PAGE, "Plain", slug="plain")

    r = await client.get("/success")
    assert '<meta name="robots" content="noindex, nofollow">' in r.text

    r = await client.get("/plain")
    assert "noindex" not in r.text


async def test_footer_page_is_not_public(client, make_item):
    await make_item(PostType.PAGE, "Footer", slug="footer")
    r = await client.get("/footer")
    assert r.status_code == 404


async def test_landing_page_filters_head_markup(client, make_item):
    await make_item(
        PostType.PAGE,
        "Promo",
        slug="promo",
        template="landing",
        fields={
            "disable_defaults": True,
            "landing_page_meta": '<title>Promo</title><div>junk</div>',
            "landing_page_hero": '<div class="hero">Big</div>',
        },
    )

    r = await client.get("/promo")
    assert r.status_code == 200
    assert "<title>Promo</title>" in r.text
    assert "<div>junk</div>" not in r.text
    assert '<div class="hero">Big</div>' in r.text
    assert '<section class="container">' not in r.text


async def test_landing_page_keeps_scripts_as_written(client, make_item):
    script = "<script>if (a && b < c) {}</script>"
    style = "<style>p > a { color: red; }</style>"
    await make_item(
        PostType.PAGE,
        "Promo",
        slug="promo",
        template="landing",
        fields={"landing_page_meta": style, "landing_page_script": script},
    )

    r = await client.get("/promo")
    assert r.status_code == 200
    assert script in r.text
    assert style in r.text


async def test_switcher_hides_spanish_on_desktop_only(client, make_item):
    for locale in ("en", "it", "es"):
        await make_item(
            PostType.PAGE, "Home", slug="home", template="home",
            locale=locale, translation_group="home",
        )

    r = await client.get("/")
    desktop, mobile = r.text.split('id="lang-dropdown-mobile"', 1)
    desktop = desktop.split('id="lang-dropdown"', 1)[1]
    assert 'hreflang="it"' in desktop
    assert 'hreflang="es"' not in desktop
    assert 'href="/es" hreflang="es"' in mobile
    # the current language is never offered
    assert 'hreflang="en"' not in desktop
    assert 'hreflang="en"' not in mobile
