import pytest

from vidlink.domain.models import Platform, ScrapedPage
from vidlink.infrastructure.scraping import clean_url, extract_image, extract_platform_image, run_chain, scrape_page
from vidlink.infrastructure.scraping.cleanup import clean_text
from vidlink.infrastructure.scraping.meta import MAX_TAGS


TIKTOK_STATE = (
    r'<html><head><title>TikTok</title></head><body>'
    r'<script id="__UNIVERSAL_DATA_FOR_REHYDRATION__" type="application/json">'
    r'{"itemStruct":{"id":"123456","video":{"cover":"https:\u002F\u002Fp16-sign.tiktokcdn.com'
    r'\u002Fobj\u002Fcover.jpeg?x-expires=1\u0026sig=abc"}}}'
    r'</script></body></html>'
)


def test_og_image_entities_are_decoded():
    html = '<meta property="og:image" content="https://x.com/a.jpg?x=1&amp;y=2">'
    assert extract_image(html) == "https://x.com/a.jpg?x=1&y=2"


def test_secure_url_outranks_plain_og_image():
    html = (
        '<meta property="og:image" content="http://cdn.example.com/plain.jpg">'
        '<meta property="og:image:secure_url" content="https://cdn.example.com/secure.jpg">'
    )
    assert extract_image(html) == "https://cdn.example.com/secure.jpg"


def test_og_image_outranks_twitter_card():
    html = (
        '<meta name="twitter:image" content="https://cdn.example.com/tw.jpg">'
        '<meta property="og:image" content="https://cdn.example.com/og.jpg">'
    )
    assert extract_image(html) == "https://cdn.example.com/og.jpg"


def test_twitter_image_fallback_upgrades_protocol_relative():
    html = '<meta name="twitter:image" content="//cdn.example.com/t.png">'
    assert extract_image(html) == "https://cdn.example.com/t.png"


def test_itemprop_image_is_recognized():
    html = '<meta name="description" content="x"><meta itemprop="image" content="https://cdn.example.com/item.jpg">'
    assert extract_image(html) == "https://cdn.example.com/item.jpg"


def test_tiktok_state_blob_with_unicode_escapes():
    assert extract_image(TIKTOK_STATE, Platform.TIKTOK) == (
        "https://p16-sign.tiktokcdn.com/obj/cover.jpeg?x-expires=1&sig=abc"
    )


def test_tiktok_platform_is_sniffed_when_unknown():
    assert extract_platform_image(TIKTOK_STATE) == (
        "https://p16-sign.tiktokcdn.com/obj/cover.jpeg?x-expires=1&sig=abc"
    )


def test_tiktok_rejected_candidate_falls_through_to_next_pattern():
    html = '{"cover":"none","originCover":"https://p77.tiktokcdn.com/origin.jpeg"}'
    assert extract_platform_image(html, Platform.TIKTOK) == "https://p77.tiktokcdn.com/origin.jpeg"


def test_instagram_display_url_with_escaped_slashes():
    html = (
        '<html><script>{"shortcode_media":{"display_url":"https:\\/\\/scontent.cdninstagram.com'
        '\\/v\\/t51\\/abc.jpg?stp=1\\u0026_nc=2"}}</script></html>'
    )
    assert extract_image(html, Platform.INSTAGRAM) == "https://scontent.cdninstagram.com/v/t51/abc.jpg?stp=1&_nc=2"


def test_snapchat_thumbnail_url():
    html = '<script>{"thumbnailUrl":"https://cf-st.sc-cdn.net/d/abc.jpg?mo=1"}</script>'
    assert extract_image(html, Platform.SNAPCHAT) == "https://cf-st.sc-cdn.net/d/abc.jpg?mo=1"


def test_platforms_without_extractors_skip_pattern_stage():
    assert extract_platform_image(TIKTOK_STATE, Platform.YOUTUBE) is None


def test_meta_tags_outrank_platform_patterns():
    html = '<meta property="og:image" content="https://og.example.com/x.jpg">' + TIKTOK_STATE
    assert extract_image(html, Platform.TIKTOK) == "https://og.example.com/x.jpg"


def test_json_ld_thumbnail_list():
    html = (
        '<script type="application/ld+json">'
        '{"@type":"VideoObject","name":"demo","thumbnailUrl":["https://cdn.loom.com/t.gif"]}'
        "</script>"
    )
    assert extract_image(html, Platform.LOOM) == "https://cdn.loom.com/t.gif"


def test_json_ld_graph_and_broken_blocks():
    html = (
        '<script type="application/ld+json">{not json</script>'
        '<script type="application/ld+json">'
        '{"@graph":[{"@type":"WebPage"},{"@type":"VideoObject","image":{"url":"https://img.example.com/v.jpg"}}]}'
        "</script>"
    )
    assert extract_image(html, Platform.LOOM) == "https://img.example.com/v.jpg"


def test_title_prefers_og_and_decodes_entities():
    html = (
        "<title>Fallback</title>"
        '<meta property="og:title" content="It&#x27;s a &quot;test&quot;">'
    )
    assert scrape_page(html).title == 'It\'s a "test"'


def test_title_falls_back_to_title_element():
    assert scrape_page("<html><head><title> Tom &amp; Jerry </title></head></html>").title == "Tom & Jerry"


def test_truncated_html_keeps_what_was_parsed():
    html = '<html><head><meta property="og:image" content="https://a.example.com/x.jpg"><meta prop'
    page = scrape_page(html)
    assert page.image == "https://a.example.com/x.jpg"


@pytest.mark.parametrize(
    "html",
    ["", "<<<>>>\x00", "<html><head><meta property=\"og:title\" content=\"Half", "<script>{\"cover\":\"", "&&&;;#"],
)
def test_scrape_never_raises_on_garbage(html):
    page = scrape_page(html)
    assert isinstance(page, ScrapedPage)


def test_empty_page_gives_empty_result():
    assert scrape_page("") == ScrapedPage()


def test_tags_from_keywords_meta_and_hashtags():
    html = (
        "<html><head>"
        '<meta name="keywords" content="Cats, Funny ,cats">'
        '<meta property="og:video:tag" content="Pets">'
        "<style>body { color: #fff; }</style>"
        "</head><body><p>so cute #kitten #Cats</p>"
        "<script>var c = '#hidden';</script></body></html>"
    )
    assert scrape_page(html).tags == ("cats", "funny", "pets", "kitten")


def test_hashtags_from_description():
    html = '<meta property="og:description" content="new drop #Summer #beach2024 &amp; more">'
    assert scrape_page(html).tags == ("summer", "beach2024")


def test_tags_are_capped():
    keywords = ",".join(f"tag{i}" for i in range(40))
    page = scrape_page(f'<meta name="keywords" content="{keywords}">')
    assert len(page.tags) == MAX_TAGS
    assert page.tags[0] == "tag0"


def test_extractor_failures_are_isolated():
    def broken(html):
        raise RuntimeError("boom")

    assert run_chain([broken, lambda html: None, lambda html: "https://ok.example.com/x.jpg"], "") == (
        "https://ok.example.com/x.jpg"
    )


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("//a.example.com/x.jpg", "https://a.example.com/x.jpg"),
        ("p16.tiktokcdn.com/a.jpg", None),
        ("undefined", None),
        ("null", None),
        ("http://a.example.com/x.jpg", "http://a.example.com/x.jpg"),
        ("https://a.example.com/?a=1&para=2", "https://a.example.com/?a=1&para=2"),
        ("https:\\/\\/a.example.com\\/x.jpg", "https://a.example.com/x.jpg"),
        ("/relative.jpg", None),
        ("data:image/png;base64,AAAA", None),
        ("   ", None),
        (None, None),
    ],
)
def test_clean_url(raw, expected):
    assert clean_url(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("p16.tiktokcdn.com/a.jpg", "https://p16.tiktokcdn.com/a.jpg"),
        ("scontent.cdninstagram.com:443/v/x.jpg", "https://scontent.cdninstagram.com:443/v/x.jpg"),
        ("undefined", None),
        ("false", None),
    ],
)
def test_clean_url_bare_host_needs_a_dotted_name(raw, expected):
    assert clean_url(raw, allow_bare_host=True) == expected


def test_clean_text_blank_is_none():
    assert clean_text("  \n ") is None


def test_placeholder_og_image_falls_through_to_next_key():
    html = (
        '<meta property="og:image" content="undefined">'
        '<meta name="twitter:image" content="https://cdn.example.com/t.jpg">'
    )
    assert extract_image(html) == "https://cdn.example.com/t.jpg"


def test_placeholder_only_meta_yields_no_image():
    assert extract_image('<meta property="og:image" content="null">') is None


def test_creator_from_author_meta():
    html = '<meta property="og:title" content="Demo"><meta name="author" content="Jane Roe">'
    assert scrape_page(html, Platform.LOOM).creator == "Jane Roe"


def test_creator_from_instagram_style_title_handle():
    html = '<meta property="og:title" content="Sunset Reel (@golden.hour) on Instagram">'
    assert scrape_page(html, Platform.INSTAGRAM).creator == "@golden.hour"


def test_creator_absent_when_page_names_nobody():
    assert scrape_page('<meta property="og:title" content="Sunset reel">').creator is None
