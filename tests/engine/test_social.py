from techprobe.engine.artifact import PageArtifact
from techprobe.engine.social import (
    build_haystack,
    classify_social,
    integration_confidence,
    integration_method,
    total_platforms,
)


def by_platform(findings, platform):
    return [f for f in findings if f.platform == platform]


def test_facebook_sdk_and_comments(facebook_page):
    findings = by_platform(classify_social(facebook_page), "Facebook")
    assert len(findings) == 2

    sdk, embed = findings
    assert (sdk.category, sdk.integration_method, sdk.confidence) == ("widget", "sdk", 0.4)
    assert sdk.evidence == ("sdk: connect.facebook.net",)
    assert (embed.category, embed.integration_method, embed.confidence) == ("embed", "script", 0.4)
    assert embed.evidence == ("embed: fb-comments",)


def test_general_hit_without_group_falls_back_to_widget_script():
    findings = classify_social(PageArtifact.from_response('<div id="fb-root"></div>'))
    (fb,) = by_platform(findings, "Facebook")
    assert (fb.category, fb.integration_method, fb.confidence) == ("widget", "script", 0.3)
    assert fb.evidence == ("Found pattern: fb-root",)


def test_twitter_card_meta_is_sharing():
    findings = classify_social(PageArtifact.from_response('<meta name="twitter:card" content="summary">'))
    (tw,) = by_platform(findings, "Twitter/X")
    assert (tw.category, tw.integration_method, tw.confidence) == ("sharing", "meta", 0.3)


def test_youtube_iframe_embed():
    artifact = PageArtifact.from_response('<iframe src="https://www.youtube.com/embed/abc123"></iframe>')
    (yt,) = by_platform(classify_social(artifact), "Google/YouTube")
    assert yt.category == "embed"
    assert yt.integration_method == "iframe"


def test_tracking_cookie_counts_as_pixel():
    findings = classify_social(PageArtifact(cookie_names=frozenset({"_fbp"})))
    (fb,) = by_platform(findings, "Facebook")
    assert (fb.category, fb.integration_method) == ("tracking", "pixel")


def test_sdk_version_captured():
    html = '<script src="https://connect.facebook.net/en_US/sdk.js#xfbml=1&version=v18.0"></script>'
    findings = by_platform(classify_social(PageArtifact.from_response(html)), "Facebook")
    assert findings
    assert all(f.version == "18.0" for f in findings)


def test_no_platforms_on_plain_page():
    findings = classify_social(PageArtifact.from_response("<html><body><p>Hello</p></body></html>"))
    assert findings == []
    assert total_platforms(findings) == 0


def test_total_platforms_counts_distinct(facebook_page):
    assert total_platforms(classify_social(facebook_page)) == 1


def test_confidence_bounds():
    assert integration_confidence(0, 0) == 0.3
    assert integration_confidence(1, 1) == 0.3
    assert integration_confidence(2, 3) == 0.7
    assert integration_confidence(5, 10) == 0.95


def test_integration_method_mapping():
    assert integration_method("tracking", "") == "pixel"
    assert integration_method("meta", "") == "meta"
    assert integration_method("embed", "<IFRAME src=x>") == "iframe"
    assert integration_method("embed", "<div>") == "script"
    assert integration_method("login", "") == "script"


def test_haystack_includes_headers_and_cookies():
    artifact = PageArtifact.from_response("<p>X</p>", headers={"Link": "<https://Pinimg.com/x>"}, cookie_names=["_Scid"])
    haystack = build_haystack(artifact)
    assert "pinimg.com" in haystack
    assert "_scid" in haystack
