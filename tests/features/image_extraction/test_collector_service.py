import pytest
from unittest.mock import MagicMock, PropertyMock
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement
from selenium.common.exceptions import StaleElementReferenceException, WebDriverException

from imagescout.features.image_extraction.services.collector_service import (
    CandidateSet,
    ImageCollectorService,
    SCAN_SCRIPT,
    parse_background_image,
    parse_srcset,
)
from imagescout.features.image_extraction.services.profiles import (
    EXTENDED_PROFILE,
    STRICT_PROFILE,
    CollectorOptions,
)


def make_element(attrs, width=300, height=300):
    element = MagicMock(spec=WebElement)
    element.get_attribute.side_effect = lambda name: attrs.get(name)
    element.rect = {"x": 0, "y": 0, "width": width, "height": height}
    return element


def make_driver(meta=None, imgs=None, scan=None):
    meta = meta or {}
    imgs = imgs or []
    driver = MagicMock()
    driver.current_url = "https://www.example.com/post/1"

    def find_elements(by, value):
        if by == By.CSS_SELECTOR:
            return meta.get(value, [])
        if by == By.TAG_NAME and value == "img":
            return imgs
        return []

    driver.find_elements.side_effect = find_elements
    driver.execute_script.return_value = scan if scan is not None else {"srcsets": [], "styles": []}
    return driver


class TestParsers:
    def test_parse_srcset_takes_first_token_of_each_entry(self):
        value = "https://cdn.example.com/a.jpg 480w, https://cdn.example.com/b.jpg 800w"

        assert parse_srcset(value) == [
            "https://cdn.example.com/a.jpg",
            "https://cdn.example.com/b.jpg",
        ]

    def test_parse_srcset_without_descriptors_and_blank_entries(self):
        assert parse_srcset("a.png, ,b.png 2x,") == ["a.png", "b.png"]

    @pytest.mark.parametrize("value", [None, ""])
    def test_parse_srcset_empty(self, value):
        assert parse_srcset(value) == []

    @pytest.mark.parametrize(
        "style",
        [
            "background-image:url('https://cdn.example.com/bg.png')",
            'background-image: url("https://cdn.example.com/bg.png");',
            "color: red; background-image: url(https://cdn.example.com/bg.png)",
            "BACKGROUND-IMAGE: URL( 'https://cdn.example.com/bg.png' )",
        ],
    )
    def test_parse_background_image_tolerates_quotes(self, style):
        assert parse_background_image(style) == "https://cdn.example.com/bg.png"

    def test_parse_background_image_ignores_other_url_properties(self):
        style = "mask-image:url(mask.svg); background-image:url('https://cdn.example.com/bg.png')"

        assert parse_background_image(style) == "https://cdn.example.com/bg.png"

    def test_page_scan_matches_background_image_case_insensitively(self):
        assert "value.toLowerCase().indexOf('background-image')" in SCAN_SCRIPT

    @pytest.mark.parametrize(
        "style",
        [
            None,
            "",
            "color: red",
            "background-image: none",
            "background-image:url()",
            "background-image: none; mask-image: url(mask.svg)",
        ],
    )
    def test_parse_background_image_without_url(self, style):
        assert parse_background_image(style) is None


class TestCandidateSet:
    def test_insertion_order_and_exact_match_dedup(self):
        candidates = CandidateSet()

        assert candidates.add("b.jpg") is True
        assert candidates.add("a.jpg") is True
        assert candidates.add("b.jpg") is False
        assert candidates.add("") is False
        assert candidates.add(None) is False
        candidates.extend(["A.jpg", "a.jpg"])

        assert candidates.to_list() == ["b.jpg", "a.jpg", "A.jpg"]
        assert len(candidates) == 3
        assert "A.jpg" in candidates


class TestImageCollectorService:
    def test_meta_images_come_before_img_sources(self):
        driver = make_driver(
            meta={
                "meta[property='og:image']": [make_element({"content": "https://cdn.example.com/og.jpg"})],
                "meta[name='twitter:image']": [make_element({"content": "https://cdn.example.com/tw.jpg"})],
                "meta[itemprop='image']": [make_element({"content": "https://cdn.example.com/item.jpg"})],
            },
            imgs=[make_element({"src": "https://cdn.example.com/body.jpg"})],
        )

        urls = ImageCollectorService(STRICT_PROFILE.collector).collect(driver)

        assert urls == [
            "https://cdn.example.com/og.jpg",
            "https://cdn.example.com/tw.jpg",
            "https://cdn.example.com/item.jpg",
            "https://cdn.example.com/body.jpg",
        ]

    def test_duplicate_img_src_collected_once(self):
        driver = make_driver(
            imgs=[
                make_element({"src": "https://cdn.example.com/same.jpg"}),
                make_element({"src": "https://cdn.example.com/same.jpg"}),
            ]
        )

        urls = ImageCollectorService(STRICT_PROFILE.collector).collect(driver)

        assert urls == ["https://cdn.example.com/same.jpg"]

    def test_small_images_skipped_when_size_floor_set(self):
        driver = make_driver(
            imgs=[
                make_element({"src": "https://cdn.example.com/icon.jpg"}, width=50, height=50),
                make_element({"src": "https://cdn.example.com/wide.jpg"}, width=400, height=60),
                make_element({"src": "https://cdn.example.com/photo.jpg"}, width=100, height=100),
            ]
        )

        urls = ImageCollectorService(STRICT_PROFILE.collector).collect(driver)

        assert urls == ["https://cdn.example.com/photo.jpg"]

    def test_size_not_checked_without_floor(self):
        icon = make_element({"src": "https://cdn.example.com/icon.jpg"}, width=10, height=10)
        driver = make_driver(imgs=[icon])

        urls = ImageCollectorService(CollectorOptions()).collect(driver)

        assert urls == ["https://cdn.example.com/icon.jpg"]

    def test_img_without_src_skipped(self):
        driver = make_driver(
            imgs=[make_element({}), make_element({"src": "https://cdn.example.com/ok.png"})]
        )

        urls = ImageCollectorService(STRICT_PROFILE.collector).collect(driver)

        assert urls == ["https://cdn.example.com/ok.png"]

    def test_unreadable_elements_do_not_abort_scan(self):
        stale = MagicMock(spec=WebElement)
        stale.get_attribute.side_effect = StaleElementReferenceException("stale element")

        no_geometry = MagicMock(spec=WebElement)
        no_geometry.get_attribute.return_value = "https://cdn.example.com/gone.jpg"
        type(no_geometry).rect = PropertyMock(side_effect=WebDriverException("detached"))

        driver = make_driver(
            meta={"meta[property='og:image']": [stale]},
            imgs=[stale, no_geometry, make_element({"src": "https://cdn.example.com/ok.jpg"})],
        )

        urls = ImageCollectorService(STRICT_PROFILE.collector).collect(driver)

        assert urls == ["https://cdn.example.com/ok.jpg"]

    def test_strict_profile_does_not_run_page_scan(self):
        driver = make_driver(imgs=[make_element({"src": "https://cdn.example.com/a.jpg"})])

        ImageCollectorService(STRICT_PROFILE.collector).collect(driver)

        driver.execute_script.assert_not_called()

    def test_extended_profile_adds_srcset_and_backgrounds(self):
        driver = make_driver(
            meta={"meta[property='og:image']": [make_element({"content": "https://cdn.example.com/og.jpg"})]},
            imgs=[make_element({"src": "https://cdn.example.com/a.jpg"}, width=10, height=10)],
            scan={
                "srcsets": ["https://cdn.example.com/a.jpg 1x, https://cdn.example.com/a@2x.jpg 2x"],
                "styles": ["background-image:url('https://cdn.example.com/bg.png')"],
            },
        )

        urls = ImageCollectorService(EXTENDED_PROFILE.collector).collect(driver)

        assert urls == [
            "https://cdn.example.com/og.jpg",
            "https://cdn.example.com/a.jpg",
            "https://cdn.example.com/a@2x.jpg",
            "https://cdn.example.com/bg.png",
        ]

    def test_failed_page_scan_keeps_dom_candidates(self):
        driver = make_driver(imgs=[make_element({"src": "https://cdn.example.com/a.jpg"})])
        driver.execute_script.side_effect = WebDriverException("javascript error")

        urls = ImageCollectorService(EXTENDED_PROFILE.collector).collect(driver)

        assert urls == ["https://cdn.example.com/a.jpg"]

    def test_page_url_is_not_read_back_from_driver(self):
        driver = make_driver(imgs=[make_element({"src": "https://cdn.example.com/a.jpg"})])
        type(driver).current_url = PropertyMock(side_effect=WebDriverException("session lost"))
        driver.execute_script.side_effect = WebDriverException("javascript error")

        urls = ImageCollectorService(EXTENDED_PROFILE.collector).collect(
            driver, "https://www.example.com/post/1"
        )

        assert urls == ["https://cdn.example.com/a.jpg"]
