"""End-to-end tests for the scraping pipeline against a fake browser."""

from pathlib import Path

import pytest
from openpyxl import load_workbook
from PIL import Image

from tests.fakes import FakeResponse, FakeSession, FakeStory, page_pixel
from trends_scraper.errors import CropError, MissingElementError, OrderingError, ScraperError
from trends_scraper.models import Record
from trends_scraper.report import write_report
from trends_scraper.scraper import (
    ScrapeContext,
    ScrapeState,
    fetch_story_image,
    prepare_directories,
    scrape_stories,
)


def _grid_stories(count):
    """Stories laid out in rows of ten, all above a 300px fold."""
    return [
        FakeStory(
            title=f"Story {i}",
            google_url=f"/trends/story/{i}",
            image_url=f"https://img.example.com/{i}.png",
            chart=((i % 10) * 30 + 0.6, (i // 10) * 40 + 5.4, 20.3, 10.9),
        )
        for i in range(count)
    ]


class TestScrapeContext:
    """Tests for ScrapeContext."""

    def _record(self, index):
        return Record(
            index=index,
            title=None,
            external_url=None,
            google_url=None,
            image_url=None,
            local_image_path=None,
            chart_image_path=Path(f"{index}_chart.png"),
        )

    def test_rejects_out_of_order_records(self, config):
        """Records must arrive in ascending index order without gaps."""
        context = ScrapeContext(config)
        context.append(self._record(0))
        with pytest.raises(OrderingError) as excinfo:
            context.append(self._record(2))
        assert len(context) == 1
        assert isinstance(excinfo.value, ScraperError)

    def test_results_only_when_done(self, config):
        """Results are withheld until the run is finished."""
        context = ScrapeContext(config)
        context.append(self._record(0))
        with pytest.raises(OrderingError):
            context.results()
        context.transition(ScrapeState.DONE)
        assert [r.index for r in context.results()] == [0]


class TestFetchStoryImage:
    """Tests for fetch_story_image."""

    def test_absent_url_skips_download(self, config):
        """No image URL means no request and no local path."""
        session = FakeSession()
        assert fetch_story_image(None, 0, config, session) is None
        assert session.calls == []

    def test_failed_download_has_no_path(self, config):
        """A failed download is not reported as a local file."""
        session = FakeSession(default=FakeResponse(status=500))
        assert fetch_story_image("https://img.example.com/0.png", 0, config, session) is None

    def test_deterministic_path(self, config):
        """Images are saved as <index>_image.png in the results folder."""
        path = fetch_story_image("https://img.example.com/0.png", 7, config, FakeSession())
        assert path == config.results_dir / "7_image.png"
        assert path.exists()


class TestScrapeStories:
    """Tests for scrape_stories."""

    @pytest.mark.asyncio
    async def test_fifty_visible_stories(self, config, make_browser):
        """Fifty populated stories above the fold give fifty records and 51 rows."""
        config.item_count = 50
        browser = make_browser(_grid_stories(50))
        session = FakeSession()

        result = await scrape_stories(browser, config, session)

        assert [r.index for r in result.records] == list(range(50))
        assert [r.title for r in result.records] == [f"Story {i}" for i in range(50)]
        assert all(r.local_image_path is not None for r in result.records)
        assert browser.scrolls == []
        assert browser.captures == 1
        assert result.screenshots_taken == 1

        write_report(result.records, config.report_path)
        sheet = load_workbook(config.report_path)["Content"]
        assert sheet.max_row == 51

    @pytest.mark.asyncio
    async def test_crops_use_truncated_geometry(self, config, make_browser):
        """Each chart file is the truncated rectangle cut from the screenshot."""
        config.item_count = 2
        browser = make_browser(_grid_stories(2))

        result = await scrape_stories(browser, config, FakeSession())

        chart = result.records[1].chart_image_path
        assert chart == config.results_dir / "1_chart.png"
        with Image.open(chart) as image:
            assert image.size == (20, 10)
            assert image.getpixel((0, 0)) == page_pixel(30, 5)

    @pytest.mark.asyncio
    async def test_undefined_image_is_never_downloaded(self, config, make_browser):
        """A story reporting 'undefined' for its image gets no download."""
        stories = _grid_stories(3)
        stories[1].image_url = "undefined"
        browser = make_browser(stories)
        session = FakeSession()

        result = await scrape_stories(browser, config, session)

        assert result.records[1].image_url is None
        assert result.records[1].local_image_path is None
        assert [call["url"] for call in session.calls] == [
            "https://img.example.com/0.png",
            "https://img.example.com/2.png",
        ]

    @pytest.mark.asyncio
    async def test_scrolls_forward_and_recaptures(self, config, make_browser):
        """Stories below the fold trigger one scroll and a fresh screenshot."""
        config.scroll_step = 350
        stories = [
            FakeStory(title="top", chart=(10.0, 20.0, 40.0, 30.0)),
            FakeStory(title="below", chart=(10.0, 400.0, 40.0, 30.0)),
            FakeStory(title="after", chart=(60.0, 420.0, 40.0, 30.0)),
        ]
        browser = make_browser(stories, busy_polls=1)

        result = await scrape_stories(browser, config, FakeSession())

        assert browser.scrolls == [350]
        assert browser.captures == 2
        assert result.screenshots_taken == 2
        with Image.open(result.records[1].chart_image_path) as image:
            assert image.size == (40, 30)
            assert image.getpixel((0, 0)) == page_pixel(10, 400)
        with Image.open(result.records[2].chart_image_path) as image:
            assert image.getpixel((0, 0)) == page_pixel(60, 420)

    @pytest.mark.asyncio
    async def test_chart_still_off_screen_after_scroll(self, config, make_browser):
        """A chart that stays out of the screenshot aborts the run."""
        config.scroll_step = 10
        browser = make_browser([FakeStory(chart=(10.0, 1000.0, 40.0, 30.0))])
        config.item_count = 1
        with pytest.raises(CropError):
            await scrape_stories(browser, config, FakeSession())

    @pytest.mark.asyncio
    async def test_missing_story_aborts(self, config, make_browser):
        """Fewer containers than the configured count is a hard failure."""
        browser = make_browser(_grid_stories(2))
        with pytest.raises(MissingElementError):
            await scrape_stories(browser, config, FakeSession())


class TestPrepareDirectories:
    """Tests for prepare_directories."""

    def test_clears_results_and_screenshots_keeps_cache(self, config):
        """Stale outputs are removed; the browser cache survives."""
        (config.results_dir / "old.xlsx").write_text("x")
        (config.screenshots_dir / "old.png").write_text("x")
        config.cache_dir.mkdir()
        (config.cache_dir / "state").write_text("x")

        prepare_directories(config)

        assert list(config.results_dir.iterdir()) == []
        assert list(config.screenshots_dir.iterdir()) == []
        assert (config.cache_dir / "state").exists()
