"""End-to-end tests using real Playwright against routed local HTML."""

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from webactor import WebActor
from webactor.drivers.playwright import PlaywrightDriver

pytestmark = pytest.mark.integration

SCRIPTED = {
    "/js/popup": """<html><body>
<button onclick="document.getElementById('result').textContent =
  confirm('Are you sure?') ? 'Yes' : 'No'">Confirm</button>
<button onclick="alert('Really?')">Alert</button>
<div id="result"></div>
</body></html>""",
    "/js/hide": """<html><body>
<div id="banner">Cookie banner</div>
<button onclick="setTimeout(() => document.getElementById('banner').style.display = 'none', 100)">Dismiss</button>
</body></html>""",
}


@pytest.fixture
async def page(pages, base_url):
    """A Chromium page whose requests to the test host serve fixture pages."""
    routes = dict(pages)
    routes.update({base_url + path: html for path, html in SCRIPTED.items()})

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=True)
    except PlaywrightError as exc:
        await playwright.stop()
        pytest.skip(f"Chromium is not available: {exc.message}")

    async def serve(route) -> None:
        html = routes.get(route.request.url)
        if html is None:
            await route.fulfill(status=404, body="")
        else:
            await route.fulfill(status=200, content_type="text/html", body=html)

    context = await browser.new_context()
    await context.route(f"{base_url}/**", serve)
    page = await context.new_page()
    yield page
    await context.close()
    await browser.close()
    await playwright.stop()


@pytest.fixture
async def actor(page, base_url):
    async with WebActor(PlaywrightDriver(page), url=base_url, wait_for_timeout=5) as session:
        yield session


class TestPlaywrightSession:
    async def test_navigate_and_see(self, actor) -> None:
        await actor.am_on_page("/")
        await actor.see_title_equals("TestEd Beta 2.0")
        await actor.see("Welcome to test app!")
        await actor.dont_see("Secret message")
        await actor.see_element("#banner")
        await actor.dont_see_element("#secret")

    async def test_visible_count_and_attributes(self, actor) -> None:
        await actor.am_on_page("/")
        await actor.see_number_of_visible_elements('//div[@id="grab-multiple"]//a', 3)
        await actor.see_number_of_elements('//div[@id="grab-multiple"]//a', 4)
        await actor.see_attributes_on_elements(".note", {"data-kind": "info"})
        await actor.see_css_properties_on_elements(
            "h3", {"font-weight": "bold", "color": "rgb(0, 0, 0)"}
        )

    async def test_click_navigates(self, actor) -> None:
        await actor.am_on_page("/")
        await actor.click("More info")
        await actor.wait_in_url("/info")
        await actor.see("Lots of valuable data here")

    async def test_clickable_cardinality_matches_fake_driver(self, actor, driver, load) -> None:
        await load("/")
        fake = WebActor(driver)
        await actor.am_on_page("/")
        real = await actor.locate_clickable("Send")
        assert len(real) == len(await fake.locate_clickable("Send")) == 2

    async def test_form_fields(self, actor) -> None:
        await actor.am_on_page("/form")
        await actor.fill_field("Your name", "Jon")
        await actor.see_in_field("Your name", "Jon")
        await actor.append_field("City", " Oblast")
        assert await actor.grab_value_from("City") == "Kyiv Oblast"
        await actor.see_in_field("Languages", "go")
        await actor.check_option("I agree")
        await actor.see_checkbox_is_checked("I agree")
        await actor.check_option("Blue")
        await actor.see_in_field("color", "blue")

    async def test_frames(self, actor) -> None:
        await actor.am_on_page("/iframe")
        await actor.switch_to("#content")
        await actor.see("Inner frame")
        await actor.switch_to("#nested")
        await actor.see("Deepest text")
        await actor.switch_to()
        await actor.see("Outer page")

    async def test_tabs(self, actor) -> None:
        await actor.am_on_page("/")
        await actor.click("Open new tab")

        async def two_tabs() -> bool:
            return await actor.grab_number_of_open_tabs() == 2

        await actor.scheduler.retry(two_tabs)
        await actor.switch_to_next_tab()
        await actor.wait_for_text("Tab content")
        await actor.close_current_tab()
        await actor.see("Welcome to test app!")

    async def test_confirm_popup(self, actor) -> None:
        await actor.am_on_page("/js/popup")
        actor.am_cancelling_popups()
        await actor.click("Confirm")
        await actor.see_in_popup("Are you sure?")
        await actor.cancel_popup()
        await actor.see("No", "#result")
        actor.am_accepting_popups()
        await actor.click("Confirm")
        await actor.see("Yes", "#result")

    async def test_wait_to_hide(self, actor) -> None:
        await actor.am_on_page("/js/hide")
        await actor.click("Dismiss")
        await actor.wait_to_hide("#banner", 2)

    async def test_alert_text(self, actor) -> None:
        await actor.am_on_page("/js/popup")
        await actor.click("Alert")
        assert await actor.grab_popup_text() == "Really?"
        await actor.accept_popup()
        assert await actor.grab_popup_text() is None
