"""Example smoke check: open a site and assert its landing page with WebActor."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Ensure project root is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from examples.smoke_check.config import SmokeConfig
from webactor import WebActor, WebActorError, configure_logging
from webactor.drivers import BaseDriver


async def check(actor: WebActor, config: SmokeConfig) -> None:
    """Assertions run identically on either backend."""
    await actor.am_on_page("/")
    if config.expected_title:
        await actor.see_title_equals(config.expected_title)
    await actor.see_element("body")
    links = await actor.grab_number_of_visible_elements("a")
    print(f"  Visible links: {links}")
    print(f"  Open tabs: {await actor.grab_number_of_open_tabs()}")


async def run_playwright(config: SmokeConfig) -> None:
    from playwright.async_api import async_playwright

    from webactor.drivers.playwright import PlaywrightDriver

    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=config.headless)
        try:
            page = await browser.new_page()
            await run(PlaywrightDriver(page), config)
        finally:
            await browser.close()


async def run_selenium(config: SmokeConfig) -> None:
    from selenium import webdriver

    from webactor.drivers.selenium import SeleniumDriver

    options = webdriver.ChromeOptions()
    if config.headless:
        options.add_argument("--headless=new")
    browser = await asyncio.to_thread(webdriver.Chrome, options=options)
    try:
        await run(SeleniumDriver(browser), config)
    finally:
        await asyncio.to_thread(browser.quit)


async def run(driver: BaseDriver, config: SmokeConfig) -> None:
    async with WebActor(
        driver, url=config.site_url, wait_for_timeout=config.timeout
    ) as actor:
        await check(actor, config)


async def main() -> None:
    """Run the smoke check."""
    configure_logging("INFO")
    config = SmokeConfig.from_env()

    if not config.site_url:
        print("Error: Set the SMOKE_URL environment variable")
        sys.exit(1)

    print(f"Checking {config.site_url} with {config.backend}...")
    runner = run_selenium if config.backend == "selenium" else run_playwright
    try:
        await runner(config)
    except WebActorError as exc:
        print(f"Smoke check failed: {exc}")
        sys.exit(1)
    print("Smoke check passed!")


if __name__ == "__main__":
    asyncio.run(main())
