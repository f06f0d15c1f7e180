"""
Session Manager

Description: Owns one stealth-configured Playwright browser session from launch to teardown
Author: Eric Hiss (GitHub: EricRollei)
Contact: eric@historic.camera, eric@rollei.us
License: Dual License (Non-Commercial and Commercial Use)
Copyright (c) 2025 Eric Hiss. All rights reserved.

Dual License:
1. Non-Commercial Use: This software is licensed under the terms of the
   Creative Commons Attribution-NonCommercial 4.0 International License.
   To view a copy of this license, visit http://creativecommons.org/licenses/by-nc/4.0/

2. Commercial Use: For commercial use, a separate license is required.
   Please contact Eric Hiss at eric@historic.camera or eric@rollei.us for licensing options.

Dependencies:
This code depends on several third-party libraries, each with its own license.
See CREDITS.md for a comprehensive list of dependencies and their licenses.

Third-party code:
- Uses Playwright (Apache 2.0): https://github.com/microsoft/playwright
"""

import asyncio
import json
import logging
import random
import re
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .errors import NavigationError, WaitTimeoutError
from .utils.persistent_settings import ScraperSettings
from .utils.waiting import wait_until

logger = logging.getLogger(__name__)

USER_AGENTS = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    # Chrome on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    # Edge on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.2478.67",
]

VIEWPORTS = [
    {"width": 1920, "height": 1080},
    {"width": 1536, "height": 864},
    {"width": 1440, "height": 900},
    {"width": 1366, "height": 768},
]

BASIC_LAUNCH_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--no-sandbox',
]

ENHANCED_LAUNCH_ARGS = [
    '--disable-features=IsolateOrigins,site-per-process',
    '--disable-site-isolation-trials',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
]

EXTREME_LAUNCH_ARGS = [
    '--no-first-run',
    '--no-service-autorun',
    '--password-store=basic',
    '--use-mock-keychain',
    '--disable-extensions',
]

BASIC_STEALTH_SCRIPT = """
(() => {
    // Pass WebDriver test
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
        configurable: true
    });

    // Pass Chrome test
    window.chrome = window.chrome || { runtime: {} };
})();
"""

ENHANCED_STEALTH_SCRIPT = """
(() => {
    // Pass permissions test
    const originalQuery = window.navigator.permissions && window.navigator.permissions.query;
    if (originalQuery) {
        window.navigator.permissions.query = (parameters) => (
            parameters.name === 'notifications' ?
                Promise.resolve({ state: Notification.permission }) :
                originalQuery(parameters)
        );
    }

    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });

    Object.defineProperty(navigator, 'platform', {
        get: () => '__PLATFORM__',
    });

    Object.defineProperty(navigator, 'hardwareConcurrency', {
        get: () => 8,
    });

    // Mock plugins for more authenticity
    Object.defineProperty(navigator, 'plugins', {
        get: () => {
            const plugins = [
                { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer', description: 'Portable Document Format' },
                { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai', description: '' },
                { name: 'Native Client', filename: 'internal-nacl-plugin', description: '' }
            ];
            plugins.item = idx => plugins[idx];
            plugins.namedItem = name => plugins.find(plugin => plugin.name === name);
            return plugins;
        }
    });
})();
"""

EXTREME_STEALTH_SCRIPT = """
(() => {
    // Use a common WebGL renderer
    const getParameter = WebGLRenderingContext.prototype.getParameter;
    WebGLRenderingContext.prototype.getParameter = function(parameter) {
        // UNMASKED_VENDOR_WEBGL
        if (parameter === 37445) {
            return 'Intel Inc.';
        }
        // UNMASKED_RENDERER_WEBGL
        if (parameter === 37446) {
            return 'Intel Iris OpenGL Engine';
        }
        return getParameter.apply(this, arguments);
    };
})();
"""

SCROLL_STATE_JS = """
() => ({
    position: window.scrollY + window.innerHeight,
    height: document.body ? document.body.scrollHeight : 0
})
"""


def platform_for_user_agent(user_agent: str) -> str:
    """navigator.platform value consistent with a user agent string."""
    if "Macintosh" in user_agent:
        return "MacIntel"
    if "Linux" in user_agent:
        return "Linux x86_64"
    return "Win32"


class BrowserSession:
    """
    One browser-automation session, owned end to end.

    The fingerprint (user agent, viewport) is picked once when the session
    is created and shared by every page it opens. Use it as an async context
    manager so the browser is always torn down:

        async with BrowserSession(settings) as session:
            await session.navigate(session.page, url)
    """

    def __init__(self, settings: Optional[ScraperSettings] = None, cookie_file=None, headless: Optional[bool] = None, debug_dir=None):
        self.settings = settings or ScraperSettings()
        self.cookie_file = Path(cookie_file or self.settings.cookie_file)
        self.debug_dir = Path(debug_dir or self.settings.debug_dir)
        self.headless = self.settings.headless if headless is None else headless
        self.stealth_level = self.settings.stealth_level
        self.user_agent = random.choice(USER_AGENTS)
        self.viewport = dict(random.choice(VIEWPORTS))

        self._playwright = None
        self.browser = None
        self.context = None
        self.page = None
        self.user_data_dir: Optional[Path] = None
        self._closed = False

    async def __aenter__(self):
        await self.launch()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # --- Launch ---

    def launch_args(self) -> list:
        args = list(BASIC_LAUNCH_ARGS)
        if self.stealth_level in ('enhanced', 'extreme'):
            args.extend(ENHANCED_LAUNCH_ARGS)
        if self.stealth_level == 'extreme':
            args.extend(EXTREME_LAUNCH_ARGS)
        return args

    def context_options(self) -> dict:
        options = {
            "user_agent": self.user_agent,
            "viewport": dict(self.viewport),
            "device_scale_factor": 1.0,
            "has_touch": False,
            "is_mobile": False,
        }
        if self.stealth_level in ('enhanced', 'extreme'):
            options.update({
                "locale": "en-US",
                "timezone_id": "America/New_York",
                "color_scheme": "light",
            })
        return options

    def stealth_script(self) -> str:
        script = BASIC_STEALTH_SCRIPT
        if self.stealth_level in ('enhanced', 'extreme'):
            script += ENHANCED_STEALTH_SCRIPT.replace('__PLATFORM__', platform_for_user_agent(self.user_agent))
        if self.stealth_level == 'extreme':
            script += EXTREME_STEALTH_SCRIPT
        return script

    async def launch(self):
        """
        Start Chromium with the stealth configuration and open the first page.

        Returns:
            The session's main page. Calling launch again returns the same page.
        """
        if self.page is not None:
            return self.page
        if self._closed:
            raise RuntimeError("BrowserSession cannot be relaunched after close()")

        logger.info(
            f"Launching browser (stealth: {self.stealth_level}, headless: {self.headless}, "
            f"user agent: {self.user_agent[:50]}...)"
        )
        try:
            self._playwright = await async_playwright().start()
            chromium = self._playwright.chromium

            if self.settings.use_persistent_profile:
                self.user_data_dir = Path(tempfile.mkdtemp(prefix="pwprof_"))
                # A persistent context is its own browser
                self.context = await chromium.launch_persistent_context(
                    user_data_dir=str(self.user_data_dir),
                    headless=self.headless,
                    args=self.launch_args(),
                    **self.context_options()
                )
            else:
                self.browser = await chromium.launch(headless=self.headless, args=self.launch_args())
                self.context = await self.browser.new_context(**self.context_options())

            await self.context.add_init_script(self.stealth_script())
            self.context.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
            self.context.set_default_timeout(self.settings.element_timeout_ms)

            existing = list(self.context.pages)
            self.page = existing[0] if existing else await self.context.new_page()
            self._prepare_page(self.page)
        except Exception:
            logger.error("Browser launch failed, releasing partial resources")
            await self.close()
            raise

        logger.info("Browser session ready")
        return self.page

    def _prepare_page(self, page):
        # Handle dialogs automatically
        page.on("dialog", lambda dialog: dialog.dismiss())

    async def new_page(self):
        """Open a fresh page in the session's context."""
        if self.context is None:
            raise RuntimeError("BrowserSession has not been launched")
        page = await self.context.new_page()
        self._prepare_page(page)
        return page

    # --- Cookies ---

    def _context_for(self, page):
        if page is not None and getattr(page, "context", None) is not None:
            return page.context
        if self.context is None:
            raise RuntimeError("BrowserSession has not been launched")
        return self.context

    async def load_cookies(self, page=None) -> bool:
        """
        Apply the cookie file to the session before navigating.

        Returns:
            bool: True if a cookie file was found and applied
        """
        context = self._context_for(page)
        if not self.cookie_file.exists():
            logger.info(f"No cookie file at {self.cookie_file}, starting with a clean session")
            return False

        try:
            cookies = json.loads(self.cookie_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read cookie file {self.cookie_file}: {e}")
            return False

        if not isinstance(cookies, list) or not cookies:
            logger.warning(f"Cookie file {self.cookie_file} holds no cookies")
            return False

        try:
            await context.add_cookies(cookies)
        except PlaywrightError as e:
            logger.warning(f"Browser rejected cookies from {self.cookie_file}: {e}")
            return False

        logger.info(f"Loaded {len(cookies)} cookies from {self.cookie_file}")
        return True

    async def save_cookies(self, page=None) -> bool:
        """Overwrite the cookie file with the session's current cookies."""
        context = self._context_for(page)
        try:
            cookies = await context.cookies()
            self.cookie_file.parent.mkdir(parents=True, exist_ok=True)
            self.cookie_file.write_text(json.dumps(cookies, indent=2), encoding="utf-8")
        except (OSError, PlaywrightError) as e:
            logger.warning(f"Could not save cookies to {self.cookie_file}: {e}")
            return False

        logger.info(f"Saved {len(cookies)} cookies to {self.cookie_file}")
        return True

    # --- Interaction ---

    async def _pause(self):
        low, high = self.settings.human_delay_ms
        await asyncio.sleep(random.uniform(low, high) / 1000.0)

    async def simulate_human(self, page=None):
        """
        Move the pointer around and scroll to the bottom in small steps.

        Best-effort: a failure is logged and the retrieval carries on.
        """
        page = page or self.page
        try:
            viewport = page.viewport_size or self.viewport
            width, height = viewport["width"], viewport["height"]
            for _ in range(random.randint(2, 4)):
                x = random.uniform(50, max(51, width - 50))
                y = random.uniform(100, max(101, height - 50))
                await page.mouse.move(x, y, steps=random.randint(5, 15))
                await self._pause()

            steps = 0
            for steps in range(1, self.settings.human_max_scroll_steps + 1):
                state = await page.evaluate(SCROLL_STATE_JS)
                if state["position"] >= state["height"]:
                    break
                await page.mouse.wheel(0, self.settings.human_scroll_step_px)
                await self._pause()
            logger.debug(f"Human simulation finished after {steps} scroll checks")
        except Exception as e:
            logger.warning(f"Human simulation incomplete: {e}")

    async def await_challenge(self, page=None, timeout_ms: Optional[float] = None) -> bool:
        """
        Pause for manual resolution if a challenge frame shows up.

        Polls for any of the configured challenge selectors for up to
        ``timeout_ms``. When one appears, blocks for the grace window so a
        human can solve it in the visible browser.

        Returns:
            bool: True if a challenge was detected
        """
        page = page or self.page
        timeout_ms = self.settings.challenge_timeout_ms if timeout_ms is None else timeout_ms

        async def find_challenge():
            for selector in self.settings.challenge_selectors:
                if await page.query_selector(selector):
                    return selector
            return None

        try:
            selector = await wait_until(find_challenge, timeout_ms, description="challenge frame", initial_delay_ms=250)
        except WaitTimeoutError:
            logger.info("No challenge frame found")
            return False

        grace_ms = self.settings.challenge_grace_ms
        logger.warning(f"Challenge detected ({selector}). Solve it in the browser window, resuming in {grace_ms / 1000:.0f}s")
        await asyncio.sleep(grace_ms / 1000.0)
        logger.info("Challenge grace window over, continuing")
        return True

    async def navigate(self, page, url: str):
        """
        Load a URL, then give the network a short chance to go idle.

        Raises:
            NavigationError: If the page cannot be loaded
        """
        timeout = self.settings.navigation_timeout_ms
        try:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightError as e:
            debug_path = await self.capture_debug(page, "navigation")
            raise NavigationError(f"Could not load {url}: {e}", debug_path=debug_path) from e

        try:
            await page.wait_for_load_state("networkidle", timeout=min(10000, timeout))
        except PlaywrightError:
            logger.debug(f"Network did not go idle on {url}, continuing")
        return response

    async def require_element(self, page, selector: str, label: str, timeout_ms: Optional[float] = None):
        """
        Wait for an element the flow cannot continue without.

        Raises:
            NavigationError: After saving the page markup, if the element
                never appears
        """
        timeout_ms = self.settings.element_timeout_ms if timeout_ms is None else timeout_ms
        try:
            return await wait_until(
                lambda: page.query_selector(selector),
                timeout_ms,
                description=f"{label} ({selector})",
            )
        except WaitTimeoutError as e:
            debug_path = await self.capture_debug(page, label)
            raise NavigationError(f"{label} never appeared on {page.url}: {e}", debug_path=debug_path) from e

    async def capture_debug(self, page, label: str) -> Optional[Path]:
        """Save the page's current markup to the debug directory."""
        try:
            html = await page.content()
        except PlaywrightError as e:
            logger.warning(f"Could not capture page markup for {label}: {e}")
            return None

        safe_label = re.sub(r'[^\w\-]+', '_', label).strip('_') or "page"
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        path = self.debug_dir / f"{safe_label}-{stamp}.html"
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not save page markup for {label} to {path}: {e}")
            return None
        logger.warning(f"Saved page markup to {path}")
        return path

    # --- Teardown ---

    async def close(self):
        """Tear everything down in reverse order of creation. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        cleanup_success = True

        async def cleanup_component(component, close_method, name):
            nonlocal cleanup_success
            if component is None:
                return
            try:
                if close_method == "stop":
                    await component.stop()
                elif hasattr(component, "is_closed") and component.is_closed():
                    return
                else:
                    await component.close()
            except Exception as e:
                cleanup_success = False
                logger.warning(f"Error cleaning up {name}: {e}")

        await cleanup_component(self.page, "close", "page")
        await cleanup_component(self.context, "close", "context")
        await cleanup_component(self.browser, "close", "browser")
        await cleanup_component(self._playwright, "stop", "playwright instance")

        if self.user_data_dir is not None:
            shutil.rmtree(self.user_data_dir, ignore_errors=True)

        self.page = None
        self.context = None
        self.browser = None
        self._playwright = None

        if cleanup_success:
            logger.info("Browser session closed")
        else:
            logger.warning("Some browser resources may not have been released")
