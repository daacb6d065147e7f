"""
Browserbase capability provider.

A remote session is created through the Browserbase REST API and a Selenium
``webdriver.Remote`` is attached to it. Selenium is blocking, so every page
operation is pushed onto a worker thread with ``asyncio.to_thread``; the event
loop itself never blocks on the remote browser.

Console messages arrive on Selenium's BiDi websocket thread. They are handed
back to the event loop with ``call_soon_threadsafe`` so that everything that
consumes them runs on the loop thread.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

import httpx
from selenium import webdriver
from selenium.common.exceptions import NoSuchElementException, WebDriverException
from selenium.webdriver.chrome.options import Options as ChromeOptions
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.remote_connection import RemoteConnection
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from ..constants import PROVIDER_HTTP_TIMEOUT_SECS
from ..errors import ElementNotFoundError, ProviderConnectionError
from .scripts import BODY_INNER_TEXT

logger = logging.getLogger(__name__)

ConsoleCallback = Callable[[str, str], None]


class BrowserbaseRemoteConnection(RemoteConnection):
    """Selenium remote connection that authenticates with the session's signing key."""

    def __init__(self, remote_url: str, signing_key: str):
        super().__init__(remote_url)
        self._signing_key = signing_key

    def get_remote_connection_headers(self, parsed_url, keep_alive=False):
        headers = super().get_remote_connection_headers(parsed_url, keep_alive)
        headers.update({"x-bb-signing-key": self._signing_key})
        return headers


def _console_level(entry: Any) -> str:
    return getattr(entry, "method", None) or getattr(entry, "level", None) or "log"


class SeleniumPage:
    """Async page handle over a Selenium driver."""

    def __init__(self, driver: webdriver.Remote):
        self._driver = driver

    @property
    def driver(self) -> webdriver.Remote:
        return self._driver

    async def goto(self, url: str) -> None:
        await asyncio.to_thread(self._driver.get, url)

    def _set_viewport(self, width: int, height: int) -> None:
        # set_window_size sizes the outer window; correct for browser chrome.
        self._driver.set_window_size(width, height)
        inner = self._driver.execute_script("return [window.innerWidth, window.innerHeight];") or [width, height]
        dw, dh = width - int(inner[0]), height - int(inner[1])
        if dw or dh:
            self._driver.set_window_size(width + dw, height + dh)

    async def set_viewport(self, width: int, height: int) -> None:
        await asyncio.to_thread(self._set_viewport, width, height)

    def _find(self, selector: str):
        try:
            return self._driver.find_element(By.CSS_SELECTOR, selector)
        except NoSuchElementException:
            raise ElementNotFoundError(selector)

    async def click(self, selector: str) -> None:
        el = await asyncio.to_thread(self._find, selector)
        await asyncio.to_thread(el.click)

    async def type(self, selector: str, text: str) -> None:
        el = await asyncio.to_thread(self._find, selector)
        await asyncio.to_thread(el.send_keys, text)

    async def wait_for_selector(self, selector: str, timeout: float = 30) -> None:
        wait = WebDriverWait(self._driver, timeout)
        await asyncio.to_thread(
            wait.until,
            EC.presence_of_element_located((By.CSS_SELECTOR, selector)),
        )

    def _screenshot(self, selector: Optional[str]) -> Optional[str]:
        if selector:
            elements = self._driver.find_elements(By.CSS_SELECTOR, selector)
            if not elements:
                return None
            return elements[0].screenshot_as_base64
        return self._driver.get_screenshot_as_base64()

    async def screenshot(self, selector: Optional[str] = None) -> Optional[str]:
        """
        Capture the viewport, or a single element when ``selector`` is given.

        Returns:
            Base64-encoded PNG, or None when the selector matched nothing.
        """
        return await asyncio.to_thread(self._screenshot, selector)

    async def evaluate(self, script: str, *args):
        return await asyncio.to_thread(self._driver.execute_script, script, *args)

    def _content(self) -> str:
        try:
            html = self._driver.execute_script("return document.documentElement.outerHTML")
        except WebDriverException:
            html = None
        return html or self._driver.page_source or ""

    async def content(self) -> str:
        """Serialized DOM of the current document."""
        return await asyncio.to_thread(self._content)

    async def inner_text(self) -> str:
        text = await self.evaluate(BODY_INNER_TEXT)
        return text or ""

    def _subscribe_console(self, handler) -> None:
        # First access to driver.script opens the BiDi websocket.
        self._driver.script.add_console_message_handler(handler)

    async def on_console(self, callback: ConsoleCallback) -> None:
        """
        Subscribe to browser console messages.

        The subscription round-trip runs on a worker thread. ``callback(level,
        text)`` is always invoked on the event loop that awaited this call.
        """
        loop = asyncio.get_running_loop()

        def _handler(entry):
            loop.call_soon_threadsafe(callback, _console_level(entry), getattr(entry, "text", "") or "")

        await asyncio.to_thread(self._subscribe_console, _handler)


class RemoteBrowser:
    """One connected remote browser: the driver, its default page and the Browserbase session."""

    def __init__(self, provider: "BrowserbaseProvider", remote_session_id: str, driver: webdriver.Remote):
        self._provider = provider
        self.remote_session_id = remote_session_id
        self.page = SeleniumPage(driver)
        self._closed = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self.page.driver.quit)
        except WebDriverException as e:
            logger.debug(f"driver.quit failed (non-critical): {e}")
        await self._provider.release(self.remote_session_id)


class BrowserbaseProvider:
    """
    Creates remote browser sessions on Browserbase.

    Args:
        api_key: Browserbase API key.
        project_id: Browserbase project the sessions are billed to.
        api_url: Base URL of the Browserbase REST API.
        http_client: Optional preconfigured ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        api_key: str,
        project_id: str,
        api_url: str = "https://api.browserbase.com/v1",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._project_id = project_id
        self._api_url = api_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=PROVIDER_HTTP_TIMEOUT_SECS)

    @property
    def _headers(self) -> Dict[str, str]:
        return {"X-BB-API-Key": self._api_key, "Content-Type": "application/json"}

    async def _create_remote_session(self) -> dict:
        try:
            response = await self._http.post(
                f"{self._api_url}/sessions",
                headers=self._headers,
                json={"projectId": self._project_id},
            )
        except httpx.HTTPError as e:
            raise ProviderConnectionError(f"Could not reach Browserbase: {e}") from e

        if response.status_code in (401, 403):
            raise ProviderConnectionError("Browserbase rejected the API key or project id")
        if response.status_code >= 400:
            raise ProviderConnectionError(
                f"Browserbase session creation failed (HTTP {response.status_code}): {response.text}"
            )
        session = response.json()
        for key in ("id", "seleniumRemoteUrl", "signingKey"):
            if not session.get(key):
                raise ProviderConnectionError(f"Browserbase response is missing '{key}'")
        return session

    def _attach(self, session: dict) -> webdriver.Remote:
        options = ChromeOptions()
        # Ask for a BiDi websocket so console events can be subscribed to.
        options.set_capability("webSocketUrl", True)
        connection = BrowserbaseRemoteConnection(session["seleniumRemoteUrl"], session["signingKey"])
        return webdriver.Remote(command_executor=connection, options=options)

    async def connect(self) -> RemoteBrowser:
        session = await self._create_remote_session()
        try:
            driver = await asyncio.to_thread(self._attach, session)
        except WebDriverException as e:
            await self.release(session["id"])
            raise ProviderConnectionError(f"Could not attach to Browserbase session {session['id']}: {e}") from e
        logger.info(f"Attached to Browserbase session {session['id']}")
        return RemoteBrowser(self, session["id"], driver)

    async def release(self, remote_session_id: str) -> None:
        """Ask Browserbase to release a session. Failures are logged, not raised."""
        try:
            response = await self._http.post(
                f"{self._api_url}/sessions/{remote_session_id}",
                headers=self._headers,
                json={"projectId": self._project_id, "status": "REQUEST_RELEASE"},
            )
            if response.status_code >= 400:
                logger.warning(f"Browserbase release of {remote_session_id} returned HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Browserbase release of {remote_session_id} failed: {e}")

    async def aclose(self) -> None:
        await self._http.aclose()


__all__ = [
    "BrowserbaseProvider",
    "BrowserbaseRemoteConnection",
    "RemoteBrowser",
    "SeleniumPage",
]
