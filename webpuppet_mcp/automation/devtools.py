"""Default automation engine built on the browser's DevTools HTTP endpoints.

DevToolsAutomation drives a Chromium-family browser launched with
--remote-debugging-port. Each provider gets its own target (tab):

    GET /json/version       readiness probe
    PUT /json/new?<url>     open a target at a URL
    GET /json/list          read target URLs and titles
    GET /json/close/<id>    close a target

Screenshots use a separate one-shot headless run with --screenshot, so they
work whether or not the main browser is visible.

Example usage:
    automation = await create_devtools_automation(headless=True, screening_config=ScreeningConfig())
    session = await automation.get_session(Provider.CLAUDE)
    await session.navigate("https://claude.ai/new")
    print(await session.get_title())
    await automation.close()
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import quote, quote_plus

import httpx

from webpuppet_mcp.automation.detection import BrowserDetector
from webpuppet_mcp.automation.interfaces import (
    PromptRequest,
    PromptResponse,
    ProviderCapabilities,
    ScreeningResult,
)
from webpuppet_mcp.automation.providers import DECLARED_CAPABILITIES, Provider
from webpuppet_mcp.automation.screening import ScreeningConfig, screen_response
from webpuppet_mcp.core.errors import AutomationError

logger = logging.getLogger(__name__)

DEFAULT_DEVTOOLS_PORT = 9222
DEFAULT_STARTUP_TIMEOUT = 15.0
SCREENSHOT_TIMEOUT = 30.0
SCREENSHOT_WINDOW_SIZE = "1280,800"
TITLE_TIMEOUT = 10.0

_POLL_INTERVAL = 0.2

# Providers whose results can be opened straight from a query URL
QUERY_URL_TEMPLATES: dict[Provider, str] = {
    Provider.PERPLEXITY: "https://www.perplexity.ai/search?q={query}",
    Provider.KAGGLE: "https://www.kaggle.com/datasets?search={query}",
}


class DevToolsSession:
    """A DevTools target bound to one provider.

    navigate() opens the new URL in a fresh target and closes the old one,
    since the HTTP endpoints cannot drive an existing tab.
    """

    def __init__(self, automation: DevToolsAutomation, target_id: str, url: str) -> None:
        self._automation = automation
        self._target_id = target_id
        self._requested_url = url

    @property
    def target_id(self) -> str:
        return self._target_id

    async def navigate(self, url: str) -> None:
        target = await self._automation.open_target(url)
        previous = self._target_id
        self._target_id = target["id"]
        self._requested_url = url
        await self._automation.close_target(previous)

    async def current_url(self) -> str:
        target = await self._automation.find_target(self._target_id)
        return target.get("url") or self._requested_url

    async def get_title(self) -> str:
        target = await self._automation.find_target(self._target_id)
        return target.get("title", "")


class DevToolsAutomation:
    """AutomationHandle backed by the DevTools HTTP endpoints.

    Args:
        client: httpx client whose base_url points at the DevTools server.
        screening_config: Screening settings for prompt responses.
        headless: Whether the browser runs without a window.
        binary: Browser executable (used for one-shot screenshots).
        process: The launched browser process, if this instance owns one.
        profile_dir: Temporary profile directory to delete on close().
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        screening_config: ScreeningConfig | None = None,
        headless: bool = True,
        binary: Path | None = None,
        process: asyncio.subprocess.Process | None = None,
        profile_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._screening_config = screening_config or ScreeningConfig()
        self._headless = headless
        self._binary = binary
        self._process = process
        self._owned_profile_dir = profile_dir
        self._sessions: dict[Provider, DevToolsSession] = {}
        self._session_lock = asyncio.Lock()
        self._closed = False

    @property
    def headless(self) -> bool:
        return self._headless

    @property
    def screening_config(self) -> ScreeningConfig:
        return self._screening_config

    # === DevTools HTTP endpoints ===

    async def _request(self, method: str, path: str) -> Any:
        try:
            response = await self._client.request(method, path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AutomationError(
                f"DevTools {method} {path} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise AutomationError(f"DevTools {method} {path} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # /json/close answers with plain text
            return response.text

    async def version(self) -> dict[str, Any]:
        data = await self._request("GET", "/json/version")
        if not isinstance(data, dict):
            raise AutomationError("DevTools /json/version returned an unexpected payload")
        return data

    async def list_targets(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/json/list")
        if not isinstance(data, list):
            raise AutomationError("DevTools /json/list returned an unexpected payload")
        return [t for t in data if isinstance(t, dict)]

    async def open_target(self, url: str) -> dict[str, Any]:
        data = await self._request("PUT", f"/json/new?{quote(url, safe=':/?&=%+')}")
        if not isinstance(data, dict) or "id" not in data:
            raise AutomationError(f"DevTools did not open a target for {url}")
        logger.debug("Opened target %s for %s", data["id"], url)
        return data

    async def close_target(self, target_id: str) -> None:
        await self._request("GET", f"/json/close/{target_id}")
        logger.debug("Closed target %s", target_id)

    async def find_target(self, target_id: str) -> dict[str, Any]:
        for target in await self.list_targets():
            if target.get("id") == target_id:
                return target
        raise AutomationError(f"Browser target {target_id} is no longer open")

    # === AutomationHandle ===

    async def get_session(self, provider: Provider) -> DevToolsSession:
        async with self._session_lock:
            session = self._sessions.get(provider)
            if session is None:
                target = await self.open_target(provider.home_url)
                session = DevToolsSession(self, target["id"], provider.home_url)
                self._sessions[provider] = session
            return session

    async def authenticate(self, provider: Provider) -> None:
        """Open the provider's home page and confirm the target loaded."""
        session = await self.get_session(provider)
        url = await session.current_url()
        if not url or url == "about:blank":
            raise AutomationError(f"{provider.display_name} did not load in the browser")
        logger.info("Session ready for %s at %s", provider, url)

    async def prompt_screened(
        self, provider: Provider, request: PromptRequest
    ) -> tuple[PromptResponse, ScreeningResult]:
        """Run a query on a provider that accepts it in the URL.

        The response text is the result page's title and link. Chat
        providers need page scripting and are rejected.
        """
        template = QUERY_URL_TEMPLATES.get(provider)
        if template is None:
            raise AutomationError(
                f"Sending prompts to {provider.display_name} requires page scripting, "
                "which the DevTools HTTP endpoints do not provide"
            )

        query = request.message
        if request.context:
            query = f"{request.context}\n\n{query}"
        url = template.format(query=quote_plus(query))

        session = await self.get_session(provider)
        await session.navigate(url)
        title = await self._wait_for_title(session)
        page_url = await session.current_url()

        text = f"{title or provider.display_name}\n{page_url}"
        screening = screen_response(text, self._screening_config)
        response = PromptResponse(text=text, provider=str(provider), conversation_url=page_url)
        return response, screening

    async def _wait_for_title(
        self, session: DevToolsSession, timeout: float = TITLE_TIMEOUT
    ) -> str:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        title = ""
        while True:
            title = await session.get_title()
            if title or loop.time() >= deadline:
                return title
            await asyncio.sleep(_POLL_INTERVAL)

    def provider_capabilities(self, provider: Provider) -> ProviderCapabilities | None:
        return DECLARED_CAPABILITIES.get(provider)

    async def screenshot(self, url: str) -> bytes:
        """Capture a PNG of url with a one-shot headless browser run."""
        if self._binary is None:
            raise AutomationError("No browser binary available for screenshots")
        return await capture_screenshot(self._binary, url)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        for provider, session in list(self._sessions.items()):
            try:
                await self.close_target(session.target_id)
            except AutomationError as e:
                logger.debug("Ignoring close failure for %s: %s", provider, e)
        self._sessions.clear()

        await self._client.aclose()

        if self._process is not None and self._process.returncode is None:
            self._process.terminate()
            try:
                await asyncio.wait_for(self._process.wait(), timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning("Browser did not exit after terminate; killing it")
                self._process.kill()
                await self._process.wait()

        if self._owned_profile_dir is not None:
            shutil.rmtree(self._owned_profile_dir, ignore_errors=True)
        logger.info("Browser automation closed")


async def capture_screenshot(
    binary: Path, url: str, timeout: float = SCREENSHOT_TIMEOUT
) -> bytes:
    """Run the browser headless with --screenshot and return the PNG bytes."""
    with tempfile.TemporaryDirectory(prefix="webpuppet-shot-") as tmp:
        output = Path(tmp) / "screenshot.png"
        process = await asyncio.create_subprocess_exec(
            str(binary),
            "--headless=new",
            "--disable-gpu",
            "--hide-scrollbars",
            f"--user-data-dir={Path(tmp) / 'profile'}",
            f"--window-size={SCREENSHOT_WINDOW_SIZE}",
            f"--screenshot={output}",
            url,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise AutomationError(f"Screenshot of {url} timed out after {timeout}s") from e

        if not output.exists():
            raise AutomationError(
                f"Browser exited with code {process.returncode} without writing a screenshot"
            )
        return output.read_bytes()


async def wait_for_devtools(
    client: httpx.AsyncClient,
    timeout: float = DEFAULT_STARTUP_TIMEOUT,
    poll_interval: float = _POLL_INTERVAL,
) -> dict[str, Any]:
    """Poll /json/version until the DevTools server answers.

    Raises:
        AutomationError: If it does not answer within timeout seconds.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    last_error: Exception | None = None
    while loop.time() < deadline:
        try:
            response = await client.get("/json/version")
            if response.status_code == 200:
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            last_error = e
        await asyncio.sleep(poll_interval)
    raise AutomationError(
        f"DevTools endpoint did not become ready within {timeout}s"
        + (f": {last_error}" if last_error else "")
    )


async def create_devtools_automation(
    headless: bool,
    screening_config: ScreeningConfig,
    *,
    port: int = DEFAULT_DEVTOOLS_PORT,
    binary: str | None = None,
    startup_timeout: float = DEFAULT_STARTUP_TIMEOUT,
    profile_dir: str | None = None,
    detector: BrowserDetector | None = None,
) -> DevToolsAutomation:
    """Launch a browser with remote debugging and return a handle to it.

    Args:
        headless: Run without a window.
        screening_config: Screening settings for prompt responses.
        port: Remote debugging port.
        binary: Browser executable; detected when None.
        startup_timeout: Seconds to wait for the DevTools endpoint.
        profile_dir: Persistent profile directory; a temporary one is used
            (and deleted on close) when None.
        detector: Detector used when binary is None.

    Raises:
        AutomationError: If no browser is found or it fails to start.
    """
    if binary:
        executable = Path(binary).expanduser()
    else:
        detected = await asyncio.to_thread((detector or BrowserDetector()).detect_first)
        if detected is None:
            raise AutomationError(
                "No supported browsers detected. Please install Brave, Chrome, or Chromium."
            )
        executable = detected.executable_path

    owned_profile: Path | None = None
    if profile_dir:
        user_data_dir = Path(profile_dir).expanduser()
        user_data_dir.mkdir(parents=True, exist_ok=True)
    else:
        owned_profile = Path(tempfile.mkdtemp(prefix="webpuppet-profile-"))
        user_data_dir = owned_profile

    args = [
        f"--remote-debugging-port={port}",
        f"--user-data-dir={user_data_dir}",
        "--no-first-run",
        "--no-default-browser-check",
    ]
    if headless:
        args.append("--headless=new")
    args.append("about:blank")

    logger.info("Launching %s (headless=%s, port=%d)", executable, headless, port)
    try:
        process = await asyncio.create_subprocess_exec(
            str(executable),
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        if owned_profile is not None:
            shutil.rmtree(owned_profile, ignore_errors=True)
        raise AutomationError(f"Failed to launch browser {executable.name}: {e}") from e

    client = httpx.AsyncClient(base_url=f"http://127.0.0.1:{port}", timeout=10.0)
    automation = DevToolsAutomation(
        client,
        screening_config=screening_config,
        headless=headless,
        binary=executable,
        process=process,
        profile_dir=owned_profile,
    )

    try:
        info = await wait_for_devtools(client, timeout=startup_timeout)
    except AutomationError:
        await automation.close()
        raise

    logger.info("DevTools ready: %s", info.get("Browser", "unknown browser"))
    return automation
