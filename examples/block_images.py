import asyncio
import logging
import nodriver
from nodriverfetch import FetchInterceptor, cdp

URL = "https://example.com"

class BlockImages(FetchInterceptor):
    async def on_request(self, request):
        if request.resource_type == cdp.network.ResourceType.IMAGE:
            await request.abort("BlockedByClient")

async def main():
    # show the per-request debug records
    logging.basicConfig(level=logging.DEBUG)
    browser = await nodriver.start(headless=True)
    tab = await browser.get("about:blank")
    async with BlockImages(tab):
        await tab.get(URL)
        await tab.sleep(2)
    browser.stop()

if __name__ == "__main__":
    asyncio.run(main())
