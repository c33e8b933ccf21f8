import asyncio
import json
import logging
import nodriver
from nodriverfetch import FetchInterceptor, ResponseForRequest, cdp

URL = "https://example.com"

class MockApi(FetchInterceptor):
    async def on_request(self, request):
        await request.respond(ResponseForRequest(
            status=200,
            content_type="text/html; charset=utf-8",
            headers={"Cache-Control": "no-store", "X-Mocked": ["yes", "really"]},
            body="<html><body><h1>mocked</h1><pre>%s</pre></body></html>" % json.dumps(
                {"url": request.url, "method": request.request.method}
            ),
        ))

async def main():
    logging.basicConfig(level=logging.INFO)
    browser = await nodriver.start(headless=True)
    tab = await browser.get("about:blank")
    patterns = [cdp.fetch.RequestPattern(url_pattern=URL + "/*")]
    async with MockApi(tab, patterns):
        await tab.get(URL)
        print(await tab.get_content())
    browser.stop()

if __name__ == "__main__":
    asyncio.run(main())
