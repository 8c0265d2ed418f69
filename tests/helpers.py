import json

import httpx


def rss_item(title, link, description, extra=""):
    return (
        f"<item><title>{title}</title><link>{link}</link>"
        f"<description>{description}</description>{extra}</item>"
    )


def rss_feed(*items):
    return (
        '<?xml version="1.0"?><rss version="2.0"><channel><title>Feed</title>'
        + "".join(items)
        + "</channel></rss>"
    )


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def gemini_response(items, fenced=True):
    text = json.dumps(items)
    if fenced:
        text = f"```json\n{text}\n```"
    return httpx.Response(200, json=gemini_payload(text))


def prompt_of(request: httpx.Request) -> str:
    return json.loads(request.content)["contents"][0]["parts"][0]["text"]
