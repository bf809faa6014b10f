"""Page fixtures shared by the test modules."""

from __future__ import annotations


def make_page(body: str, *, title: str = "Test Page", toc: bool = True, outside: str = "") -> str:
    """Return a full rendered page with the usual layout containers."""
    toc_markup = '<nav class="content__toc"><ul></ul></nav>' if toc else ""
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        f"<head><meta charset=\"utf-8\"><title>{title}</title></head>\n"
        "<body>\n"
        f"<header><a href=\"/\">Home</a>{outside}</header>\n"
        "<main id=\"content\">\n"
        f"{toc_markup}\n"
        f"<div class=\"content__body\">\n{body}\n</div>\n"
        "</main>\n"
        "</body>\n"
        "</html>\n"
    )


def make_search_page(title: str, headings: list[str], body: str) -> str:
    heading_markup = "".join(f"<h2>{heading}</h2>\n" for heading in headings)
    return make_page(f"{heading_markup}<p>{body}</p>", title=title, toc=False)
