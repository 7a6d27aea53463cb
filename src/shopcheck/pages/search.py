"""Search results page."""

from __future__ import annotations

from shopcheck.pages.base import BasePage


class SearchPage(BasePage):
    """Advanced search form and its result grid."""

    catalog_name = "product"
    url_path = "/search"
    landmark = "search_page.search_input"

    async def search(self, term: str) -> None:
        await self.type("search_page.search_input", term)
        await self.click("search_page.search_button")

    async def result_titles(self) -> list[str]:
        return await self.texts_of("search_page.results.product_title")

    async def result_count(self) -> int:
        return await self.count_of("search_page.results.product_item")

    async def has_no_results(self) -> bool:
        return await self.is_displayed("search_page.results.no_results")

    async def no_results_message(self) -> str:
        return await self.text_of("search_page.results.no_results")
