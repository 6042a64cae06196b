"""簇展开单元测试"""

import pytest

from autorecipe.fetch.document import Document
from autorecipe.generate import expander as expander_module
from autorecipe.generate.expander import ClusterExpander, find_clusters
from autorecipe.generate.options import GenerateOptions
from autorecipe.generate.pipeline import analyze_page
from autorecipe.scrape.models import ConfigID

SLUG = "example-com-events"


def _expand(html, url, **overrides):
    options = GenerateOptions(url=url, min_occs=[5], **overrides)
    document = Document.from_string(html, url)
    analysis = analyze_page(document.outer_html(), options, 5)
    expander = ClusterExpander(document, options)
    return expander.expand(
        ConfigID(SLUG, "05a"), analysis.locations, analysis.next_pages, analysis.pagination
    )


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def titles_only_html():
    items = "".join(f"<li><span>{t}</span></li>" for t in ["Alpha", "Bravo", "Charlie", "Delta", "Echo"])
    return f"<html><head><title>T</title></head><body><ul>{items}</ul></body></html>"


@pytest.fixture
def numbered_pages_html(make_list_page, titles):
    """没有 "Next" 链接，只有页码链接"""
    links = "".join(f'<li><a href="/events?page={i}">{i}</a></li>' for i in range(1, 4))
    return make_list_page(titles, extra=f'  <ul class="pages">{links}</ul>\n')


# ============================================================================
# 测试
# ============================================================================

class TestClusterExpander:
    """簇展开测试"""

    def test_ids_and_root(self, list_html, list_url):
        results = _expand(list_html, list_url)
        assert list(results) == [f"{SLUG}__05a", f"{SLUG}__05aa", f"{SLUG}__05ab"]
        top = results[f"{SLUG}__05a"]
        assert top.scrapers[0].selector == "body > div.list > div.item"
        assert top.scrapers[0].name == f"{SLUG}__05a"
        assert len(top.scrapers[0].fields) == 2
        assert len(top.records) == 5

    def test_child_root_one_node_deeper(self, list_html, list_url):
        results = _expand(list_html, list_url)
        child = results[f"{SLUG}__05aa"]
        assert child.scrapers[0].selector == "body > div.list > div.item > a"
        assert child.scrapers[0].fields[0].location[0].selector == ""

    def test_relative_field_selectors(self, list_html, list_url):
        top = _expand(list_html, list_url)[f"{SLUG}__05a"]
        selectors = sorted(f.location[0].selector for f in top.scrapers[0].fields)
        assert selectors == ["a", "span.title"]

    def test_records_preview(self, list_html, list_url):
        top = _expand(list_html, list_url)[f"{SLUG}__05a"]
        url_field = top.scrapers[0].detail_page_url_fields()[0].name
        assert [r[url_field + "__Aurl"] for r in top.records] == [
            f"https://example.com/e/{i}" for i in range(1, 6)
        ]

    def test_child_equal_to_parent_pruned(self, titles_only_html, list_url):
        results = _expand(titles_only_html, list_url)
        assert list(results) == [f"{SLUG}__05a"]
        assert results[f"{SLUG}__05a"].scrapers[0].selector == "body > ul > li"

    def test_pruning_disabled(self, titles_only_html, list_url):
        results = _expand(titles_only_html, list_url, do_pruning=False)
        assert list(results) == [f"{SLUG}__05a", f"{SLUG}__05aa"]

    def test_require_string(self, list_html, list_url):
        results = _expand(list_html, list_url, require_string="Charlie")
        assert list(results) == [f"{SLUG}__05a", f"{SLUG}__05ab"]

    def test_min_records(self, list_html, list_url):
        assert _expand(list_html, list_url, min_records=6) == {}

    def test_require_dates(self, list_html, list_url):
        assert _expand(list_html, list_url, require_dates=True) == {}

    def test_detail_mode_without_url_fields(self, titles_only_html, list_url):
        assert _expand(titles_only_html, list_url, do_detail_pages=True) == {}

    def test_empty_preview_excluded_children_expanded(self, list_html, list_url, monkeypatch):
        real_scrape = expander_module.scrape_document

        def scrape_without_top(scraper, document, recognizer=None):
            if scraper.selector == "body > div.list > div.item":
                return []
            return real_scrape(scraper, document, recognizer)

        monkeypatch.setattr(expander_module, "scrape_document", scrape_without_top)
        results = _expand(list_html, list_url)
        assert list(results) == [f"{SLUG}__05aa", f"{SLUG}__05ab"]
        assert all(recipe.records for recipe in results.values())

    def test_depth_cap(self, list_html, list_url):
        results = _expand(list_html, list_url, max_recursion_depth=1)
        assert list(results) == [f"{SLUG}__05a"]

    def test_paginators_from_next_link(self, list_html_with_next, list_url):
        top = _expand(list_html_with_next, list_url)[f"{SLUG}__05a"]
        paginators = top.scrapers[0].paginators
        assert [(p.location.selector, p.location.attr) for p in paginators] == [("body > div.pager > a", "href")]

    def test_record_links_are_not_paginators(self, list_html, list_url):
        for recipe in _expand(list_html, list_url).values():
            assert recipe.scrapers[0].paginators == []

    def test_paginators_from_page_links(self, numbered_pages_html, list_url):
        results = _expand(numbered_pages_html, list_url)
        assert f"{SLUG}__05a" in results
        for recipe in results.values():
            paginators = recipe.scrapers[0].paginators
            assert len(paginators) == 1
            assert paginators[0].location.selector == "body > ul.pages > li > a"
            assert paginators[0].location.attr == "href"

    def test_next_link_preferred_over_page_links(self, make_list_page, titles, list_url):
        links = "".join(f'<li><a href="/events?page={i}">{i}</a></li>' for i in range(1, 4))
        html = make_list_page(
            titles,
            extra=(
                f'  <ul class="pages">{links}</ul>\n'
                '  <div class="pager"><a href="/events?page=2">Next</a></div>\n'
            ),
        )
        top = _expand(html, list_url)[f"{SLUG}__05a"]
        assert [p.location.selector for p in top.scrapers[0].paginators] == ["body > div.pager > a"]

    def test_deterministic(self, list_html, list_url):
        first = _expand(list_html, list_url)
        second = _expand(list_html, list_url)
        assert [r.to_yaml() for r in first.values()] == [r.to_yaml() for r in second.values()]


class TestFindClusters:
    """分簇测试"""

    def test_keys_one_node_deeper(self, list_html, list_url):
        options = GenerateOptions(url=list_url, min_occs=[5])
        analysis = analyze_page(list_html, options, 5)
        from autorecipe.generate.root import find_root

        root = find_root(analysis.locations)
        clusters = find_clusters(analysis.locations, root)
        assert sorted(clusters) == [
            "body > div.list > div.item > a",
            "body > div.list > div.item > span.title",
        ]
