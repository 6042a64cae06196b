"""页面分析器单元测试"""

from autorecipe.generate.analyzer import analyze, split_classes


def _paths(locations):
    return [(str(lp.path), lp.attr, lp.examples[0]) for lp in locations]


class TestSplitClasses:
    """class 属性拆分测试"""

    def test_whitespace(self):
        assert split_classes("  item   big\tred ") == ("item", "big", "red")

    def test_drop_dotted(self):
        assert split_classes("a b.c d") == ("a", "d")


class TestAnalyzer:
    """分析器测试"""

    def test_text_and_attribute_candidates(self, list_html):
        result = analyze(list_html)
        first_three = _paths(result.locations)[:3]
        assert first_three == [
            ("body > div.list > div.item > span.title", "", "Alpha"),
            ("body > div.list > div.item > a", "href", "/e/1"),
            ("body > div.list > div.item > a", "", "Details"),
        ]
        assert len(result.locations) == 15

    def test_repeated_siblings_get_nth_child(self, list_html):
        result = analyze(list_html)
        paths = [str(lp.path) for lp in result.locations if lp.attr == "href"]
        assert paths[0] == "body > div.list > div.item > a"
        assert paths[1] == "body > div.list > div.item:nth-child(2) > a"
        assert paths[4] == "body > div.list > div.item:nth-child(5) > a"

    def test_outside_body_ignored(self):
        html = "<html><head><title>T</title></head><body><p>x</p></body></html>"
        result = analyze(html)
        assert _paths(result.locations) == [("body > p", "", "x")]

    def test_script_and_style_skipped(self):
        html = "<html><body><script>var a = 1;</script><style>p{}</style><p>ok</p></body></html>"
        result = analyze(html)
        assert [lp.examples[0] for lp in result.locations] == ["ok"]

    def test_text_index_counts_child_nodes(self):
        html = "<html><body><p>one<br>two<b>bold</b>three</p></body></html>"
        result = analyze(html)
        p_texts = [(lp.examples[0], lp.text_index) for lp in result.locations if str(lp.path) == "body > p"]
        assert p_texts == [("one", 0), ("two", 2), ("three", 4)]

    def test_img_src_candidate(self):
        html = '<html><body><div><img src="/a.png"></div></body></html>'
        result = analyze(html)
        assert _paths(result.locations) == [("body > div > img", "src", "/a.png")]

    def test_empty_attribute_not_recorded(self):
        html = '<html><body><a href="">x</a></body></html>'
        result = analyze(html, find_next=False)
        assert _paths(result.locations) == [("body > a", "", "x")]

    def test_aria_label_candidate(self):
        html = '<html><body><a href="/x" aria-label="More info">i</a></body></html>'
        result = analyze(html, find_next=False)
        attrs = {lp.attr for lp in result.locations}
        assert attrs == {"href", "aria-label", ""}

    def test_next_link_withdrawn_from_locations(self, list_html_with_next):
        result = analyze(list_html_with_next)
        assert [str(lp.path) for lp in result.next_pages] == ["body > div.pager > a"]
        assert result.next_pages[0].examples == ["/events?page=2"]
        assert all("div.pager" not in str(lp.path) for lp in result.locations)

    def test_next_detected_by_aria_label(self):
        html = '<html><body><a href="/p2" aria-label="Next"><span>&raquo;</span></a></body></html>'
        result = analyze(html)
        assert len(result.next_pages) == 1
        assert result.locations == []

    def test_other_links_become_pagination(self, list_html):
        result = analyze(list_html)
        assert len(result.pagination) == 5
        assert result.next_pages == []

    def test_find_next_disabled(self, list_html_with_next):
        result = analyze(list_html_with_next, find_next=False)
        assert result.next_pages == []
        pager = [lp for lp in result.locations if "div.pager" in str(lp.path)]
        assert {lp.attr for lp in pager} == {"href", ""}

    def test_empty_markup(self):
        result = analyze("")
        assert result.locations == []
