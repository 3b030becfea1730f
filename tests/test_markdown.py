from deep_analyst.markdown import P_TAG, format_markdown


def test_empty_text():
    assert format_markdown("") == ""


def test_plain_text_is_a_single_paragraph():
    assert format_markdown("Just a plain sentence.") == f"{P_TAG}Just a plain sentence.</p>"


def test_line_breaks_and_paragraphs():
    html = format_markdown("first line\nsecond line\n\nnext paragraph")
    assert html == f"{P_TAG}first line<br />second line</p>{P_TAG}next paragraph</p>"


def test_headings():
    html = format_markdown("# One\n## Two\n### Three")
    assert html.startswith("<h1 ")
    assert ">One</h1>" in html
    assert ">Two</h2>" in html
    assert ">Three</h3>" in html
    assert "<p" not in html


def test_bold_is_non_greedy():
    html = format_markdown("**a** and **b**")
    assert "<strong>a</strong> and <strong>b</strong>" in html


def test_contiguous_list_items_share_one_list():
    html = format_markdown("Intro\n* one\n- two\n\nOutro")
    assert html.count("<ul ") == 1
    assert html.count("<li ") == 2
    assert html.index("Intro") < html.index("<ul ") < html.index("Outro")
    assert html.endswith(f"{P_TAG}Outro</p>")


def test_separate_lists():
    html = format_markdown("- a\n\nbetween\n\n- b")
    assert html.count("<ul ") == 2


def test_bold_list_item():
    html = format_markdown("* **Executive Summary**: short")
    assert "<li " in html
    assert "<strong>Executive Summary</strong>: short</li>" in html


def test_table_rows_are_wrapped_and_separator_dropped():
    html = format_markdown("| Model | Score |\n|---|:---:|\n| A | 1 |\n| B | 2 |")
    assert html.count("<table ") == 1
    assert html.count("<tr ") == 3
    assert "---" not in html
    assert ">Model</td>" in html
    assert html.endswith("</table></div>")


def test_no_table_without_rows():
    assert "<table" not in format_markdown("a | b")


def test_html_is_not_escaped():
    assert "<em>x</em>" in format_markdown("<em>x</em>")
