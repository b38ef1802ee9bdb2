"""Tests for HTML text extraction and passage selection."""

from placecheck.utils.text import best_passage, html_to_text


class TestHtmlToText:
    def test_boilerplate_removed(self):
        html = (
            "<html><head><style>p {}</style><script>var x;</script></head>"
            "<body><nav>Menu</nav><p>Ungargasse   5</p><footer>Impressum</footer></body></html>"
        )
        assert html_to_text(html) == "Ungargasse 5"

    def test_empty(self):
        assert html_to_text("") == ""


class TestBestPassage:
    def test_most_keywords_wins(self):
        text = "Welcome to Vienna. Ungargasse 5 was completed in 1871. Ungargasse is long."
        assert best_passage(text, ["Ungargasse", "1871"]) == "Ungargasse 5 was completed in 1871."

    def test_first_sentence_wins_ties(self):
        text = "Ungargasse is long. Ungargasse is old."
        assert best_passage(text, ["ungargasse"]) == "Ungargasse is long."

    def test_no_match(self):
        assert best_passage("Nothing here.", ["Ungargasse"]) is None
        assert best_passage("Ungargasse 5.", []) is None
