from utils.urls import make_public_url

BASE = "https://cdn.example.com"


class TestMakePublicUrl:

    def test_public_prefix_is_dropped(self):
        assert make_public_url("public/App/Event/mom.html", BASE) == f"{BASE}/App/Event/mom.html"

    def test_snapshots_prefix_is_kept(self):
        assert make_public_url("snapshots/App/x.pdf", BASE + "/") == f"{BASE}/snapshots/App/x.pdf"

    def test_short_public_key_uses_fallback(self):
        assert make_public_url("public/App/x.html", BASE, fallback=lambda k: f"s3://{k}") == "s3://public/App/x.html"

    def test_no_edge_host(self):
        assert make_public_url("public/App/Event/x.html", "", fallback=lambda k: f"local/{k}") == \
            "local/public/App/Event/x.html"
        assert make_public_url("/public/App/Event/x.html") == "public/App/Event/x.html"
