import pytest

from utils.env import get_env_str, get_env_bool, get_env_int, get_env_float


class TestEnvHelpers:

    def test_str_strips_and_defaults(self, monkeypatch):
        monkeypatch.setenv("RENDER_TEST_VALUE", "  value  ")
        monkeypatch.setenv("RENDER_TEST_BLANK", "   ")
        assert get_env_str("RENDER_TEST_VALUE") == "value"
        assert get_env_str("RENDER_TEST_BLANK", default="d") == "d"
        assert get_env_str("RENDER_TEST_UNSET", default="d") == "d"

    def test_required(self, monkeypatch):
        monkeypatch.delenv("RENDER_TEST_UNSET", raising=False)
        with pytest.raises(ValueError, match="RENDER_TEST_UNSET"):
            get_env_str("RENDER_TEST_UNSET", required=True)

    @pytest.mark.parametrize("raw,expected", [("1", True), ("TRUE", True), ("on", True), ("no", False),
                                              ("junk", False)])
    def test_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("RENDER_TEST_FLAG", raw)
        assert get_env_bool("RENDER_TEST_FLAG") is expected

    def test_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("RENDER_TEST_INT", "four")
        monkeypatch.setenv("RENDER_TEST_FLOAT", "2.5")
        assert get_env_int("RENDER_TEST_INT", 4) == 4
        assert get_env_float("RENDER_TEST_FLOAT", 1.0) == 2.5
