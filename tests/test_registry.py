"""
Тесты реестра auditors.
"""

import pytest

from conftest import make_config, scripted
from webaudit.config import AuditorConfig
from webaudit.core.auditor import AuditorContext
from webaudit.errors import ConfigurationError
from webaudit.registry import AuditorKind, AuditorRegistry


class TestAuditorRegistry:

    def test_registration_order(self):
        registry = AuditorRegistry()
        registry.register("b", scripted("b"))
        registry.register("a", scripted("a"))

        assert registry.keys() == ["b", "a"]
        assert len(registry) == 2
        assert "a" in registry

    def test_reregister_keeps_position(self):
        registry = AuditorRegistry()
        first = scripted("a")
        replacement = scripted("a")
        registry.register("a", first)
        registry.register("b", scripted("b"))
        registry.register("a", replacement, AuditorKind.SECURITY)

        assert registry.keys() == ["a", "b"]
        assert registry.get("a").factory is replacement
        assert registry.of_kind(AuditorKind.SECURITY) == ["a"]

    def test_invalid_registration(self):
        registry = AuditorRegistry()
        with pytest.raises(ValueError):
            registry.register("", scripted("x"))
        with pytest.raises(TypeError):
            registry.register("x", "not callable")

    def test_subset_keeps_registration_order(self):
        registry = AuditorRegistry()
        for key in ("one", "two", "three"):
            registry.register(key, scripted(key))

        assert registry.subset(["three", "one", "missing"]).keys() == ["one", "three"]

    def test_create_rejects_non_auditor(self, tmp_path):
        registry = AuditorRegistry()
        registry.register("bad", lambda context, config: object())
        config = make_config(tmp_path, {"bad": AuditorConfig()})
        context = AuditorContext(config=config, area=config.areas[0])

        with pytest.raises(TypeError, match="bad"):
            registry.get("bad").create(context, AuditorConfig())

    def test_validate_against(self, tmp_path):
        registry = AuditorRegistry()
        registry.register("known", scripted("known"))

        registry.validate_against(make_config(tmp_path, {"known": AuditorConfig()}))
        with pytest.raises(ConfigurationError, match="ghost"):
            registry.validate_against(
                make_config(tmp_path, {"known": AuditorConfig(), "ghost": AuditorConfig()})
            )
