"""Tests for the animation library suppressor registry."""

from unittest.mock import AsyncMock

import pytest

from quick_vrt.stabilizer.libraries import (
    LibrarySuppressor,
    register_library_suppressor,
    registered_suppressors,
    suppress_animation_libraries,
    unregister_library_suppressor,
)


def _entry(name: str) -> LibrarySuppressor:
    return LibrarySuppressor(name=name, detector=f"window.{name}", suppressor=f"window.{name}.pause();")


class TestRegistry:
    def test_builtin_libraries(self):
        names = {e.name for e in registered_suppressors()}
        assert {"gsap", "aos", "lottie", "swiper"} <= names

    def test_register_replaces_by_name(self):
        try:
            register_library_suppressor(_entry("fancyfx"))
            register_library_suppressor(LibrarySuppressor("fancyfx", "window.fx2", "window.fx2.stop();"))
            matches = [e for e in registered_suppressors() if e.name == "fancyfx"]
            assert len(matches) == 1
            assert matches[0].detector == "window.fx2"
        finally:
            unregister_library_suppressor("fancyfx")
        assert "fancyfx" not in {e.name for e in registered_suppressors()}

    def test_registered_suppressors_is_a_copy(self):
        snapshot = registered_suppressors()
        snapshot.clear()
        assert registered_suppressors()


class TestSuppressAnimationLibraries:
    """Each entry runs independently; one failing entry never stops the rest."""

    @pytest.mark.asyncio
    async def test_only_detected_libraries_are_paused(self, mock_page):
        async def evaluate(script, *args):
            if "return !!(" in script:
                return "window.alpha" in script
            return None

        mock_page.evaluate = AsyncMock(side_effect=evaluate)
        paused = await suppress_animation_libraries(mock_page, [_entry("alpha"), _entry("beta")])

        assert paused == ["alpha"]
        suppressor_calls = [c for c in mock_page.evaluate.await_args_list if "pause();" in c.args[0]]
        assert len(suppressor_calls) == 1

    @pytest.mark.asyncio
    async def test_failing_entry_is_isolated(self, mock_page):
        async def evaluate(script, *args):
            if "return !!(" in script:
                return True
            if "window.alpha.pause" in script:
                raise Exception("alpha exploded")
            return None

        mock_page.evaluate = AsyncMock(side_effect=evaluate)
        paused = await suppress_animation_libraries(mock_page, [_entry("alpha"), _entry("beta")])

        assert paused == ["beta"]

    @pytest.mark.asyncio
    async def test_empty_registry(self, mock_page):
        assert await suppress_animation_libraries(mock_page, []) == []
        mock_page.evaluate.assert_not_awaited()
