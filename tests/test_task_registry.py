"""
Task Registry Tests
===================
Tests registration order, allow-list enforcement, and lookups.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import pytest

from taskchain.engine.errors import TaskNotAllowedError
from taskchain.engine.handlers import TaskHandler, as_handler
from taskchain.engine.registry import TaskRegistry, bare_task_name


def h1(ctx, arg):
    return "h1"


def h2(ctx, arg):
    return "h2"


class TestRegistration:
    """Tests for handler registration without an allow-list."""

    @pytest.mark.unit
    def test_register_creates_list(self):
        registry = TaskRegistry()
        registry.register_handler("lint", h1)

        assert registry.is_known("lint")
        assert [h.fn for h in registry.handlers_for("lint")] == [h1]

    @pytest.mark.unit
    def test_registration_order_is_preserved(self):
        registry = TaskRegistry()
        registry.register_handler("build", h2)
        registry.register_handler("build", h1)
        registry.register_handler("build", h2)

        assert [h.fn for h in registry.handlers_for("build")] == [h2, h1, h2]

    @pytest.mark.unit
    def test_handlers_for_unknown_is_empty(self):
        registry = TaskRegistry()
        assert registry.handlers_for("nope") == ()
        assert registry.is_known("nope") is False
        assert "nope" not in registry

    @pytest.mark.unit
    def test_rejects_blank_name(self):
        registry = TaskRegistry()
        with pytest.raises(ValueError):
            registry.register_handler("  ", h1)

    @pytest.mark.unit
    def test_rejects_non_invocable_handler(self):
        registry = TaskRegistry()
        with pytest.raises(TypeError):
            registry.register_handler("build", 42)
        assert registry.is_known("build") is False

    @pytest.mark.unit
    def test_handlers_for_returns_snapshot(self):
        registry = TaskRegistry()
        registry.register_handler("build", h1)
        snapshot = registry.handlers_for("build")
        registry.register_handler("build", h2)

        assert len(snapshot) == 1
        assert len(registry.handlers_for("build")) == 2


class TestAllowList:
    """Tests for define_allowed_tasks and its enforcement."""

    @pytest.mark.unit
    def test_define_creates_empty_lists(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["build", "test"], True, True)

        assert registry.allowed_tasks == ("build", "test")
        for name in ["pre-build", "build", "post-build", "pre-test", "test", "post-test"]:
            assert registry.is_known(name)
            assert registry.handlers_for(name) == ()

    @pytest.mark.unit
    def test_define_without_phase_flags(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["build"])

        assert registry.is_known("build")
        assert registry.is_known("pre-build") is False
        assert registry.is_known("post-build") is False

    @pytest.mark.unit
    def test_register_outside_allow_list_fails_and_lists_known(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["a"])

        with pytest.raises(TaskNotAllowedError) as exc_info:
            registry.register_handler("c", h1)

        assert "a" in exc_info.value.known
        assert "a" in str(exc_info.value)
        assert "c" in str(exc_info.value)
        assert registry.is_known("c") is False

    @pytest.mark.unit
    def test_phase_of_allowed_task_is_exempt(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["a"])

        registry.register_handler("pre-a", h1)
        registry.register_handler("post-a", h2)

        assert [h.fn for h in registry.handlers_for("pre-a")] == [h1]
        assert [h.fn for h in registry.handlers_for("post-a")] == [h2]

    @pytest.mark.unit
    def test_phase_of_unknown_task_is_rejected(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["a"])

        with pytest.raises(TaskNotAllowedError):
            registry.register_handler("pre-b", h1)

    @pytest.mark.unit
    def test_handlers_registered_before_allow_list_survive(self):
        registry = TaskRegistry()
        registry.register_handler("build", h1)
        registry.register_handler("pre-build", h2)

        registry.define_allowed_tasks(["build"], True, True)

        assert [h.fn for h in registry.handlers_for("build")] == [h1]
        assert [h.fn for h in registry.handlers_for("pre-build")] == [h2]

    @pytest.mark.unit
    def test_redefine_replaces_allow_list_and_keeps_handlers(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["a"])
        registry.register_handler("a", h1)

        registry.define_allowed_tasks(["b"])

        assert registry.allowed_tasks == ("b",)
        assert registry.is_known("a")
        assert [h.fn for h in registry.handlers_for("a")] == [h1]

        # "a" is still a known list, so appending to it is allowed.
        registry.register_handler("a", h2)
        with pytest.raises(TaskNotAllowedError):
            registry.register_handler("c", h2)

    @pytest.mark.unit
    def test_define_accepts_single_string(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks("build")
        assert registry.allowed_tasks == ("build",)

    @pytest.mark.unit
    def test_define_deduplicates_names(self):
        registry = TaskRegistry()
        registry.define_allowed_tasks(["a", "b", "a"])
        assert registry.allowed_tasks == ("a", "b")


class TestHandlerNormalization:
    """Tests for as_handler."""

    @pytest.mark.unit
    def test_plain_function(self):
        handler = as_handler(h1)
        assert isinstance(handler, TaskHandler)
        assert handler(None, None) == "h1"
        assert handler.name == "h1"

    @pytest.mark.unit
    def test_capability_object(self):
        class Doubler:
            def run(self, ctx, arg):
                return arg * 2

        handler = as_handler(Doubler())
        assert handler(None, 4) == 8
        assert handler.name == "Doubler"

    @pytest.mark.unit
    def test_already_normalized_is_returned(self):
        handler = as_handler(h1)
        assert as_handler(handler) is handler

    @pytest.mark.unit
    def test_rejects_non_callable(self):
        with pytest.raises(TypeError):
            as_handler("not a handler")


@pytest.mark.unit
def test_bare_task_name():
    assert bare_task_name("pre-build") == "build"
    assert bare_task_name("post-build") == "build"
    assert bare_task_name("build") is None
    assert bare_task_name("pre-") is None
