"""
Task Runner Tests
=================
Tests the public TaskRunner facade: registration, series runs, pipes,
default timeouts, and tasks directory loading.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import asyncio
import textwrap
import time
from pathlib import Path

import pytest

from taskchain import (
    HandlerTimeoutError,
    InvalidPipeValueError,
    NoTasksSpecifiedError,
    TaskNotAllowedError,
    TaskRunner,
    TaskRunnerConfig,
    UnknownTaskError,
    create_runner,
)


@pytest.fixture
def runner():
    return TaskRunner(TaskRunnerConfig(tasks_dir=None, debug=False, default_timeout=None))


def _value(v):
    return lambda ctx, args: v


class TestRunnerRegistration:
    """Tests for registration through the runner."""

    @pytest.mark.unit
    def test_register_without_allow_list(self, runner):
        runner.register_handler("lint", _value("ok"))
        assert runner.registry.is_known("lint")
        assert runner.allowed_tasks is None

    @pytest.mark.unit
    def test_register_outside_allow_list(self, runner):
        runner.define_allowed_tasks(["a"])
        with pytest.raises(TaskNotAllowedError) as exc_info:
            runner.register_handler("c", _value(1))
        assert "a" in str(exc_info.value)

    @pytest.mark.unit
    def test_summary_lists_tasks(self, runner):
        runner.define_allowed_tasks(["build"], True, False)

        def compile_sources(ctx, args):
            return None

        runner.register_handler("build", compile_sources)
        summary = runner.summary()

        assert "Allowed tasks: build" in summary
        assert "| build | compile_sources |" in summary
        assert "| pre-build | - |" in summary


class TestRunnerRun:
    """Tests for series execution through the runner."""

    @pytest.mark.asyncio
    async def test_run_pre_main_post(self, runner):
        runner.define_allowed_tasks(["build"], True, True)
        runner.register_handler("pre-build", _value("r1"))
        runner.register_handler("build", _value("r2"))
        runner.register_handler("post-build", _value("r3"))

        report = await runner.run("build", {"env": "ci"}, ["--fast"])

        assert report.to_list() == [
            {"phase": "pre-build", "results": ["r1"]},
            {"phase": "build", "results": ["r2"]},
            {"phase": "post-build", "results": ["r3"]},
        ]

    @pytest.mark.asyncio
    async def test_run_unknown_task(self, runner):
        runner.register_handler("lint", _value("ok"))
        with pytest.raises(UnknownTaskError):
            await runner.run("unknown-task")

    @pytest.mark.asyncio
    async def test_run_without_tasks_or_allow_list(self, runner):
        with pytest.raises(NoTasksSpecifiedError):
            await runner.run()

    @pytest.mark.asyncio
    async def test_run_timeout_at_requested_time(self, runner):
        async def hang(ctx, args):
            await asyncio.Event().wait()

        runner.register_handler("stuck", hang)

        started = time.monotonic()
        with pytest.raises(HandlerTimeoutError):
            await runner.run("stuck", None, None, 0.5)
        assert time.monotonic() - started < 1.5

    @pytest.mark.asyncio
    async def test_default_timeout_applies(self):
        async def hang(ctx, args):
            await asyncio.Event().wait()

        runner = TaskRunner(TaskRunnerConfig(tasks_dir=None, default_timeout=0.05))
        runner.register_handler("stuck", hang)

        with pytest.raises(HandlerTimeoutError):
            await runner.run("stuck")
        with pytest.raises(HandlerTimeoutError):
            await runner.pipe("stuck", initial_value=1)

    @pytest.mark.asyncio
    async def test_explicit_zero_disables_default_timeout(self):
        async def slow(ctx, args):
            await asyncio.sleep(0.1)
            return "done"

        runner = TaskRunner(TaskRunnerConfig(tasks_dir=None, default_timeout=0.01))
        runner.register_handler("slow", slow)

        report = await runner.run("slow", timeout=0)
        assert report.results_for("slow") == ["done"]


class TestRunnerPipe:
    """Tests for pipe execution through the runner."""

    @pytest.mark.asyncio
    async def test_pipe_transform_chain(self, runner):
        runner.register_handler("transform", lambda ctx, d: {"value": d["value"] + 1})
        runner.register_handler("transform", lambda ctx, d: {"value": d["value"] + 1})

        result = await runner.pipe("transform", initial_value={"value": 1}, context={"ctx": 1})

        assert result == {"value": 3}

    @pytest.mark.asyncio
    async def test_pipe_null_rejects(self, runner):
        calls = []
        runner.register_handler("transform", lambda ctx, d: None)
        runner.register_handler("post-transform", lambda ctx, d: calls.append(d) or d)

        with pytest.raises(InvalidPipeValueError):
            await runner.pipe("transform", initial_value={"value": 1})
        assert calls == []

    @pytest.mark.asyncio
    async def test_pipe_defaults_to_allow_list(self, runner):
        runner.define_allowed_tasks(["a", "b"])
        runner.register_handler("a", lambda ctx, d: d + 1)
        runner.register_handler("b", lambda ctx, d: d * 10)

        assert await runner.pipe(initial_value=1) == 20

    @pytest.mark.asyncio
    async def test_pipe_requires_initial_value(self, runner):
        runner.register_handler("t", lambda ctx, d: d)
        with pytest.raises(TypeError):
            await runner.pipe("t")


class TestRunnerTasksDir:
    """Tests for loading task modules through the runner config."""

    @pytest.mark.asyncio
    async def test_tasks_dir_loaded_on_construction(self, tmp_path: Path):
        (tmp_path / "01_define.py").write_text(
            textwrap.dedent(
                """
                def register(registry, logger):
                    registry.define_allowed_tasks(["build"], True, True)
                """
            ),
            encoding="utf-8",
        )
        (tmp_path / "02_build.py").write_text(
            textwrap.dedent(
                """
                def register(registry, logger):
                    registry.register_handler("pre-build", lambda ctx, args: "prepared")
                    registry.register_handler("build", lambda ctx, args: "built")
                """
            ),
            encoding="utf-8",
        )

        runner = create_runner(tasks_dir=tmp_path, debug=True)
        report = await runner.run()

        assert report.to_list() == [
            {"phase": "pre-build", "results": ["prepared"]},
            {"phase": "build", "results": ["built"]},
        ]
